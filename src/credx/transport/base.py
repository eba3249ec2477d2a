"""
Collaborator interfaces: broadcast transport, application registry, provider picker.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from credx.models.results import FollowUpAction


@dataclass(frozen=True)
class QueryResponse:
    """One provider's raw answer to a broadcast query."""

    responder: str
    response_id: int
    message: Optional[bytes]


@runtime_checkable
class QueryTransport(Protocol):
    async def query(self, data_type: str, message: bytes) -> list[QueryResponse]:
        """Broadcast a query and return every response received, in any order."""
        ...


@runtime_checkable
class ApplicationRegistry(Protocol):
    def find_providers(self, action: str) -> list[str]:
        """Application ids of installed apps that handle the action."""
        ...

    def signing_credentials(self, app_id: str) -> Optional[list[bytes]]:
        """Signing credential bytes of an installed app, or None when it is not installed."""
        ...


@runtime_checkable
class ProviderPicker(Protocol):
    async def choose(self, actions: Sequence["FollowUpAction"]) -> Optional["FollowUpAction"]:
        """Let the user pick one of the actions. None when the user declines."""
        ...
