"""
CredentialClient / AsyncCredentialClient: requester-side orchestration.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from credx.aggregator import AggregatedRetrieveResult, ResponseAggregator, RetrieveOutcome
from credx.config import ExchangeSettings
from credx.constants import (
    CREDENTIAL_DATA_TYPE,
    DELETE_CREDENTIAL_ACTION,
    HINT_CREDENTIAL_ACTION,
    SAVE_CREDENTIAL_ACTION,
    VERSION,
)
from credx.errors import CredentialExchangeError, ProviderNotFoundError
from credx.models.base import ProtocolMessage
from credx.models.identifiers import AuthenticationDomain
from credx.models.requests import (
    ClientVersion,
    CredentialDeleteRequest,
    CredentialRetrieveRequest,
    CredentialSaveRequest,
    HintRetrieveRequest,
)
from credx.models.results import FollowUpAction
from credx.providers import KnownProviders, ProviderPreference, ProviderResolver
from credx.transport.base import ApplicationRegistry, ProviderPicker, QueryTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSelection:
    """Providers able to handle an action, and the encoded request to send them."""

    action: str
    request: bytes
    preferred: Optional[str]
    candidates: tuple[str, ...]

    @property
    def requires_choice(self) -> bool:
        return self.preferred is None and len(self.candidates) > 0

    @property
    def follow_up(self) -> Optional[FollowUpAction]:
        """Action for the preferred provider, if there is one."""
        if self.preferred is None:
            return None
        return FollowUpAction(target=self.preferred, action=self.action, request=self.request)

    def actions(self) -> list[FollowUpAction]:
        return [FollowUpAction(target=app_id, action=self.action, request=self.request) for app_id in self.candidates]


class AsyncCredentialClient:
    """Async credential client (primary)."""

    def __init__(
        self,
        transport: QueryTransport,
        registry: ApplicationRegistry,
        picker: Optional[ProviderPicker] = None,
        known_providers: Optional[KnownProviders] = None,
        settings: Optional[ExchangeSettings] = None,
    ):
        self.settings = settings or ExchangeSettings()
        self.transport = transport
        self.registry = registry
        self.picker = picker

        if known_providers is None:
            known_providers = KnownProviders(registry)
        extras = self.settings.extra_provider_domains()
        if extras:
            # The injected instance may be shared; extend a private copy
            known_providers = KnownProviders(registry, known_providers.providers | set(extras))
        self.known_providers = known_providers

        self.resolver = ProviderResolver(known_providers, default_provider=self.settings.default_provider_domain())
        self.aggregator = ResponseAggregator()
        self._client_version = ClientVersion.from_version_string(VERSION, vendor=self.settings.client_vendor)

    def _encode(self, request: ProtocolMessage) -> bytes:
        if request.client_version != self._client_version:
            request = request.derive(client_version=self._client_version)
        return request.to_bytes()

    async def query_retrieve(self, request: CredentialRetrieveRequest) -> AggregatedRetrieveResult:
        """Broadcast a retrieve request and aggregate the answers."""
        responses = await self.transport.query(CREDENTIAL_DATA_TYPE, self._encode(request))
        return self.aggregator.aggregate(responses)

    async def retrieve(self, request: CredentialRetrieveRequest) -> Optional[FollowUpAction]:
        """Follow-up action for the provider to retrieve from, or None when there is nothing to retrieve."""
        result = await self.query_retrieve(request)
        if result.outcome == RetrieveOutcome.NOTHING_AVAILABLE:
            return None
        if result.outcome == RetrieveOutcome.SINGLE:
            return result.action

        by_target = {action.target: action for action in result.actions}
        preference = self.resolver.resolve(by_target)
        if preference.preferred is not None:
            return by_target[preference.preferred]
        return await self._choose(list(result.actions))

    async def _choose(self, actions: list[FollowUpAction]) -> Optional[FollowUpAction]:
        if self.picker is None:
            raise CredentialExchangeError(
                "picker_unavailable",
                "Several providers are available and no picker is configured",
                {"targets": [a.target for a in actions]},
            )
        chosen = await self.picker.choose(actions)
        logger.debug("Picker returned %s", chosen.target if chosen else None)
        return chosen

    def provider_domains(self, app_id: str) -> list[AuthenticationDomain]:
        """Identity domains of an installed provider. Raises ProviderNotFoundError when it is not installed."""
        domains = self.known_providers.domains_for(app_id)
        if not domains:
            raise ProviderNotFoundError(app_id)
        return domains

    def select_provider(self, action: str) -> ProviderPreference:
        """Resolve the implicit provider for an action among the installed handlers."""
        return self.resolver.resolve(self.registry.find_providers(action))

    def _selection(self, action: str, request: ProtocolMessage) -> Optional[ProviderSelection]:
        preference = self.select_provider(action)
        if not preference.candidates:
            logger.debug("No provider handles %s", action)
            return None
        return ProviderSelection(
            action=action,
            request=self._encode(request),
            preferred=preference.preferred,
            candidates=preference.candidates,
        )

    def hint_action(self, request: HintRetrieveRequest) -> Optional[ProviderSelection]:
        return self._selection(HINT_CREDENTIAL_ACTION, request)

    def save_action(self, request: CredentialSaveRequest) -> Optional[ProviderSelection]:
        return self._selection(SAVE_CREDENTIAL_ACTION, request)

    def delete_action(self, request: CredentialDeleteRequest) -> Optional[ProviderSelection]:
        return self._selection(DELETE_CREDENTIAL_ACTION, request)

    async def follow_up(self, selection: Optional[ProviderSelection]) -> Optional[FollowUpAction]:
        """The preferred provider's action, otherwise the user's choice among all candidates."""
        if selection is None:
            return None
        if selection.follow_up is not None:
            return selection.follow_up
        return await self._choose(selection.actions())


class CredentialClient:
    """Sync wrapper around AsyncCredentialClient. Runs the event loop internally."""

    def __init__(self, *args: Any, **kwargs: Any):
        self._async = AsyncCredentialClient(*args, **kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def known_providers(self) -> KnownProviders:
        return self._async.known_providers

    @property
    def resolver(self) -> ProviderResolver:
        return self._async.resolver

    def query_retrieve(self, request: CredentialRetrieveRequest) -> AggregatedRetrieveResult:
        return self._run(self._async.query_retrieve(request))

    def retrieve(self, request: CredentialRetrieveRequest) -> Optional[FollowUpAction]:
        return self._run(self._async.retrieve(request))

    def provider_domains(self, app_id: str) -> list[AuthenticationDomain]:
        return self._async.provider_domains(app_id)

    def select_provider(self, action: str) -> ProviderPreference:
        return self._async.select_provider(action)

    def hint_action(self, request: HintRetrieveRequest) -> Optional[ProviderSelection]:
        return self._async.hint_action(request)

    def save_action(self, request: CredentialSaveRequest) -> Optional[ProviderSelection]:
        return self._async.save_action(request)

    def delete_action(self, request: CredentialDeleteRequest) -> Optional[ProviderSelection]:
        return self._async.delete_action(request)

    def follow_up(self, selection: Optional[ProviderSelection]) -> Optional[FollowUpAction]:
        return self._run(self._async.follow_up(selection))

    def close(self) -> None:
        self._loop.close()
