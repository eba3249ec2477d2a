"""
Reduces the responses to a broadcast retrieve query to a single outcome.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from credx.errors import MalformedDataError
from credx.models.results import CredentialRetrieveResponse, FollowUpAction
from credx.transport.base import QueryResponse

logger = logging.getLogger(__name__)


class RetrieveOutcome(str, Enum):
    NOTHING_AVAILABLE = "nothing_available"
    SINGLE = "single"
    CHOICE = "choice"


@dataclass(frozen=True)
class AggregatedRetrieveResult:
    responses: dict[str, CredentialRetrieveResponse] = field(default_factory=dict)
    actions: tuple[FollowUpAction, ...] = ()

    @property
    def outcome(self) -> RetrieveOutcome:
        if not self.actions:
            return RetrieveOutcome.NOTHING_AVAILABLE
        if len(self.actions) == 1:
            return RetrieveOutcome.SINGLE
        return RetrieveOutcome.CHOICE

    @property
    def action(self) -> Optional[FollowUpAction]:
        """The sole follow-up action, when there is exactly one."""
        return self.actions[0] if len(self.actions) == 1 else None


class ResponseAggregator:
    """Validates per-provider retrieve responses.

    Undecodable responses, repeated responders and responses whose action
    targets a different app than the sender are dropped and logged; they never
    fail the batch.
    """

    def aggregate(self, responses: Iterable[QueryResponse]) -> AggregatedRetrieveResult:
        decoded: dict[str, CredentialRetrieveResponse] = {}
        for response in responses:
            if response.responder in decoded:
                logger.warning("Ignoring repeated response from %s", response.responder)
                continue
            if response.message is None:
                logger.warning("Empty response from %s", response.responder)
                continue
            try:
                message = CredentialRetrieveResponse.from_bytes(response.message)
            except MalformedDataError as e:
                logger.warning("Unable to decode response from %s: %s", response.responder, e)
                continue

            action = message.retrieve_action
            if action is not None and action.target != response.responder:
                logger.warning(
                    "Dropping response from %s: action targets %s", response.responder, action.target
                )
                continue
            decoded[response.responder] = message

        actions = tuple(
            decoded[app_id].retrieve_action
            for app_id in sorted(decoded)
            if decoded[app_id].retrieve_action is not None
        )
        logger.debug("Aggregated %d responses, %d actionable", len(decoded), len(actions))
        return AggregatedRetrieveResult(responses=decoded, actions=actions)
