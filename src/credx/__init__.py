"""
credx: device-local credential exchange between apps and credential providers.

Validated protocol messages, password specifications, provider preference
and response aggregation.
"""

from credx.aggregator import AggregatedRetrieveResult, ResponseAggregator, RetrieveOutcome
from credx.client import AsyncCredentialClient, CredentialClient, ProviderSelection
from credx.config import ExchangeSettings
from credx.constants import VERSION
from credx.errors import (
    CredentialExchangeError,
    InvalidArgumentError,
    InvalidSpecificationError,
    MalformedDataError,
    MalformedIdentifierError,
    ProviderNotFoundError,
)
from credx.models.credential import Credential, Hint, TokenRequestInfo
from credx.models.identifiers import AuthenticationDomain, AuthenticationMethod, AuthenticationMethods
from credx.models.password import ConformanceFlag, PasswordSpecification, PasswordSpecificationBuilder
from credx.models.requests import (
    ClientVersion,
    CredentialDeleteRequest,
    CredentialRetrieveRequest,
    CredentialSaveRequest,
    HintRetrieveRequest,
)
from credx.models.results import (
    CredentialDeleteResult,
    CredentialDeleteResultCode,
    CredentialRetrieveResponse,
    CredentialRetrieveResult,
    CredentialRetrieveResultCode,
    CredentialSaveResult,
    CredentialSaveResultCode,
    FollowUpAction,
    HintRetrieveResult,
    HintRetrieveResultCode,
)
from credx.providers import KnownProviders, ProviderPreference, ProviderResolver
from credx.transport.base import ApplicationRegistry, ProviderPicker, QueryResponse, QueryTransport

__version__ = VERSION
__all__ = [
    "AsyncCredentialClient",
    "CredentialClient",
    "ProviderSelection",
    "ExchangeSettings",
    "CredentialExchangeError",
    "InvalidArgumentError",
    "InvalidSpecificationError",
    "MalformedDataError",
    "MalformedIdentifierError",
    "ProviderNotFoundError",
    "AuthenticationDomain",
    "AuthenticationMethod",
    "AuthenticationMethods",
    "Credential",
    "Hint",
    "TokenRequestInfo",
    "ConformanceFlag",
    "PasswordSpecification",
    "PasswordSpecificationBuilder",
    "ClientVersion",
    "CredentialRetrieveRequest",
    "HintRetrieveRequest",
    "CredentialSaveRequest",
    "CredentialDeleteRequest",
    "CredentialRetrieveResult",
    "CredentialRetrieveResultCode",
    "HintRetrieveResult",
    "HintRetrieveResultCode",
    "CredentialSaveResult",
    "CredentialSaveResultCode",
    "CredentialDeleteResult",
    "CredentialDeleteResultCode",
    "CredentialRetrieveResponse",
    "FollowUpAction",
    "KnownProviders",
    "ProviderPreference",
    "ProviderResolver",
    "AggregatedRetrieveResult",
    "ResponseAggregator",
    "RetrieveOutcome",
    "QueryTransport",
    "QueryResponse",
    "ApplicationRegistry",
    "ProviderPicker",
]
