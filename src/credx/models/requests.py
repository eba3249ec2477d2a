"""
Request messages sent by a requester to credential providers.
"""

from typing import Annotated, Any, ClassVar, Optional, Union

from pydantic import AfterValidator, BeforeValidator, Field, field_validator

from credx._once import OnceCell
from credx.constants import CLIENT_VENDOR, VERSION
from credx.models.base import ProtocolMessage, is_uri, require_text
from credx.models.credential import Credential, TokenRequestInfo
from credx.models.identifiers import AuthenticationMethod
from credx.models.password import PasswordSpecification
from credx.models.properties import AdditionalPropertiesContainer


def parse_version_part(part: Optional[str]) -> int:
    """Parse one component of a dotted version. Empty, invalid or negative parts give 0."""
    if not part:
        return 0
    try:
        number = int(part)
    except ValueError:
        return 0
    return max(number, 0)


class ClientVersion(ProtocolMessage):
    """Version of the requesting client library, sent with every request."""

    MESSAGE_TYPE: ClassVar[str] = "client_version"

    vendor: str
    major: int = 0
    minor: int = 0
    patch: int = 0

    @field_validator("vendor", mode="before")
    @classmethod
    def _check_vendor(cls, value: Any) -> str:
        return require_text(value, "vendor")

    @field_validator("major", "minor", "patch")
    @classmethod
    def _check_part(cls, value: int) -> int:
        if value < 0:
            raise ValueError("version parts must not be negative")
        return value

    @classmethod
    def from_version_string(cls, version: str, vendor: str = CLIENT_VENDOR) -> "ClientVersion":
        parts = (version or "").split(".")
        parts += [""] * (3 - len(parts))
        return cls(
            vendor=vendor,
            major=parse_version_part(parts[0]),
            minor=parse_version_part(parts[1]),
            patch=parse_version_part(parts[2]),
        )

    def __str__(self) -> str:
        return f"{self.vendor}/{self.major}.{self.minor}.{self.patch}"


_client_version: OnceCell[ClientVersion] = OnceCell()


def get_client_version() -> ClientVersion:
    """Client version attached to outbound requests, built from the package version."""
    return _client_version.get_or_init(lambda: ClientVersion.from_version_string(VERSION))


def set_client_version(version: Optional[ClientVersion]) -> None:
    """Override the client version. None restores the build version. Intended for tests."""
    _client_version.clear()
    if version is not None:
        _client_version.set_if_absent(version)


def _to_method_tuple(value: Any) -> Any:
    if isinstance(value, (str, AuthenticationMethod)):
        return (value,)
    return value


def _sorted_methods(value: tuple[AuthenticationMethod, ...]) -> tuple[AuthenticationMethod, ...]:
    if not value:
        raise ValueError("at least one authentication method is required")
    return tuple(sorted(set(value)))


def _check_token_providers(value: Any) -> Any:
    if value is None:
        return {}
    if not isinstance(value, dict):
        return value
    checked = {}
    for issuer, info in value.items():
        if not isinstance(issuer, str) or not is_uri(issuer, frozenset({"https"})):
            raise ValueError(f"token provider {issuer!r} is not an https URI")
        checked[issuer] = TokenRequestInfo.DEFAULT if info is None else info
    return checked


AuthenticationMethodSet = Annotated[
    tuple[AuthenticationMethod, ...], BeforeValidator(_to_method_tuple), AfterValidator(_sorted_methods)
]
TokenProviders = Annotated[dict[str, TokenRequestInfo], BeforeValidator(_check_token_providers)]


class _Request(AdditionalPropertiesContainer, ProtocolMessage):
    client_version: ClientVersion = Field(default_factory=get_client_version)


class CredentialRetrieveRequest(_Request):
    """Ask providers for an existing credential usable with one of the given methods."""

    MESSAGE_TYPE: ClassVar[str] = "credential_retrieve_request"

    authentication_methods: AuthenticationMethodSet
    token_providers: TokenProviders = Field(default_factory=dict)
    require_user_mediation: bool = False

    @classmethod
    def for_authentication_methods(
        cls, *methods: Union[str, AuthenticationMethod], **fields: Any
    ) -> "CredentialRetrieveRequest":
        return cls(authentication_methods=methods, **fields)


class HintRetrieveRequest(_Request):
    """Ask providers for account hints, with the password shape to use for generated passwords."""

    MESSAGE_TYPE: ClassVar[str] = "hint_retrieve_request"

    authentication_methods: AuthenticationMethodSet
    token_providers: TokenProviders = Field(default_factory=dict)
    password_spec: PasswordSpecification = Field(default_factory=lambda: PasswordSpecification.DEFAULT)

    @field_validator("password_spec", mode="before")
    @classmethod
    def _default_spec(cls, value: Any) -> Any:
        return PasswordSpecification.DEFAULT if value is None else value

    @classmethod
    def for_authentication_methods(
        cls, *methods: Union[str, AuthenticationMethod], **fields: Any
    ) -> "HintRetrieveRequest":
        return cls(authentication_methods=methods, **fields)


class CredentialSaveRequest(_Request):
    """Ask a provider to store a credential."""

    MESSAGE_TYPE: ClassVar[str] = "credential_save_request"

    credential: Credential

    @classmethod
    def from_credential(cls, credential: Credential, **fields: Any) -> "CredentialSaveRequest":
        return cls(credential=credential, **fields)


class CredentialDeleteRequest(_Request):
    """Ask a provider to delete a stored credential."""

    MESSAGE_TYPE: ClassVar[str] = "credential_delete_request"

    credential: Credential

    @classmethod
    def from_credential(cls, credential: Credential, **fields: Any) -> "CredentialDeleteRequest":
        return cls(credential=credential, **fields)
