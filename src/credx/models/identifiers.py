"""
URI-shaped identifiers: authentication domains and authentication methods.
"""

import base64
import functools
import hashlib
from typing import TYPE_CHECKING, Any, ClassVar, Optional
from urllib.parse import urlsplit

from pydantic_core import core_schema

from credx.errors import InvalidArgumentError, MalformedDataError, MalformedIdentifierError
from credx.transport.wire import decode_message, encode_message

if TYPE_CHECKING:
    from credx.transport.base import ApplicationRegistry

APP_ID_SCHEME = "app-id"
WEB_SCHEMES = ("http", "https")


def _split_identifier(kind: str, value: Any) -> tuple[str, str]:
    """Check the scheme://authority shape and return (scheme, authority)."""
    if not isinstance(value, str):
        raise MalformedIdentifierError(f"{kind} must be a string, got {type(value).__name__}")
    if not value or "?" in value or "#" in value:
        raise MalformedIdentifierError(f"{kind} {value!r} is not of the form scheme://authority")
    # urlsplit strips tabs and newlines before parsing
    if any(c.isspace() or not c.isprintable() for c in value):
        raise MalformedIdentifierError(f"{kind} {value!r} contains whitespace or control characters")
    try:
        parts = urlsplit(value)
    except ValueError as e:
        raise MalformedIdentifierError(f"{kind} {value!r} is not a valid URI: {e}") from e
    if not parts.scheme or value[: len(parts.scheme) + 3].lower() != parts.scheme + "://":
        raise MalformedIdentifierError(f"{kind} {value!r} is not an absolute hierarchical URI")
    if not parts.netloc:
        raise MalformedIdentifierError(f"{kind} {value!r} has no authority")
    if parts.path:
        raise MalformedIdentifierError(f"{kind} {value!r} must not have a path")
    return parts.scheme, parts.netloc


@functools.total_ordering
class _Identifier:
    __slots__ = ("_value", "_scheme", "_authority")

    KIND: ClassVar[str] = "identifier"

    def __init__(self, value: str):
        scheme, authority = _split_identifier(self.KIND, value)
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_scheme", scheme)
        object.__setattr__(self, "_authority", authority)

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def authority(self) -> str:
        return self._authority

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._value))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return (type(self), (self._value,))

    def to_bytes(self) -> bytes:
        return encode_message(self.KIND, {"value": self._value})

    @classmethod
    def from_bytes(cls, data: bytes):
        fields = decode_message(cls.KIND, data)
        try:
            return cls(fields.get("value"))
        except MalformedIdentifierError as e:
            raise MalformedDataError(f"Invalid {cls.KIND}: {e}") from e

    @classmethod
    def _coerce(cls, value: Any):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except MalformedIdentifierError as e:
            raise ValueError(str(e)) from e

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


class AuthenticationDomain(_Identifier):
    """Where a credential is valid: a web origin or an application identity.

    Application identities have the form ``app-id://<identity-hash>@<application-id>``.
    """

    __slots__ = ()

    KIND = "authentication_domain"

    def is_app_identity(self) -> bool:
        return self._scheme == APP_ID_SCHEME

    def is_web_domain(self) -> bool:
        return self._scheme in WEB_SCHEMES

    @property
    def application_id(self) -> str:
        if not self.is_app_identity() or "@" not in self._authority:
            raise InvalidArgumentError(f"{self._value!r} is not an application identity domain")
        app_id = self._authority.rsplit("@", 1)[1]
        return app_id.split(":", 1)[0]

    @property
    def identity_hash(self) -> Optional[str]:
        if not self.is_app_identity() or "@" not in self._authority:
            return None
        return self._authority.rsplit("@", 1)[0]

    @classmethod
    def for_application(cls, app_id: str, signing_credential: bytes) -> "AuthenticationDomain":
        """Derive the application identity domain from a signing credential."""
        if not app_id:
            raise InvalidArgumentError("app_id must not be empty")
        if not isinstance(signing_credential, (bytes, bytearray, memoryview)):
            raise InvalidArgumentError("signing_credential must be bytes")
        digest = hashlib.sha512(bytes(signing_credential)).digest()
        identity_hash = base64.urlsafe_b64encode(digest).decode("ascii")
        return cls(f"{APP_ID_SCHEME}://{identity_hash}@{app_id}")

    @classmethod
    def list_for_application(cls, registry: "ApplicationRegistry", app_id: str) -> list["AuthenticationDomain"]:
        """One domain per signing credential of the app. Empty when the app is not installed."""
        credentials = registry.signing_credentials(app_id)
        if not credentials:
            return []
        return [cls.for_application(app_id, credential) for credential in credentials]


class AuthenticationMethod(_Identifier):
    """How a credential is verified, e.g. a password or a federated identity provider."""

    __slots__ = ()

    KIND = "authentication_method"


class AuthenticationMethods:
    EMAIL = AuthenticationMethod("credx://email")
    PHONE = AuthenticationMethod("credx://phone")
    USER_NAME = AuthenticationMethod("credx://username")
    GOOGLE = AuthenticationMethod("https://accounts.google.com")
    FACEBOOK = AuthenticationMethod("https://www.facebook.com")
