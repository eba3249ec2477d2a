"""
Base class and shared field checks for protocol messages.
"""

from typing import Any, ClassVar, Optional, TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, ValidationError

from credx.errors import InvalidArgumentError, MalformedDataError
from credx.transport.wire import decode_message, encode_message

M = TypeVar("M", bound="ProtocolMessage")

WEB_SCHEMES = frozenset({"http", "https"})


def _describe(ex: ValidationError) -> str:
    parts = []
    for error in ex.errors(include_url=False):
        loc = ".".join(str(p) for p in error.get("loc", ())) or "value"
        parts.append(f"{loc}: {error.get('msg')}")
    return "; ".join(parts)


class ProtocolMessage(BaseModel):
    """Immutable, validated protocol value with a binary form.

    Keyword construction validates every field; ``from_bytes`` runs the same
    validation over decoded fields, so there is no trusted decode path.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    MESSAGE_TYPE: ClassVar[str] = "message"
    INVALID_ERROR: ClassVar[type[InvalidArgumentError]] = InvalidArgumentError

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as ex:
            raise self.INVALID_ERROR(
                f"Invalid {self.MESSAGE_TYPE}: {_describe(ex)}",
                details={"errors": [e.get("msg") for e in ex.errors(include_url=False)]},
            ) from ex

    # Decoding and nested validation call the validator directly, not this wrapper
    __init__.__pydantic_base_init__ = True

    @classmethod
    def from_fields(cls: type[M], fields: dict[str, Any]) -> M:
        try:
            return cls.model_validate(fields)
        except ValidationError as ex:
            raise MalformedDataError(f"Invalid {cls.MESSAGE_TYPE}: {_describe(ex)}") from ex

    @classmethod
    def from_bytes(cls: type[M], data: bytes) -> M:
        """Decode and re-validate a message. Raises MalformedDataError."""
        return cls.from_fields(decode_message(cls.MESSAGE_TYPE, data))

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_bytes(self) -> bytes:
        return encode_message(self.MESSAGE_TYPE, self.to_fields())

    def derive(self: M, **changes: Any) -> M:
        """Build a new instance from this one with some fields replaced, fully re-validated."""
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise InvalidArgumentError(f"Unknown {self.MESSAGE_TYPE} fields: {sorted(unknown)}")
        fields = {name: getattr(self, name) for name in type(self).model_fields}
        fields.update(changes)
        return type(self)(**fields)


def require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")
    return value


def optional_text(value: Any) -> Optional[str]:
    """Empty strings count as absent."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError("must be a string")
    return value


def is_uri(value: str, schemes: Optional[frozenset[str]] = None) -> bool:
    """Absolute hierarchical URI with a non-empty authority. Path, query and fragment allowed."""
    if any(c.isspace() or not c.isprintable() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not parts.netloc:
        return False
    if value[: len(parts.scheme) + 3].lower() != parts.scheme + "://":
        return False
    return schemes is None or parts.scheme in schemes


def optional_web_uri(value: Any) -> Optional[str]:
    text = optional_text(value)
    if text is not None and not is_uri(text, WEB_SCHEMES):
        raise ValueError(f"{text!r} is not an http or https URI")
    return text
