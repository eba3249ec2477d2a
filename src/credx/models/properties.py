"""
Additional properties: the open str -> bytes extension map carried by every message.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from credx.errors import InvalidArgumentError

AdditionalProperties = dict[str, bytes]


def validate_additional_properties(properties: Any) -> AdditionalProperties:
    """Return a validated copy of the map. None means an empty map."""
    if properties is None:
        return {}
    if not isinstance(properties, dict):
        raise InvalidArgumentError(f"additional properties must be a mapping, got {type(properties).__name__}")
    validated: AdditionalProperties = {}
    for key, value in properties.items():
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError(f"additional property keys must be non-empty strings, got {key!r}")
        if isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        if not isinstance(value, bytes):
            raise InvalidArgumentError(f"additional property {key!r} must be bytes, got {type(value).__name__}")
        validated[key] = value
    return validated


def encode_string_value(value: str) -> bytes:
    return value.encode("utf-8")


def decode_string_value(value: Optional[bytes]) -> Optional[str]:
    if value is None:
        return None
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidArgumentError(f"additional property value is not valid UTF-8: {e}") from e


class AdditionalPropertiesContainer(BaseModel):
    """Mixin adding the additional properties field and its accessors."""

    additional_properties: AdditionalProperties = Field(default_factory=dict)

    @field_validator("additional_properties", mode="before")
    @classmethod
    def _check_additional_properties(cls, value: Any) -> AdditionalProperties:
        try:
            return validate_additional_properties(value)
        except InvalidArgumentError as e:
            raise ValueError(str(e)) from e

    def additional_property(self, key: str) -> Optional[bytes]:
        return self.additional_properties.get(key)

    def additional_property_as_str(self, key: str) -> Optional[str]:
        return decode_string_value(self.additional_properties.get(key))

    def with_additional_property(self, key: str, value: Optional[Any]):
        """Copy of this message with one property set. A str is UTF-8 encoded; None removes the key."""
        properties = dict(self.additional_properties)
        if value is None:
            properties.pop(key, None)
        else:
            properties[key] = encode_string_value(value) if isinstance(value, str) else value
        return self.derive(additional_properties=properties)

    def with_additional_properties(self, properties: Optional[dict[str, Any]]):
        """Copy of this message with the whole map replaced. None clears it."""
        return self.derive(additional_properties=properties)
