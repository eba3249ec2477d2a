"""
Binary wire framing for protocol messages.

Frame layout (msgpack map):
  v: wire format version
  t: message type tag
  m: message fields; absent optional fields are omitted, unknown ones ignored
"""

from typing import Any

import msgpack
from msgpack.exceptions import UnpackException

from credx.errors import MalformedDataError

WIRE_VERSION = 1


def encode_message(message_type: str, fields: dict[str, Any]) -> bytes:
    """Build a frame for the given message fields."""
    return msgpack.packb({"v": WIRE_VERSION, "t": message_type, "m": fields}, use_bin_type=True)


def decode_message(message_type: str, data: Any) -> dict[str, Any]:
    """Parse a frame and return its fields. Raises MalformedDataError on any framing problem."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise MalformedDataError(f"Expected bytes for {message_type}, got {type(data).__name__}")
    try:
        frame = msgpack.unpackb(bytes(data), raw=False)
    except (UnpackException, ValueError, TypeError) as e:
        raise MalformedDataError(f"Unable to decode {message_type}: {e}") from e

    if not isinstance(frame, dict):
        raise MalformedDataError(f"Unable to decode {message_type}: frame is not a map")
    version = frame.get("v")
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise MalformedDataError(f"Unable to decode {message_type}: bad wire version {version!r}")
    if frame.get("t") != message_type:
        raise MalformedDataError(
            f"Unable to decode {message_type}: frame carries {frame.get('t')!r}",
            details={"expected": message_type, "actual": frame.get("t")},
        )
    fields = frame.get("m")
    if not isinstance(fields, dict):
        raise MalformedDataError(f"Unable to decode {message_type}: missing message body")
    return fields
