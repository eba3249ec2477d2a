"""
Result messages returned by credential providers.
"""

from enum import IntEnum
from typing import Any, ClassVar, Optional

from pydantic import field_validator

from credx.models.base import ProtocolMessage, require_text
from credx.models.credential import Credential, Hint
from credx.models.properties import AdditionalPropertiesContainer


class _ResultCode(IntEnum):
    @classmethod
    def _missing_(cls, value: object):
        # Codes added by newer providers are read as UNSPECIFIED
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(0)
        return None


class CredentialRetrieveResultCode(_ResultCode):
    UNSPECIFIED = 0
    BAD_REQUEST = 1
    CREDENTIAL_SELECTED = 2
    NO_CREDENTIALS_AVAILABLE = 3
    USER_REQUESTS_MANUAL_AUTH = 4
    USER_CANCELED = 5
    USER_REFUSED = 6
    PROVIDER_REFUSED = 7


class HintRetrieveResultCode(_ResultCode):
    UNSPECIFIED = 0
    BAD_REQUEST = 1
    HINT_SELECTED = 2
    NO_HINTS_AVAILABLE = 3
    USER_REQUESTS_MANUAL_AUTH = 4
    USER_CANCELED = 5
    USER_REFUSED = 6
    PROVIDER_REFUSED = 7


class CredentialSaveResultCode(_ResultCode):
    UNSPECIFIED = 0
    BAD_REQUEST = 1
    SAVED = 2
    NO_PROVIDER_AVAILABLE = 3
    PROVIDER_REFUSED = 4
    USER_CANCELED = 5
    USER_REFUSED = 6


class CredentialDeleteResultCode(_ResultCode):
    UNSPECIFIED = 0
    BAD_REQUEST = 1
    DELETED = 2
    NO_MATCHING_CREDENTIAL = 3
    PROVIDER_REFUSED = 4
    USER_CANCELED = 5
    USER_REFUSED = 6


def _coerce_code(code_type: type[_ResultCode], value: Any) -> Any:
    if value is None:
        return code_type.UNSPECIFIED
    if isinstance(value, int) and not isinstance(value, bool):
        return code_type(value)
    return value


class _Result(AdditionalPropertiesContainer, ProtocolMessage):
    SUCCESS: ClassVar[int] = -1

    @property
    def succeeded(self) -> bool:
        return self.result_code == self.SUCCESS


class CredentialRetrieveResult(_Result):
    MESSAGE_TYPE: ClassVar[str] = "credential_retrieve_result"
    SUCCESS: ClassVar[int] = CredentialRetrieveResultCode.CREDENTIAL_SELECTED

    result_code: CredentialRetrieveResultCode = CredentialRetrieveResultCode.UNSPECIFIED
    credential: Optional[Credential] = None

    @field_validator("result_code", mode="before")
    @classmethod
    def _code(cls, value: Any) -> Any:
        return _coerce_code(CredentialRetrieveResultCode, value)


class HintRetrieveResult(_Result):
    MESSAGE_TYPE: ClassVar[str] = "hint_retrieve_result"
    SUCCESS: ClassVar[int] = HintRetrieveResultCode.HINT_SELECTED

    result_code: HintRetrieveResultCode = HintRetrieveResultCode.UNSPECIFIED
    hint: Optional[Hint] = None

    @field_validator("result_code", mode="before")
    @classmethod
    def _code(cls, value: Any) -> Any:
        return _coerce_code(HintRetrieveResultCode, value)


class CredentialSaveResult(_Result):
    MESSAGE_TYPE: ClassVar[str] = "credential_save_result"
    SUCCESS: ClassVar[int] = CredentialSaveResultCode.SAVED

    result_code: CredentialSaveResultCode = CredentialSaveResultCode.UNSPECIFIED

    @field_validator("result_code", mode="before")
    @classmethod
    def _code(cls, value: Any) -> Any:
        return _coerce_code(CredentialSaveResultCode, value)


class CredentialDeleteResult(_Result):
    MESSAGE_TYPE: ClassVar[str] = "credential_delete_result"
    SUCCESS: ClassVar[int] = CredentialDeleteResultCode.DELETED

    result_code: CredentialDeleteResultCode = CredentialDeleteResultCode.UNSPECIFIED

    @field_validator("result_code", mode="before")
    @classmethod
    def _code(cls, value: Any) -> Any:
        return _coerce_code(CredentialDeleteResultCode, value)


class FollowUpAction(ProtocolMessage):
    """What the requester should invoke next: an action on a target application, with an opaque request."""

    MESSAGE_TYPE: ClassVar[str] = "follow_up_action"

    target: str
    action: str
    request: bytes = b""

    @field_validator("target", "action", mode="before")
    @classmethod
    def _check_text(cls, value: Any, info) -> str:
        return require_text(value, info.field_name)

    @field_validator("request", mode="before")
    @classmethod
    def _check_request(cls, value: Any) -> Any:
        if value is None:
            return b""
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        return value


class CredentialRetrieveResponse(AdditionalPropertiesContainer, ProtocolMessage):
    """A provider's answer to a broadcast retrieve query."""

    MESSAGE_TYPE: ClassVar[str] = "credential_retrieve_response"

    retrieve_action: Optional[FollowUpAction] = None

    @property
    def has_action(self) -> bool:
        return self.retrieve_action is not None
