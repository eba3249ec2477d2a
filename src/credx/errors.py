"""
credx error types.
"""

from typing import Any, Optional


class CredentialExchangeError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class InvalidArgumentError(CredentialExchangeError, ValueError):
    def __init__(self, message: str, code: str = "invalid_argument", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class MalformedIdentifierError(InvalidArgumentError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, "malformed_identifier", details)


class InvalidSpecificationError(InvalidArgumentError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, "invalid_specification", details)


class MalformedDataError(CredentialExchangeError):
    """Raised when a binary message cannot be decoded or fails re-validation.

    The lower-level error is chained as ``__cause__``.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("malformed_data", message, details)


class ProviderNotFoundError(CredentialExchangeError):
    def __init__(self, app_id: str):
        super().__init__("provider_not_found", f"No installed application {app_id!r}", {"app_id": app_id})
