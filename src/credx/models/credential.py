"""
Credential, Hint and TokenRequestInfo messages.
"""

from typing import Any, ClassVar, Optional

from pydantic import field_validator

from credx.models.base import ProtocolMessage, optional_text, optional_web_uri, require_text
from credx.models.identifiers import AuthenticationDomain, AuthenticationMethod
from credx.models.properties import AdditionalPropertiesContainer


class _AccountFields(AdditionalPropertiesContainer, ProtocolMessage):
    identifier: str
    authentication_method: AuthenticationMethod
    display_name: Optional[str] = None
    display_picture: Optional[str] = None
    id_token: Optional[str] = None

    @field_validator("identifier", mode="before")
    @classmethod
    def _check_identifier(cls, value: Any) -> str:
        return require_text(value, "identifier")

    @field_validator("display_name", "id_token", mode="before")
    @classmethod
    def _empty_to_none(cls, value: Any) -> Optional[str]:
        return optional_text(value)

    @field_validator("display_picture", mode="before")
    @classmethod
    def _check_display_picture(cls, value: Any) -> Optional[str]:
        return optional_web_uri(value)


class Credential(_AccountFields):
    """A credential for one authentication domain, as returned by a provider or handed over to be saved."""

    MESSAGE_TYPE: ClassVar[str] = "credential"

    authentication_domain: AuthenticationDomain
    password: Optional[str] = None

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, value: Any) -> Optional[str]:
        return optional_text(value)


class Hint(_AccountFields):
    """Account discovery data for sign-up, optionally carrying a provider-generated password."""

    MESSAGE_TYPE: ClassVar[str] = "hint"

    generated_password: Optional[str] = None

    @field_validator("generated_password", mode="before")
    @classmethod
    def _check_generated_password(cls, value: Any) -> Optional[str]:
        return optional_text(value)

    def to_credential(self, authentication_domain: AuthenticationDomain) -> Credential:
        """Credential for the requester's own domain built from this hint."""
        return Credential(
            identifier=self.identifier,
            authentication_method=self.authentication_method,
            authentication_domain=authentication_domain,
            display_name=self.display_name,
            display_picture=self.display_picture,
            password=self.generated_password,
            id_token=self.id_token,
            additional_properties=self.additional_properties,
        )


class TokenRequestInfo(AdditionalPropertiesContainer, ProtocolMessage):
    """Parameters for requesting a proof-of-access token from a token issuer."""

    MESSAGE_TYPE: ClassVar[str] = "token_request_info"

    DEFAULT: ClassVar["TokenRequestInfo"]

    client_id: Optional[str] = None
    nonce: Optional[str] = None

    @field_validator("client_id", "nonce", mode="before")
    @classmethod
    def _empty_to_none(cls, value: Any) -> Optional[str]:
        return optional_text(value)


TokenRequestInfo.DEFAULT = TokenRequestInfo()
