"""
Settings read from the environment (CREDX_*).
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from credx.constants import CLIENT_VENDOR
from credx.errors import MalformedIdentifierError
from credx.models.identifiers import AuthenticationDomain
from credx.providers import DEFAULT_PREFERRED_PROVIDER


class ExchangeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CREDX_", extra="ignore", case_sensitive=False)

    default_provider: Optional[str] = Field(
        default=str(DEFAULT_PREFERRED_PROVIDER),
        description="Application identity domain of the well-known default provider. Empty disables the rule.",
    )
    extra_known_providers: list[str] = Field(
        default_factory=list,
        description="Additional recognised provider domains.",
    )
    client_vendor: str = Field(default=CLIENT_VENDOR, min_length=1)

    @field_validator("default_provider", mode="before")
    @classmethod
    def _empty_default(cls, value):
        return value or None

    @field_validator("default_provider")
    @classmethod
    def _check_default(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            _check_domain(value)
        return value

    @field_validator("extra_known_providers")
    @classmethod
    def _check_extra(cls, value: list[str]) -> list[str]:
        for domain in value:
            _check_domain(domain)
        return value

    def default_provider_domain(self) -> Optional[AuthenticationDomain]:
        return AuthenticationDomain(self.default_provider) if self.default_provider else None

    def extra_provider_domains(self) -> list[AuthenticationDomain]:
        return [AuthenticationDomain(d) for d in self.extra_known_providers]


def _check_domain(value: str) -> None:
    try:
        AuthenticationDomain(value)
    except MalformedIdentifierError as e:
        raise ValueError(str(e)) from e
