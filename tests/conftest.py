"""Shared fixtures and collaborator fakes."""

import base64
from typing import Optional, Sequence

import pytest

from credx.models.identifiers import AuthenticationDomain
from credx.models.requests import set_client_version
from credx.providers import KnownProviders
from credx.transport.base import QueryResponse

EXAMPLE_APP_ID = "com.example.app"
_EXAMPLE_APP_SIGNATURE_B64 = (
    "MIICwzCCAaugAwIBAgIEYUHE8DANBgkqhkiG9w0BAQsFADASMRAwDgYDVQQDEwd0"
    "ZXN0aW5nMB4XDTE3MDUxMDIxMTY1M1oXDTQ0MDkyNTIxMTY1M1owEjEQMA4GA1UE"
    "AxMHdGVzdGluZzCCASIwDQYJKoZIhvcNAQEBBQADggEPADCCAQoCggEBAJ2+5bxE"
    "24gsczcfwoAgJrerBGgew5rHiUYekp6nlfOlqQqJbC5KNKOr8qK1IF92MSrcphIw"
    "CWWkp67Bqqe49nK3ce9kVHqhXjaz9w4HVex3N3kWt1r7s08lNax/67vTrfQXlDnI"
    "1VDijm82vklmLtcXXnww10FQRKVdtxSkCmtUjmuYpLqFZY5cDIG5fpoeFhzoDolj"
    "pfmYkDsFGEUVOIilrM70rdwziEuvXPVGIzI8Lz88OkdamtQ2dtWSFP+4O8tv6qSW"
    "Q00/YAIm/RV2Z3NFIPma1n7GmTqm+QBM4lq8Irc24yL/a78nVT+fibfBOr7Iu02Z"
    "qy4Rpkosq4bfgt8CAwEAAaMhMB8wHQYDVR0OBBYEFJXEQr/2vuy2E2o2lz8LRbZW"
    "b/QzMA0GCSqGSIb3DQEBCwUAA4IBAQB5N++YqygWTFDwfCGgBT3pytaKVGbSujvB"
    "ChmBry2kfT5SpZcMerTboxq+0Jny50jS+2FAl0apKYC56R+FZC3Zg1qUBlqcCOrZ"
    "j2r7INQHWfiZo76zBjsaf9iDJwwDHKox5Bu8TK0Iux4hPi3J0hWg+MXDq6GUHQPT"
    "aFfxVAPNjnu+BnMrdw3YwEGxUBNTm0BeJruF2Hvzt9s/HOJ4y70dhlnz3McrxSQ2"
    "Tmlo1G0YwaTDO3jYDtD7CJ2V9EdAr9HjUeIlOiHwSHxDZexRxsiJf9rADP3Mqh7r"
    "I+gmzIbXs+UA7nsHXVgTyg5NviDbmYcu/hqKOLf1UeMwAEjQu0U9"
)
EXAMPLE_APP_SIGNATURE = base64.b64decode(_EXAMPLE_APP_SIGNATURE_B64 + "=" * (-len(_EXAMPLE_APP_SIGNATURE_B64) % 4))
EXAMPLE_APP_SHA512_HASH = "KSYmxK5qmKUKhNxHJYv__Tgg8nFXkm_w7mhJd_feckMWNqBXGK7yhZugh4OVI5ffJn8_V4SEN-mqetuIqiqPVA=="


def signing_key(app_id: str) -> bytes:
    return f"signing-key:{app_id}".encode()


def domain_of(app_id: str) -> AuthenticationDomain:
    return AuthenticationDomain.for_application(app_id, signing_key(app_id))


class FakeRegistry:
    """Installed apps by id. Each app handles the given actions."""

    def __init__(self, apps: Optional[dict[str, list[str]]] = None):
        self.apps = apps or {}

    def install(self, app_id: str, *actions: str) -> None:
        self.apps[app_id] = list(actions)

    def find_providers(self, action: str) -> list[str]:
        return [app_id for app_id, actions in self.apps.items() if action in actions]

    def signing_credentials(self, app_id: str) -> Optional[list[bytes]]:
        if app_id not in self.apps:
            return None
        return [signing_key(app_id)]


class FakeTransport:
    def __init__(self, responses: Sequence[QueryResponse] = ()):
        self.responses = list(responses)
        self.queries: list[tuple[str, bytes]] = []

    async def query(self, data_type: str, message: bytes) -> list[QueryResponse]:
        self.queries.append((data_type, message))
        return list(self.responses)


class FakePicker:
    def __init__(self, pick: Optional[str] = None):
        self.pick = pick
        self.offered: list = []

    async def choose(self, actions):
        self.offered = list(actions)
        for action in actions:
            if action.target == self.pick:
                return action
        return None


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def known(registry):
    """Recognises the apps 'com.known.a', 'com.known.b', 'com.known.c' and 'com.default'."""
    return KnownProviders(
        registry,
        [domain_of(app_id) for app_id in ("com.known.a", "com.known.b", "com.known.c", "com.default")],
    )


@pytest.fixture(autouse=True)
def _reset_shared_state():
    yield
    set_client_version(None)
    KnownProviders.reset_shared()
