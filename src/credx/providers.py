"""
Recognised credential providers and the implicit provider preference.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from credx._once import OnceCell
from credx.models.identifiers import AuthenticationDomain
from credx.transport.base import ApplicationRegistry

logger = logging.getLogger(__name__)

DASHLANE_PROVIDER = AuthenticationDomain(
    "app-id://DcxjRReUBVOOF1ztasdT8TO_5z-2aFWBTliZC8pMuy0rQomVAPv88RfGomI4dJS2CEVNJuu1jSIGBamB1Ni9iw==@com.dashlane"
)
GOOGLE_PROVIDER = AuthenticationDomain(
    "app-id://7fmduHKTdHHrlMvldlEqAIlSfii1tl35bxj1OXN5Ve8c4lU6URVu4xtSHc3BVZxS6WWJnxMDhIfQN0N0K2NDJg==@com.google.android.gms"
)
KEEPER_PROVIDER = AuthenticationDomain(
    "app-id://qLhgSEs508k28WNBOalEFKqiNiUsWQ81o-OKOc9i__pfAPc-eCrhdbQe9Gak2DopEEsI6rc12KwmPYoaNg-zEg==@com.callpod.android_apps.keeper"
)
LASTPASS_PROVIDER = AuthenticationDomain(
    "app-id://d5XXKGMGcVvMZ7bw3-Aotgq035ClbqO7RwDQG7x6P7ofwLxW42VRYL8jScbFfyW7hLyXYZEmrPrPsYqkJfDeNQ==@com.lastpass.lpandroid"
)
ONEPASSWORD_PROVIDER = AuthenticationDomain(
    "app-id://13u4RbkHxfV1nNgX9TJADGCzjyANu3HBL6IPPj8LO82UiGvPNYngjSJfIWT-FsxaaEGz0QKEqrhgtlxM-DF8ow==@com.agilebits.onepassword"
)
ROBOFORM_PROVIDER = AuthenticationDomain(
    "app-id://JY5BCpB1lKVw_KSpeji4Pp9znAYiho9rDyETFaAC-nCMhNpekHTlp45wMt7YDwe8FcMW5wrSBYLWeKEIdes77g==@com.siber.roboform"
)

DEFAULT_KNOWN_PROVIDERS = frozenset(
    {
        DASHLANE_PROVIDER,
        GOOGLE_PROVIDER,
        KEEPER_PROVIDER,
        LASTPASS_PROVIDER,
        ONEPASSWORD_PROVIDER,
        ROBOFORM_PROVIDER,
    }
)

DEFAULT_PREFERRED_PROVIDER = GOOGLE_PROVIDER


def _as_domain(value: Union[str, AuthenticationDomain]) -> AuthenticationDomain:
    return value if isinstance(value, AuthenticationDomain) else AuthenticationDomain(value)


class KnownProviders:
    """The set of recognised provider identities.

    A candidate app is recognised when one of its signing identities, as
    reported by the registry, is in the set.
    """

    _shared: OnceCell["KnownProviders"] = OnceCell()

    def __init__(
        self,
        registry: ApplicationRegistry,
        providers: Optional[Iterable[Union[str, AuthenticationDomain]]] = None,
    ):
        self._registry = registry
        self._lock = threading.Lock()
        if providers is None:
            self._providers = DEFAULT_KNOWN_PROVIDERS
        else:
            self._providers = frozenset(_as_domain(p) for p in providers)

    @classmethod
    def shared(cls, registry: ApplicationRegistry) -> "KnownProviders":
        """Process-wide instance. Concurrent first calls all get the same one."""
        return cls._shared.get_or_init(lambda: cls(registry))

    @classmethod
    def reset_shared(cls) -> None:
        cls._shared.clear()

    @property
    def registry(self) -> ApplicationRegistry:
        return self._registry

    @property
    def providers(self) -> frozenset[AuthenticationDomain]:
        return self._providers

    def domains_for(self, app_id: str) -> list[AuthenticationDomain]:
        return AuthenticationDomain.list_for_application(self._registry, app_id)

    def is_known(self, app_id: str) -> bool:
        providers = self._providers
        return any(domain in providers for domain in self.domains_for(app_id))

    def is_known_domain(self, domain: Union[str, AuthenticationDomain]) -> bool:
        return _as_domain(domain) in self._providers

    def add_known_provider(self, domain: Union[str, AuthenticationDomain]) -> None:
        with self._lock:
            self._providers = self._providers | {_as_domain(domain)}

    def reset_to_default(self) -> None:
        with self._lock:
            self._providers = DEFAULT_KNOWN_PROVIDERS


@dataclass(frozen=True)
class ProviderPreference:
    """Resolver output. ``preferred`` is None when there is no implicit choice."""

    preferred: Optional[str]
    candidates: tuple[str, ...] = ()

    @property
    def requires_choice(self) -> bool:
        return self.preferred is None and len(self.candidates) > 0


class ProviderResolver:
    """Picks at most one provider to use without asking the user.

    An unrecognised candidate always forces an explicit choice. A single
    recognised candidate is preferred. With exactly two recognised candidates
    where one is the default provider, the other one is preferred, since it
    was installed deliberately.
    """

    def __init__(
        self,
        known_providers: KnownProviders,
        default_provider: Optional[Union[str, AuthenticationDomain]] = DEFAULT_PREFERRED_PROVIDER,
    ):
        self.known_providers = known_providers
        self.default_provider = _as_domain(default_provider) if default_provider is not None else None

    def _is_default(self, app_id: str) -> bool:
        if self.default_provider is None:
            return False
        return self.default_provider in self.known_providers.domains_for(app_id)

    def resolve(self, candidates: Iterable[str]) -> ProviderPreference:
        ordered = tuple(dict.fromkeys(candidates))
        recognised = []
        for app_id in ordered:
            if not self.known_providers.is_known(app_id):
                logger.debug("Unrecognised provider %s, explicit choice required", app_id)
                return ProviderPreference(None, ordered)
            recognised.append(app_id)

        preferred = None
        if len(recognised) == 1:
            preferred = recognised[0]
        elif len(recognised) == 2:
            defaults = [app_id for app_id in recognised if self._is_default(app_id)]
            if len(defaults) == 1:
                preferred = recognised[0] if recognised[1] == defaults[0] else recognised[1]

        logger.debug("Resolved providers %s -> %s", list(ordered), preferred)
        return ProviderPreference(preferred, ordered)
