"""Provider factory: resolves a vendor id and credential to a cached adapter."""

from __future__ import annotations

import hashlib
import logging
import threading
from typing import TYPE_CHECKING, Callable

from storeagent.credentials import CredentialStore
from storeagent.errors import InvalidProvider
from storeagent.http import HttpClient, HttpxClient
from storeagent.providers.anthropic import create_anthropic
from storeagent.providers.base import Provider
from storeagent.providers.deepseek import create_deepseek
from storeagent.providers.google import create_google
from storeagent.providers.openai import create_openai
from storeagent.providers.xai import create_xai

if TYPE_CHECKING:
    from storeagent.config import ConfigStore
    from storeagent.usage import UsageLedger

log = logging.getLogger(__name__)

ProviderFactoryFn = Callable[[str, "HttpClient | None", "UsageLedger | None"], Provider]

DEFAULT_PROVIDERS: dict[str, ProviderFactoryFn] = {
    "openai": create_openai,
    "anthropic": create_anthropic,
    "google": create_google,
    "xai": create_xai,
    "deepseek": create_deepseek,
}


class ProviderFactory:
    """Creates provider adapters and caches them per (vendor, credential).

    The cache and the usage ledger belong to whoever builds the factory;
    there is no module-level state.
    """

    def __init__(
        self,
        store: ConfigStore,
        http_client: HttpClient | None = None,
        ledger: UsageLedger | None = None,
        credentials: CredentialStore | None = None,
    ):
        self.store = store
        self.http = http_client or HttpxClient()
        self.ledger = ledger
        self.credentials = credentials or CredentialStore(store)
        self._factories: dict[str, ProviderFactoryFn] = dict(DEFAULT_PROVIDERS)
        self._instances: dict[str, Provider] = {}
        self._lock = threading.Lock()

    @property
    def provider_ids(self) -> list[str]:
        return list(self._factories)

    def register_provider(self, provider_id: str, factory_fn: ProviderFactoryFn) -> None:
        """Add a vendor. The first registration of an id wins."""
        with self._lock:
            if provider_id in self._factories:
                raise InvalidProvider(f"AI provider already registered: {provider_id}")
            self._factories[provider_id] = factory_fn
        log.debug("Registered provider %s", provider_id)

    def create(self, provider_id: str, credential: str | None = None) -> Provider:
        """Adapter for ``provider_id``; the stored key is used when none is given."""
        factory_fn = self._factories.get(provider_id)
        if factory_fn is None:
            raise InvalidProvider(
                f"Invalid AI provider: {provider_id}",
                hint=f"Known providers: {', '.join(self._factories)}",
            )
        if credential is None:
            credential = self.credentials.get(provider_id)

        cache_key = _cache_key(provider_id, credential)
        with self._lock:
            instance = self._instances.get(cache_key)
            if instance is None:
                instance = factory_fn(credential, self.http, self.ledger)
                self._instances[cache_key] = instance
                log.debug("Created %s provider instance", provider_id)
        return instance

    def get_configured_provider(self) -> Provider:
        """The vendor selected in config, with its stored key and model."""
        provider_id = self.store.get("provider", "openai")
        provider = self.create(provider_id, self.credentials.get(provider_id))
        # Cached instances are shared; a cleared selection means the default
        provider.model = self.store.get("model") or provider.default_model
        return provider

    def save_credential(self, provider_id: str, api_key: str) -> None:
        if provider_id not in self._factories:
            raise InvalidProvider(f"Invalid AI provider: {provider_id}")
        self.credentials.save(provider_id, api_key)

    def get_credential(self, provider_id: str) -> str:
        return self.credentials.get(provider_id)

    def available_providers(self) -> list[dict]:
        providers = []
        for provider_id in self.provider_ids:
            instance = self.create(provider_id)
            providers.append({
                "id": provider_id,
                "name": instance.name,
                "configured": instance.is_configured(),
            })
        return providers

    def validate_credential(self, provider_id: str, credential: str | None = None) -> None:
        """Raises NotConfigured/ApiError/InvalidResponse when the key does not work."""
        self.create(provider_id, credential).validate_credential()


def _cache_key(provider_id: str, credential: str) -> str:
    digest = hashlib.sha256((credential or "").encode("utf-8")).hexdigest()
    return f"{provider_id}_{digest}"
