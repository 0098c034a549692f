"""Provider/model registry with persisted selection and enabled flags."""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from runmark.config import Settings
from runmark.providers.credentials import CredentialKind, CredentialStore
from runmark.providers.models import BUILTIN_PROVIDERS, ModelRecord, ProviderRecord

LOGGER = logging.getLogger(__name__)

LOCAL_PROVIDER = "ollama"


class RegistryError(Exception):
    """Unknown provider/model or failed model discovery."""

    pass


class RegistryState(BaseModel):
    """Preferences persisted between sessions."""

    selected_provider: str = LOCAL_PROVIDER
    selected_model: str = ""
    enabled_models: dict[str, bool] = Field(default_factory=dict)
    fetched_models: dict[str, list[str]] = Field(default_factory=dict)


class ProviderRegistry:
    """Enumerates providers and their models for the chat client.

    Selection and per-model enabled flags are written to ``path`` on every
    change. Keys and base URL overrides are read from the credential store.
    """

    def __init__(
        self,
        path: Path,
        credentials: CredentialStore,
        providers: Iterable[ProviderRecord] = BUILTIN_PROVIDERS,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the registry.

        Args:
            path: JSON file for persisted preferences
            credentials: Store consulted for API keys and base URLs
            providers: Provider records to expose
            client: Optional HTTP client (a short-lived one is used otherwise)
            timeout: Request timeout for model discovery
        """
        self.path = path
        self.credentials = credentials
        self._providers = {record.id: record for record in providers}
        self._client = client
        self.timeout = timeout
        self.state = self._load()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        """Build a registry backed by the configured data directory."""
        providers = [
            record.model_copy(update={"base_url": settings.ollama_api_base})
            if record.id == LOCAL_PROVIDER
            else record
            for record in BUILTIN_PROVIDERS
        ]
        return cls(
            settings.registry_path,
            CredentialStore(settings.credentials_path),
            providers=providers,
            timeout=settings.request_timeout,
        )

    # Providers

    def providers(self) -> list[ProviderRecord]:
        return list(self._providers.values())

    def get_provider(self, provider_id: str) -> ProviderRecord:
        """Look up a provider record.

        Raises:
            RegistryError: If the id is unknown
        """
        try:
            return self._providers[provider_id]
        except KeyError:
            raise RegistryError(
                f"Unknown provider: {provider_id}. "
                f"Known providers: {', '.join(self._providers)}"
            ) from None

    def has_api_key(self, provider_id: str) -> bool:
        """Check if a provider is usable from a credentials standpoint."""
        record = self.get_provider(provider_id)
        if not record.requires_api_key:
            return True
        return self.credentials.has(provider_id)

    def validate_api_key(self, provider_id: str, key: str) -> bool:
        """Check an API key's format for a provider (no network call)."""
        return self.get_provider(provider_id).accepts_key(key)

    def available_providers(self) -> list[ProviderRecord]:
        """Providers that need no key or have one stored."""
        return [p for p in self._providers.values() if self.has_api_key(p.id)]

    def base_url(self, provider_id: str) -> str:
        """Stored base URL override, falling back to the provider default."""
        record = self.get_provider(provider_id)
        override = self.credentials.get(provider_id, CredentialKind.BASE_URL)
        return (override or record.base_url).rstrip("/")

    # Models

    def models(self, provider_id: Optional[str] = None) -> list[ModelRecord]:
        """List model records, optionally for a single provider."""
        if provider_id is None:
            records = self.providers()
        else:
            records = [self.get_provider(provider_id)]

        result: list[ModelRecord] = []
        for record in records:
            names = list(record.default_models)
            for name in self.state.fetched_models.get(record.id, []):
                if name not in names:
                    names.append(name)
            for name in names:
                model = ModelRecord(name=name, provider=record.id)
                model.enabled = self.state.enabled_models.get(model.id, True)
                result.append(model)
        return result

    def get_model(self, model_id: str) -> ModelRecord:
        for model in self.models():
            if model.id == model_id:
                return model
        raise RegistryError(f"Unknown model: {model_id}")

    def set_model_enabled(self, model_id: str, enabled: bool) -> ModelRecord:
        """Enable or disable a model and persist the flag."""
        model = self.get_model(model_id)
        self.state.enabled_models[model_id] = enabled
        self._save()
        model.enabled = enabled
        return model

    def set_provider_models_enabled(
        self, provider_id: str, enabled: bool
    ) -> list[ModelRecord]:
        """Enable or disable every known model of a provider at once."""
        models = self.models(provider_id)
        for model in models:
            self.state.enabled_models[model.id] = enabled
            model.enabled = enabled
        self._save()
        return models

    # Selection

    @property
    def selected_provider(self) -> str:
        return self.state.selected_provider

    @property
    def selected_model(self) -> str:
        return self.state.selected_model

    def select_provider(self, provider_id: str) -> None:
        """Select a provider and its first enabled model (if any)."""
        self.get_provider(provider_id)
        self.state.selected_provider = provider_id
        enabled = [m for m in self.models(provider_id) if m.enabled]
        self.state.selected_model = enabled[0].name if enabled else ""
        self._save()

    def select_model(self, name: str) -> None:
        self.state.selected_model = name
        self._save()

    # Discovery

    def refresh_models(self, provider_id: str) -> list[str]:
        """Refresh the model list for a provider.

        Only the local server exposes a listing endpoint; other providers
        return their built-in defaults.

        Raises:
            RegistryError: If the listing cannot be fetched or decoded
        """
        record = self.get_provider(provider_id)
        if provider_id != LOCAL_PROVIDER:
            return list(record.default_models)

        url = f"{self.base_url(provider_id)}/api/tags"
        payload = self._get_json(url)
        try:
            names = [str(entry["name"]) for entry in payload["models"]]
        except (KeyError, TypeError) as e:
            raise RegistryError(f"Unexpected model listing from {url}") from e

        self.state.fetched_models[provider_id] = names
        self._save()
        LOGGER.debug("Fetched %d models from %s", len(names), url)
        return names

    def _get_json(self, url: str) -> Any:
        try:
            if self._client is not None:
                response = self._client.get(url, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise RegistryError(f"Failed to fetch models from {url}: {e}") from e
        except ValueError as e:
            raise RegistryError(f"Invalid JSON from {url}") from e

    # Persistence

    def _load(self) -> RegistryState:
        if not self.path.exists():
            return RegistryState()
        try:
            return RegistryState.model_validate_json(
                self.path.read_text(encoding="utf-8")
            )
        except ValidationError as e:
            LOGGER.warning("Provider preferences %s are invalid: %s", self.path, e)
            return RegistryState()

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(self.state.model_dump_json(indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
