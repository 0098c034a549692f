"""Provider credentials and model registry."""

from runmark.providers.credentials import (
    CredentialError,
    CredentialKind,
    CredentialStore,
    redact_secret,
)
from runmark.providers.models import BUILTIN_PROVIDERS, ModelRecord, ProviderRecord
from runmark.providers.registry import ProviderRegistry, RegistryError

__all__ = [
    "CredentialError",
    "CredentialKind",
    "CredentialStore",
    "redact_secret",
    "BUILTIN_PROVIDERS",
    "ModelRecord",
    "ProviderRecord",
    "ProviderRegistry",
    "RegistryError",
]
