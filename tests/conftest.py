"""Pytest fixtures for runmark tests."""

import pytest
from pathlib import Path

from runmark import config
from runmark.config import Settings, load_settings
from runmark.formatting.parser import InlineParser
from runmark.providers.credentials import CredentialStore
from runmark.providers.registry import ProviderRegistry


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Point settings at a temporary data directory for every test."""
    monkeypatch.setenv("RUNMARK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("RUNMARK_RELEASE_URL", "https://updates.test/releases/latest")
    monkeypatch.delenv("OLLAMA_API_BASE", raising=False)
    monkeypatch.setattr(config, "_settings", None)
    return load_settings()


@pytest.fixture
def parser() -> InlineParser:
    """Create a parser instance."""
    return InlineParser()


@pytest.fixture
def sample_message() -> str:
    """A chat reply using every inline marker."""
    return (
        "Run `pip install runmark`, then **restart** the app. "
        "See [the docs](https://docs.example.com/start) for *details*; "
        "~~old flag~~ is gone and <u>this</u> matters."
    )


@pytest.fixture
def credential_store(tmp_path: Path) -> CredentialStore:
    """Credential store in a temporary directory."""
    return CredentialStore(tmp_path / "secrets" / "credentials.json")


@pytest.fixture
def registry(tmp_path: Path, credential_store: CredentialStore) -> ProviderRegistry:
    """Registry with built-in providers and no network client."""
    return ProviderRegistry(tmp_path / "providers.json", credential_store)
