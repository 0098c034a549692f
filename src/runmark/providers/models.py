"""Provider and model records."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderRecord(BaseModel):
    """A chat provider the application can talk to.

    Attributes:
        id: Stable identifier used as the credential key
        display_name: Human-readable name
        base_url: Default API base URL
        requires_api_key: Whether the provider is unusable without a key
        default_models: Model names offered without a network fetch
        key_prefix: Expected API key prefix, if the provider uses one
        min_key_length: Minimum plausible API key length
    """

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    base_url: str
    requires_api_key: bool = True
    default_models: tuple[str, ...] = ()
    key_prefix: Optional[str] = None
    min_key_length: int = 1

    def accepts_key(self, key: str) -> bool:
        """Format-only API key check (no network call)."""
        key = key.strip()
        if not key:
            return False
        if self.key_prefix and not key.startswith(self.key_prefix):
            return False
        return len(key) >= self.min_key_length


class ModelRecord(BaseModel):
    """A model offered by a provider, with its enabled flag."""

    name: str
    provider: str
    display_name: str = ""
    enabled: bool = True

    @property
    def id(self) -> str:
        return f"{self.provider}:{self.name}"

    @property
    def label(self) -> str:
        return self.display_name or self.name


BUILTIN_PROVIDERS: tuple[ProviderRecord, ...] = (
    ProviderRecord(
        id="openai",
        display_name="OpenAI",
        base_url="https://api.openai.com/v1",
        default_models=("gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-3.5-turbo"),
        key_prefix="sk-",
        min_key_length=21,
    ),
    ProviderRecord(
        id="gemini",
        display_name="Google Gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        default_models=("gemini-1.5-pro", "gemini-1.5-flash"),
        min_key_length=21,
    ),
    ProviderRecord(
        id="anthropic",
        display_name="Anthropic",
        base_url="https://api.anthropic.com",
        default_models=("claude-3-opus", "claude-3-sonnet", "claude-3-haiku"),
        key_prefix="sk-ant-",
        min_key_length=21,
    ),
    ProviderRecord(
        id="groq",
        display_name="Groq",
        base_url="https://api.groq.com/openai/v1",
        default_models=("llama3-70b-8192", "mixtral-8x7b-32768"),
        key_prefix="gsk_",
        min_key_length=21,
    ),
    # Models are discovered from the local server
    ProviderRecord(
        id="ollama",
        display_name="Ollama",
        base_url="http://localhost:11434",
        requires_api_key=False,
    ),
)
