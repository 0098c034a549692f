"""Configuration management for runmark."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration via environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Storage for credentials and provider preferences
    data_dir: Path = Field(
        default=Path.home() / ".runmark",
        alias="RUNMARK_DATA_DIR",
    )

    # Update check
    release_url: str = Field(
        default="https://api.github.com/repos/runmark/runmark/releases/latest",
        alias="RUNMARK_RELEASE_URL",
    )
    request_timeout: float = Field(
        default=10.0,
        alias="RUNMARK_REQUEST_TIMEOUT",
    )
    max_retries: int = Field(
        default=3,
        alias="RUNMARK_MAX_RETRIES",
    )

    # Rendering colours (rich colour names or hex)
    link_color: str = Field(
        default="cyan",
        alias="RUNMARK_LINK_COLOR",
    )
    code_background: str = Field(
        default="grey15",
        alias="RUNMARK_CODE_BACKGROUND",
    )

    # Local LLM settings
    ollama_api_base: str = Field(
        default="http://localhost:11434",
        alias="OLLAMA_API_BASE",
    )

    @property
    def credentials_path(self) -> Path:
        """Path of the encrypted credential file."""
        return self.data_dir / "credentials.json"

    @property
    def registry_path(self) -> Path:
        """Path of the persisted provider preferences."""
        return self.data_dir / "providers.json"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, creating it if needed."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings from an optional specific .env file."""
    global _settings
    if env_file:
        _settings = Settings(_env_file=env_file)
    else:
        _settings = Settings()
    return _settings
