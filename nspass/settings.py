"""
nspass.settings - Centralized Configuration

Single source of truth for data-layer configuration.
Loads from .env files and environment variables using pydantic-settings.

Usage:
    >>> from nspass.settings import get_settings
    >>> settings = get_settings()
    >>> settings.api_base_url
    'http://localhost:8080'

    >>> from nspass.client.config import ApiConfig
    >>> config = ApiConfig.from_settings(settings)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NspassSettings(BaseSettings):
    """Data-layer configuration loaded from .env / environment variables.

    All NSPASS_* prefixed env vars are loaded automatically.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="NSPASS_",
        extra="ignore",
    )

    # -- Environment -----------------------------------------------------------
    env: str = "development"

    # -- Backend ---------------------------------------------------------------
    api_base_url: str = "http://localhost:8080"
    request_timeout_seconds: float = Field(default=3.0, gt=0)

    # Endpoint prefixes that never carry the bearer credential.
    auth_endpoints: list[str] = [
        "/v1/auth/login",
        "/v1/auth/register",
        "/v1/auth/oauth2",
        "/v1/auth/passkey",
    ]

    # -- Session ---------------------------------------------------------------
    session_file: Path = Path("~/.nspass/session.json")
    sign_in_path: str = "/login"

    # -- Collections -----------------------------------------------------------
    default_page_size: int = Field(default=10, ge=1)

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/") if value else value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_settings() -> NspassSettings:
    """Return the cached NspassSettings singleton."""
    return NspassSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
