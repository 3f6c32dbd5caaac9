"""
nspass.client.config - Runtime-reconfigurable API configuration

ApiConfig is an explicit handle shared by reference between every
HttpClient that should follow the same backend. Updating the base URL on
the handle is visible to all of them on their next request; nothing is
cached. Concurrent reads during an update are tolerated, last write wins.

Example:
    >>> config = ApiConfig.from_settings()
    >>> client = HttpClient(config)
    >>> config.update_base_url("https://panel.example.com")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nspass.exceptions import ConfigurationError

if TYPE_CHECKING:
    from nspass.settings import NspassSettings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 3.0

# Per-service timeout overrides (seconds)
SERVICE_TIMEOUTS: dict[str, float] = {
    "auth": 15.0,
    "dashboard": 10.0,
    "user_info": 10.0,
}


@dataclass
class ApiConfig:
    """Mutable backend configuration shared by HTTP clients."""

    base_url: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    auth_endpoints: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        self.base_url = (self.base_url or "").rstrip("/")
        self.auth_endpoints = tuple(self.auth_endpoints)
        self.validate()

    @classmethod
    def from_settings(cls, settings: NspassSettings | None = None) -> ApiConfig:
        """Build a config handle from NspassSettings (defaults to the cached singleton)."""
        if settings is None:
            from nspass.settings import get_settings

            settings = get_settings()
        return cls(
            base_url=settings.api_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            auth_endpoints=tuple(settings.auth_endpoints),
        )

    def validate(self) -> None:
        """
        Check the configuration.

        Raises:
            ConfigurationError: If the base URL is empty or the timeout is not positive.
        """
        if not self.base_url:
            raise ConfigurationError("base_url must not be empty")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be greater than 0")

    def update_base_url(self, new_base_url: str) -> None:
        """Point every client sharing this handle at a new backend."""
        cleaned = (new_base_url or "").strip().rstrip("/")
        if not cleaned:
            raise ConfigurationError("base_url must not be empty")
        previous = self.base_url
        self.base_url = cleaned
        logger.info(
            "API base URL updated",
            extra={"previous_base_url": previous, "base_url": cleaned},
        )

    def timeout_for(self, service_name: str | None) -> float:
        """Timeout for a named service, falling back to the shared default."""
        if service_name is None:
            return self.timeout_seconds
        return SERVICE_TIMEOUTS.get(service_name, self.timeout_seconds)

    def is_auth_endpoint(self, endpoint: str) -> bool:
        """True if requests to ``endpoint`` must not carry the bearer credential."""
        path = "/" + endpoint.lstrip("/")
        return any(path.startswith(prefix) for prefix in self.auth_endpoints)
