"""Provider configuration.

Values come from explicit arguments first and fall back to environment
variables, the same way the platform's other tooling is configured:

- ``FORGEJO_HOST`` -- base URL of the instance, e.g. ``https://code.example.com``
- ``FORGEJO_API_TOKEN`` -- personal access token
- ``FORGEJO_USERNAME`` / ``FORGEJO_PASSWORD`` -- basic auth, instead of a token
- ``FORGEJO_TIMEOUT`` -- per-request timeout in seconds (default 30)
- ``FORGETEAM_LOG_LEVEL`` -- loguru level name (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from forgeteam.errors import ConfigError

DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class ProviderConfig:
    """Connection settings for the hosting platform."""

    host: str = ""
    api_token: str = ""
    username: str = ""
    password: str = ""
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(
        cls,
        host: str | None = None,
        api_token: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        log_level: str | None = None,
    ) -> ProviderConfig:
        """Build a config, letting explicit arguments win over the environment."""
        raw_timeout = os.environ.get("FORGEJO_TIMEOUT", "")
        try:
            env_timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigError(f"FORGEJO_TIMEOUT must be a number, got '{raw_timeout}'")

        return cls(
            host=host or os.environ.get("FORGEJO_HOST", ""),
            api_token=api_token or os.environ.get("FORGEJO_API_TOKEN", ""),
            username=username or os.environ.get("FORGEJO_USERNAME", ""),
            password=password or os.environ.get("FORGEJO_PASSWORD", ""),
            timeout=timeout if timeout is not None else env_timeout,
            log_level=log_level or os.environ.get("FORGETEAM_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )

    @property
    def base_url(self) -> str:
        return self.host.rstrip("/") + "/api/v1"

    def secrets(self) -> list[str]:
        """Values that must never appear in log output."""
        return [s for s in (self.api_token, self.password) if s]

    def validate(self) -> None:
        """Raise ConfigError unless the config can reach the platform."""
        if not self.host:
            raise ConfigError("No host configured. Set FORGEJO_HOST or pass --host.")
        if not self.host.startswith(("http://", "https://")):
            raise ConfigError(f"Host must be an http(s) URL, got '{self.host}'")
        if self.api_token and (self.username or self.password):
            raise ConfigError("Configure either an API token or username/password, not both.")
        if not self.api_token and not (self.username and self.password):
            raise ConfigError(
                "No credentials configured. Set FORGEJO_API_TOKEN, "
                "or FORGEJO_USERNAME and FORGEJO_PASSWORD."
            )
        if self.timeout <= 0:
            raise ConfigError("Timeout must be positive.")
