"""Configuration management for the users platform.

This module centralizes environment-driven configuration for the users
service and the load-test runner. It builds on ``pydantic-settings``
``BaseSettings`` so configuration can be provided via environment variables,
``.env`` files, or defaults.

Field names double as environment variable names (case-insensitive), so
``users_service_port`` is read from ``USERS_SERVICE_PORT``.

Usage
- Inject the appropriate config in your entrypoint:
  ``config = UsersServiceConfig()``
- Or select dynamically: ``config = get_config("users")``
"""

from typing import Any, Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class for all components.

    Defaults keep local development convenient while still being explicit.

    Notes
    - Add new shared settings here so downstream components inherit them.
    - Prefer a typed field over reading ``os.environ`` directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    app_env: str = Field(default="local", description="Deployment environment name")

    # Logging
    app_log_level: str = Field(default="INFO", description="Root log level")
    app_log_format: str = Field(default="json", description="json or console")


class UsersServiceConfig(BaseConfig):
    """Configuration for the users service.

    Extends ``BaseConfig`` with the bind address of the HTTP API.
    """

    users_service_host: str = Field(default="0.0.0.0")
    users_service_port: int = Field(default=3001)


class LoadTestConfig(BaseConfig):
    """Configuration for the staged load profile.

    ``base_url`` is read from ``BASE_URL`` so the same variable works for
    every runner pointed at the service.
    """

    base_url: str = Field(default="http://localhost:3001")

    load_ramp_up_seconds: int = Field(default=10)
    load_hold_seconds: int = Field(default=20)
    load_ramp_down_seconds: int = Field(default=10)
    load_target_users: int = Field(default=10)

    load_think_time_seconds: float = Field(default=1.0)
    load_request_timeout_seconds: float = Field(default=10.0)

    def stages(self) -> List[Dict[str, Any]]:
        """Return the ramp-up / hold / ramp-down schedule."""
        return [
            {"duration": self.load_ramp_up_seconds, "target": self.load_target_users},
            {"duration": self.load_hold_seconds, "target": self.load_target_users},
            {"duration": self.load_ramp_down_seconds, "target": 0},
        ]


def get_config(service_name: str) -> BaseConfig:
    """Get configuration for a specific component.

    Parameters
    - service_name: ``users`` or ``loadtest``.

    Returns
    - A concrete ``BaseConfig`` subclass pre-wired to read the right env vars.
    """
    config_map = {
        "users": UsersServiceConfig,
        "loadtest": LoadTestConfig,
    }

    # Default to ``BaseConfig`` to avoid surprising crashes for unknown names.
    config_class = config_map.get(service_name, BaseConfig)
    return config_class()
