"""Common utilities shared by the users service and the load runner.

Includes:
- ``config``: pydantic-settings configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics helpers.

Import pattern:
- from libs.common.config import UsersServiceConfig
- from libs.common.logging import configure_logging
"""
