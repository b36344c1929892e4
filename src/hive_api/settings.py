"""Settings for the Hive API."""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the Hive API.

    [pydantic.BaseSettings](https://docs.pydantic.dev/latest/concepts/pydantic_settings/) is a popular
    framework for organizing, validating, and reading configuration values from a variety of sources
    including environment variables.

    This class automatically reads from:
    1. Environment variables (production)
    2. .env file (local development)

    Environment variable names are treated case-insensitively.
    """

    site_url: str = "http://localhost:3000"
    """Public base URL used to build contributor/moderator/recipient links and harvest email links."""

    # Hive store (PostgreSQL)
    database_connection_string: Optional[str] = None
    """PostgreSQL connection string for the hive store. Hive routes answer 503 when unset."""

    database_min_pool_size: int = 2
    """Minimum number of pooled connections."""

    database_max_pool_size: int = 10
    """Maximum number of pooled connections."""

    # Notification Settings (SMTP)
    smtp_host: Optional[str] = None
    """SMTP server hostname for harvest notifications. Notifications are only logged when unset."""

    smtp_port: int = 587
    """SMTP server port (default: 587 for TLS)."""

    smtp_username: Optional[str] = None
    """SMTP authentication username."""

    smtp_password: Optional[str] = None
    """SMTP authentication password."""

    notification_from_email: str = "hive-noreply@example.com"
    """From email address for notifications."""

    notification_timeout_seconds: float = 10.0
    """Upper bound for delivering a single notification."""

    # Logging
    log_level: str = "INFO"
    """Minimum level written to stdout."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",  # Load from .env file if it exists (local development)
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )
