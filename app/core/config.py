"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Settings are resolved once and then passed explicitly into the components that
need them (storage backends, rate limiter, verifier, notifier).
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_storage_settings() -> "StorageSettings":
    """Build storage settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    Static type checkers treat fields as constructor arguments, which is not
    how BaseSettings is intended to be used.
    """

    return StorageSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_verifier_settings() -> "VerifierSettings":
    return VerifierSettings()  # type: ignore[call-arg]


def _build_email_settings() -> "EmailSettings":
    return EmailSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class StorageSettings(BaseSettings):
    """Storage backend configuration.

    Either backend may be left unset. Submissions prefer the SQLite table
    backend; the rate limiter prefers the key/value log backend.
    """

    kv_url: str | None = Field(
        None,
        description=(
            "Key/value (log) backend URL: redis://, rediss://, unix:// or memory://"
        ),
    )
    sqlite_path: str | None = Field(
        None,
        description="Path to the SQLite database file used as the table backend",
    )
    index_limit: int = Field(
        1000,
        description="Maximum number of submission ids kept per form index (log backend)",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether bearer authentication is required to read submissions",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of bearer tokens allowed to read submissions",
    )
    allowed_origins: str = Field(
        "*",
        description="Comma-separated list of CORS origins ('*' allows any origin)",
    )
    client_ip_header: str = Field(
        "CF-Connecting-IP",
        description="Header carrying the original client address when behind a proxy",
    )
    default_page_size: int = Field(
        100,
        description="Default number of submissions returned per page",
        ge=1,
    )
    max_page_size: int = Field(
        1000,
        description="Maximum number of submissions returned per page",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable fixed-window rate limiting per client address",
    )
    rate_limit_requests: int = Field(
        10,
        description="Maximum number of submissions allowed per window (per client)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class VerifierSettings(BaseSettings):
    """Anti-abuse verification (Cloudflare Turnstile) configuration."""

    secret_key: str | None = Field(
        None,
        description="Turnstile secret key used for server-side token verification",
    )
    verify_url: str = Field(
        "https://challenges.cloudflare.com/turnstile/v0/siteverify",
        description="Turnstile siteverify endpoint",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Verification request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="TURNSTILE_",
        case_sensitive=False,
    )


class EmailSettings(BaseSettings):
    """Email notification configuration.

    Supports multiple providers (Resend, SendGrid, Mailgun, Mailtrap).
    Provider-specific requirements are validated in the notifier factory.
    """

    provider: str = Field(
        "none",
        description="Email provider name: none, resend, sendgrid, mailgun, mailtrap",
    )
    api_key: str | None = Field(
        None,
        description="API key for the selected email provider",
    )
    from_address: str | None = Field(
        None,
        alias="EMAIL_FROM",
        description="Sender address",
    )
    to: str | None = Field(
        None,
        description="Comma-separated list of recipient addresses",
    )
    mailgun_domain: str | None = Field(
        None,
        description="Sending domain (required for Mailgun)",
    )
    mailtrap_inbox_id: str | None = Field(
        None,
        description="Sandbox inbox id; when set, Mailtrap runs in testing mode",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Delivery request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_",
        case_sensitive=False,
        populate_by_name=True,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    storage: StorageSettings = Field(default_factory=_build_storage_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    verifier: VerifierSettings = Field(default_factory=_build_verifier_settings)
    email: EmailSettings = Field(default_factory=_build_email_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
