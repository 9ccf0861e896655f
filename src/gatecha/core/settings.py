"""Application settings and configuration.

This module defines all configuration options for the GateCHA gateway.
Settings are loaded from environment variables with sensible defaults.
"""

import secrets

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Policy applied to API keys created without explicit values
DEFAULT_MAX_NUMBER = 100_000
DEFAULT_EXPIRE_SECONDS = 300
DEFAULT_ALGORITHM = "SHA-256"

# Upper bounds accepted for per-key policy
MAX_MAX_NUMBER = 10_000_000
MAX_EXPIRE_SECONDS = 7 * 86_400

# Policy of the dedicated key protecting the admin login
LOGIN_KEY_NAME = "Login CAPTCHA"
LOGIN_KEY_MAX_NUMBER = 50_000
LOGIN_KEY_EXPIRE_SECONDS = 300
LOGIN_KEY_ALGORITHM = "SHA-256"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="GateCHA", alias="GATECHA_APP_NAME")
    app_version: str = Field(default="0.1.0", alias="GATECHA_APP_VERSION")
    debug: bool = Field(default=False, alias="GATECHA_DEBUG")
    listen_host: str = Field(default="0.0.0.0", alias="GATECHA_HOST")
    listen_port: int = Field(default=8080, alias="GATECHA_PORT")
    log_level: str = Field(default="info", alias="GATECHA_LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./data/gatecha.db", alias="GATECHA_DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="GATECHA_SQL_DEBUG")

    # Admin session tokens
    secret_key: str = Field(default="", alias="GATECHA_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="GATECHA_JWT_ALGORITHM")
    session_ttl_hours: int = Field(default=24, alias="GATECHA_SESSION_TTL_HOURS")

    # First-boot admin credential
    admin_username: str = Field(default="admin", alias="GATECHA_ADMIN_USERNAME")
    admin_password: str = Field(default="", alias="GATECHA_ADMIN_PASSWORD")

    # Replay ledger purge interval
    cleanup_interval_minutes: int = Field(default=10, gt=0, alias="GATECHA_CLEANUP_INTERVAL")

    # CORS configuration for browser widgets
    cors_allow_all: bool = Field(default=False, alias="GATECHA_CORS_ALLOW_ALL")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    # Populated when a value had to be generated so startup can warn about it.
    generated_secret_key: bool = False
    generated_admin_password: bool = False

    @model_validator(mode="after")
    def _fill_generated_secrets(self) -> "Settings":
        if not self.secret_key:
            object.__setattr__(self, "secret_key", secrets.token_hex(32))
            object.__setattr__(self, "generated_secret_key", True)
        if not self.admin_password:
            object.__setattr__(self, "admin_password", secrets.token_hex(16))
            object.__setattr__(self, "generated_admin_password", True)
        return self

    @property
    def cleanup_interval_seconds(self) -> float:
        """Return the Reaper interval in seconds."""
        return float(self.cleanup_interval_minutes * 60)


settings = Settings()  # type: ignore[call-arg]
