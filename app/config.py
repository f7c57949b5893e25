# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.PORT)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, so a bad connection
# string or port fails before the server tries to connect or bind.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Database (Supabase)
    # -------------------------------------------------------------------------
    # These are required - the server won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL, the database connection string (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    DATABASE_PROBE_TABLE: str = Field(
        default="users",
        min_length=1,
        description="Table queried once at startup to verify the connection"
    )

    DB_CONNECT_RETRIES: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Extra connection attempts after the first failure (0 = fail fast)"
    )

    DB_CONNECT_RETRY_DELAY: float = Field(
        default=1.0,
        gt=0.0,
        le=60.0,
        description="Delay before the first retry in seconds; doubles on each attempt"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level when DEBUG is off"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    PORT: int = Field(
        default=5000,
        ge=0,
        le=65535,
        description="Port for the API server (0 picks a free port)"
    )

    API_PREFIX: str = Field(
        default="/api/v1",
        description="URL prefix under which the module route table is mounted"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------

    SHUTDOWN_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="How long to wait for the listener to close before forcing it"
    )

    SIGNAL_EXIT_CODE: int = Field(
        default=1,
        ge=0,
        le=255,
        description="Exit status after a SIGTERM/SIGINT shutdown"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Treat empty variables as unset so defaults apply
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    @field_validator("API_PREFIX")
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        """Ensure the prefix starts with a slash and has no trailing slash."""
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def log_level(self) -> str:
        """Effective root log level."""
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
