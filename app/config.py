# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SERVE_HTTPS)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every value has a development default, so the bootstrap can start
    without a .env file. All settings are accessed via the global
    `settings` instance or `get_settings()`.
    """

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

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host the listeners bind to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=0,
        le=55535,
        description="Port for the HTTP listener (HTTPS uses this + 10000)"
    )

    # -------------------------------------------------------------------------
    # HTTPS Listener
    # -------------------------------------------------------------------------
    # Names match the deployment environment, not the usual prefix scheme.

    SERVE_HTTPS: bool = Field(
        default=False,
        description="Also start a TLS listener on API_PORT + 10000"
    )

    HTTPS_KEY: str | None = Field(
        default=None,
        description="Path to the PEM private key for the TLS listener"
    )

    HTTPS_CERT: str | None = Field(
        default=None,
        description="Path to the PEM certificate for the TLS listener"
    )

    # -------------------------------------------------------------------------
    # Content Directories
    # -------------------------------------------------------------------------
    # Relative paths resolve against the working directory.

    STATIC_DIR: str = Field(
        default="public",
        description="Directory served as static content"
    )

    VIEWS_DIR: str = Field(
        default="views",
        description="Root directory of Jinja2 templates"
    )

    VIEW_CACHE: bool | None = Field(
        default=None,
        description="Cache compiled templates (defaults to on in production)"
    )

    ERROR_TEMPLATE: str = Field(
        default="views/error.html",
        description="Template rendered for errors when the client accepts HTML"
    )

    CONTROLLERS_DIR: str = Field(
        default="controllers",
        description="Directory of controller packages"
    )

    MODELS_DIR: str = Field(
        default="models",
        description="Directory of model modules"
    )

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------

    CORS_ORIGINS: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    METHOD_OVERRIDE_FIELD: str = Field(
        default="_method",
        description="Body field (or X- header) carrying the overridden method"
    )

    ENFORCE_SSL: bool = Field(
        default=False,
        description="Reject plain HTTP requests"
    )

    TRUST_PROXY: bool = Field(
        default=False,
        description="Trust X-Forwarded-Proto when enforcing SSL"
    )

    BODY_JSON_LIMIT: str = Field(
        default="1mb",
        description="Maximum JSON body size (e.g. 1mb, 512kb)"
    )

    BODY_FORM_LIMIT: str = Field(
        default="56kb",
        description="Maximum urlencoded form body size"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

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
    def view_cache_enabled(self) -> bool:
        """Template caching: explicit VIEW_CACHE wins, otherwise production only."""
        if self.VIEW_CACHE is None:
            return self.is_production
        return self.VIEW_CACHE

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
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
