"""
Application configuration using Pydantic settings.

Usage:
    from codiro.config import get_settings
    settings = get_settings()
"""

import os
import warnings
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Secrets that are never acceptable outside local development
FORBIDDEN_SECRETS = (
    "CHANGE_ME",
    "changeme",
    "secret",
    "your-secret-key",
    "jwt-secret",
    "supersecret",
    "development",
    "test",
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env file.

    Required for production:
        - JWT_SECRET (min 32 chars)
        - GITHUB_APP_CLIENT_ID / GITHUB_APP_CLIENT_SECRET
        - APP_URL (externally visible origin, https in production)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "Codiro"
    api_prefix: str = "/api"
    debug: bool = Field(default=False, validation_alias="DEBUG")
    env: str = Field(default="development", validation_alias="ENV")

    # Externally visible application URL (callback redirect + Secure cookie flag)
    app_url: str = Field(default="http://localhost:8787", validation_alias="APP_URL")

    # Database
    database_url: str = Field(default="sqlite:///codiro.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # GitHub OAuth
    github_client_id: str = Field(default="", validation_alias="GITHUB_APP_CLIENT_ID")
    github_client_secret: str = Field(default="", validation_alias="GITHUB_APP_CLIENT_SECRET")
    github_scope: str = Field(default="user:email")
    github_http_timeout: float = Field(default=10.0, validation_alias="GITHUB_HTTP_TIMEOUT")

    # JWT / Authentication
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=15)
    refresh_token_expire_days: int = Field(default=30)
    oauth_state_ttl: int = Field(default=600)  # seconds

    # CORS
    cors_allowed_origins: str = Field(
        default="http://localhost:5173", validation_alias="CORS_ALLOWED_ORIGINS"
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Validate JWT secret - warns in dev, errors in production."""
        env = os.getenv("ENV", "development")
        is_production = env.lower() in ("production", "prod")

        is_forbidden = v.lower() in [fv.lower() for fv in FORBIDDEN_SECRETS]
        is_too_short = len(v) < 32

        if is_production:
            if is_forbidden:
                raise ValueError(
                    f"JWT_SECRET cannot be a default value ('{v}') in production. "
                    "Generate a secure key with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
                )
            if is_too_short:
                raise ValueError(
                    f"JWT_SECRET must be at least 32 characters in production (got {len(v)})."
                )
        elif is_forbidden:
            warnings.warn(
                f"JWT_SECRET is set to a default value ('{v}'). "
                "This is insecure - set a proper key for production.",
                UserWarning,
                stacklevel=2,
            )
        elif is_too_short:
            warnings.warn(
                f"JWT_SECRET should be at least 32 characters (got {len(v)})",
                UserWarning,
                stacklevel=2,
            )

        return v

    @property
    def is_production(self) -> bool:
        return self.env.lower() in ("production", "prod")

    @property
    def secure_cookies(self) -> bool:
        """Cookies carry the Secure flag whenever the app is served over https."""
        return self.app_url.lower().startswith("https://")

    @property
    def github_redirect_uri(self) -> str:
        return f"{self.app_url.rstrip('/')}{self.api_prefix}/auth/github/callback"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    def validate_production_config(self) -> tuple[List[str], List[str]]:
        """
        Validate configuration for production deployment.

        Returns:
            Tuple of (errors, warnings) - errors are fatal, warnings are advisory
        """
        errors = []
        warnings_ = []

        if self.jwt_secret_key == "CHANGE_ME":
            errors.append("JWT_SECRET must be set for production")
        elif len(self.jwt_secret_key) < 32:
            errors.append("JWT_SECRET must be at least 32 characters")

        if not self.github_client_id:
            errors.append("GITHUB_APP_CLIENT_ID is required for OAuth")
        if not self.github_client_secret:
            errors.append("GITHUB_APP_CLIENT_SECRET is required for OAuth")

        if not self.secure_cookies:
            warnings_.append(
                "APP_URL is not https - auth cookies will be sent without the Secure flag."
            )

        return errors, warnings_


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
