"""Configuration management for DealHub.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-in-production-use-openssl-rand-hex-32"


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables prefixed with ``DEALHUB_``
    and from a ``.env`` file. All values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DEALHUB_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "DealHub"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./dh_data/dealhub.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Token Settings
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        description="Secret key for access token signing",
    )
    jwt_issuer: str = "dealhub"
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    access_token_ttl_seconds: int = Field(default=3600, gt=0)
    refresh_token_ttl_seconds: int = Field(default=14 * 24 * 3600, gt=0)

    # Password Hashing (Argon2id)
    argon2_time_cost: int = Field(default=4, ge=1)
    argon2_memory_cost: int = Field(default=64 * 1024, ge=8, description="KiB")
    argon2_parallelism: int = Field(default=2, ge=1)

    # Login Throttle Settings
    login_max_attempts: int = Field(default=5, ge=1)
    login_attempt_window_seconds: int = Field(default=900, gt=0)

    # Account Codes Settings
    registration_enabled: bool = True
    activation_code_ttl_seconds: int = Field(default=24 * 3600, gt=0)
    password_reset_code_ttl_seconds: int = Field(default=600, gt=0)
    password_reset_max_requests: int = Field(default=3, ge=1)
    password_reset_window_seconds: int = Field(default=3600, gt=0)

    # Request Rate Limiting Settings
    rate_limit_enabled: bool = False
    rate_limit_max_requests: int = Field(default=20, ge=1)
    rate_limit_window_seconds: int = Field(default=60, gt=0)

    # Pagination Settings
    pagination_default_limit: int = Field(default=20, ge=1)
    pagination_max_limit: int = Field(default=500, ge=1)

    # CORS Settings
    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://localhost:5173"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Refuse the placeholder signing key in production."""
        if self.is_production and self.secret_key == DEFAULT_SECRET_KEY:
            raise ValueError(
                "DEALHUB_SECRET_KEY must be set to a private value in production."
            )
        return self

    @model_validator(mode="after")
    def validate_pagination(self) -> "Settings":
        """Validate that the default page size fits under the maximum."""
        if self.pagination_default_limit > self.pagination_max_limit:
            raise ValueError(
                "pagination_default_limit "
                f"({self.pagination_default_limit}) exceeds pagination_max_limit "
                f"({self.pagination_max_limit})."
            )
        return self

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
