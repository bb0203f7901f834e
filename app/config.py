"""Application configuration management using Pydantic Settings.

This module loads and validates environment variables using Pydantic Settings.
All configuration is loaded from environment variables or a .env file.
"""

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IdentityMode(str, Enum):
    """Where the caller identity of a request comes from."""
    LOCAL_HEADER = "local_header"
    CLAIMS = "claims"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        database_url: SQLAlchemy connection string for the survey store
        database_pool_size: Number of connections to maintain in pool
        database_max_overflow: Maximum overflow connections beyond pool_size
        environment: Application environment (development, staging, production)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        identity_mode: How caller identities are resolved (local_header or claims)
        local_user_header: Header carrying the caller id in local_header mode
        local_default_user_id: Caller id used when the local header is absent
        jwt_secret: Key used to verify bearer tokens in claims mode
        jwt_algorithm: Signing algorithm of bearer tokens
        jwt_audience: Expected token audience (optional)
        jwt_issuer: Expected token issuer (optional)
        allow_origin: Value of the Access-Control-Allow-Origin header
        git_commit_sha: Git commit SHA reported at startup
    """

    # Database Configuration
    database_url: str = Field(
        description="SQLAlchemy connection string"
    )
    database_pool_size: int = Field(
        default=5,
        description="Number of database connections in pool"
    )
    database_max_overflow: int = Field(
        default=10,
        description="Maximum overflow connections beyond pool size"
    )

    # Application Configuration
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    git_commit_sha: str = Field(
        default="local",
        description="Git commit SHA for versioning"
    )

    # Identity Configuration
    identity_mode: IdentityMode = Field(
        default=IdentityMode.LOCAL_HEADER,
        description="Caller identity source"
    )
    local_user_header: str = Field(
        default="x-user-id",
        description="Header carrying the caller id in local_header mode"
    )
    local_default_user_id: str = Field(
        default="localstack-test-user-id",
        description="Fallback caller id for authenticated routes in local_header mode"
    )
    jwt_secret: Optional[str] = Field(
        default=None,
        description="Key used to verify bearer tokens (required in claims mode)"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Bearer token signing algorithm"
    )
    jwt_audience: Optional[str] = Field(
        default=None,
        description="Expected bearer token audience"
    )
    jwt_issuer: Optional[str] = Field(
        default=None,
        description="Expected bearer token issuer"
    )

    # HTTP Configuration
    allow_origin: str = Field(
        default="*",
        description="Access-Control-Allow-Origin header value"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v_upper

    @model_validator(mode="after")
    def validate_identity_settings(self):
        """Claims mode cannot verify tokens without a secret."""
        if self.identity_mode == IdentityMode.CLAIMS and not self.jwt_secret:
            raise ValueError("jwt_secret is required when identity_mode is 'claims'")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton

    Note:
        Uses lru_cache to ensure settings are only loaded once
        and shared across the application.
    """
    return Settings()
