"""
Runtime settings for the recruiting API.

Values come from the process environment or a local ``.env`` file; the
database, Redis and token-signing settings have no defaults and must be set.
"""

from typing import Literal
from pydantic import Field, PostgresDsn, RedisDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="talentdesk", alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", alias="APP_ENV"
    )
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    json_logs: bool = Field(default=True, alias="JSON_LOGS")
    log_request_body: bool = Field(default=False, alias="LOG_REQUEST_BODY")
    log_max_body_size: int = Field(default=1024, alias="LOG_MAX_BODY_SIZE")

    api_v1_prefix: str = "/api/v1"
    # JSON list in the environment, e.g. '["https://app.example.com"]'
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        alias="ALLOWED_ORIGINS",
    )

    # Persistence
    database_url: PostgresDsn = Field(..., alias="DATABASE_URL")
    database_pool_size: int = Field(default=20, alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=10, alias="DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")
    redis_url: RedisDsn = Field(..., alias="REDIS_URL")

    # Access tokens
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60, ge=1, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Request budgets; login and register share the auth budget per client IP
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_per_minute: int = Field(default=100, alias="RATE_LIMIT_PER_MINUTE")
    rate_limit_per_hour: int = Field(default=1000, alias="RATE_LIMIT_PER_HOUR")
    auth_rate_limit_per_minute: int = Field(
        default=5, alias="AUTH_RATE_LIMIT_PER_MINUTE"
    )

    # Listing sizes
    applications_fetch_limit: int = Field(default=50, ge=1, alias="APPLICATIONS_FETCH_LIMIT")
    jobs_page_size: int = Field(default=18, ge=1, le=100, alias="JOBS_PAGE_SIZE")
    candidates_per_page: int = Field(default=20, ge=1, le=100, alias="CANDIDATES_PER_PAGE")

    @field_validator("jwt_secret_key")
    @classmethod
    def secret_long_enough(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()
