"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) - single instance per process
    - Invalid or missing required values fail at startup, never at first request

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - JWT_SECRET has no default: a process without it must not boot
    - Cron expressions validated here so a bad schedule stops the worker at import
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CRON_FIELD_COUNT = 5


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    project_name: str = "Scaffold API"
    version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://scaffold:scaffold@db:5432/scaffold"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)

    # Auth
    jwt_secret: str = Field(min_length=16)
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = Field(60, ge=1)

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_window_seconds: int = Field(900, ge=1)
    rate_limit_max: int = Field(100, ge=1)

    # Compression
    compression_level: int = Field(6, ge=1, le=9)
    compression_threshold_bytes: int = Field(1024, ge=0)

    # Request pipeline
    cors_origins: list[str] = ["http://localhost:3000"]
    request_timeout_ms: int = Field(30_000, gt=0)
    max_request_size_bytes: int = Field(1_048_576, gt=0)

    # Queue + cron
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"
    celery_task_always_eager: bool = False
    cron_deactivate_dormant_users: str = "0 3 * * *"
    dormant_user_days: int = Field(180, ge=1)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("cron_deactivate_dormant_users")
    @classmethod
    def check_cron_expression(cls, v: str) -> str:
        if len(v.split()) != CRON_FIELD_COUNT:
            raise ValueError(
                f"cron expression must have {CRON_FIELD_COUNT} fields, got {v!r}",
            )
        return v

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000

    @property
    def rate_limit(self) -> str:
        """Limit string in the notation slowapi/limits parse."""
        return f"{self.rate_limit_max}/{self.rate_limit_window_seconds} seconds"


@lru_cache
def get_settings() -> Settings:
    return Settings()
