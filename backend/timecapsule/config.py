"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded in production)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Lifecycle constants (retention window, code length, sweep period) are settings,
      so tests and deployments can tune them without code changes
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://capsule:capsule@db:5432/timecapsule"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Identity: tokens are issued elsewhere and only verified here
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Capsule lifecycle
    retention_days: int = 30
    unlock_code_length: int = 10

    # Expiration sweeper
    sweeper_enabled: bool = True
    sweep_interval_seconds: int = 3600

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def retention_window(self) -> timedelta:
        return timedelta(days=self.retention_days)


@lru_cache
def get_settings() -> Settings:
    return Settings()
