"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - database_url always names an async driver; fallback_database_url a sync one

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults work out of the box: SQLite file next to the process, ./scripts as handler dir
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Handler modules
    scripts_dir: Path = Path("scripts")
    watch_enabled: bool = True
    watch_debounce_ms: int = 200

    # Persistence (tried in order, then the volatile in-process list)
    database_url: str = "sqlite+aiosqlite:///calls.db"
    fallback_database_url: str = "sqlite:///calls.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_sqlite_url(cls, v: str) -> str:
        """Plain sqlite:// URLs need the aiosqlite driver for the async engine."""
        if isinstance(v, str) and v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    # API
    history_limit: int = 10
    cors_origins: list[str] = ["http://localhost:8080"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
