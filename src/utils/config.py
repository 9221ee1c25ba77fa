from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized application settings.

    Loads from environment with safe local defaults.
    """

    app_name: str = Field(default="visit-badge-counter")
    app_env: Literal["local", "dev", "staging", "prod"] = Field(default="local", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    # Which key-value store backs the counters: SQL table or process memory.
    store_backend: Literal["sql", "memory"] = Field(default="sql", alias="STORE_BACKEND")
    # Database URL for async SQLAlchemy engine. Default to local SQLite file for dev/test.
    database_url: str = Field(default="sqlite+aiosqlite:///./visits.db", alias="DATABASE_URL")
    # Create the kv_entries table on startup when migrations have not been run
    store_auto_create: bool = Field(default=True, alias="STORE_AUTO_CREATE")
    # How long shutdown waits for pending fire-and-forget writes
    detached_drain_timeout_s: float = Field(default=5.0, alias="DETACHED_DRAIN_TIMEOUT_S")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()  # type: ignore[call-arg]
