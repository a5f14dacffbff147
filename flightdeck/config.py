"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Durable state store (in-memory store when unset)
    redis_url: str | None = None

    # Checklist documents
    checklists_dir: str = "checklists"

    # Persisted state keys
    state_key_prefix: str = "checklist_"
    saved_index_key: str = "saved_checklists"

    # Background saver
    save_workers: int = 2

    # Optional session behaviours
    enforce_mandatory_order: bool = False
    auto_advance_lists: bool = False

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
