"""Configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Environment Variables:
        DATABASE_URL: SQLAlchemy connection string
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
        DRAFT_TIMESTAMP_COLUMNS: Creation timestamp attributes nullified on
            every draft (JSON list, default ["created_at"])
        DRAFT_DEFAULT_NULLIFY: Extra attributes nullified on every draftable
            type that has them (JSON list, default [])
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./draftflow.db"
    DATABASE_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Drafting
    DRAFT_TIMESTAMP_COLUMNS: List[str] = ["created_at"]
    DRAFT_DEFAULT_NULLIFY: List[str] = []


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
