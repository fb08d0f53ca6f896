"""
Application configuration for REST Tester.

Settings are read from environment variables prefixed with ``REST_TESTER_``
and, optionally, from a local ``.env`` file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    database_url: str = "sqlite:///./rest_tester.db"
    sql_echo: bool = False
    # Shared by the server and HistoryClient through the list response
    history_page_size: int = Field(default=10, ge=1, le=100)
    request_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_prefix="REST_TESTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()
