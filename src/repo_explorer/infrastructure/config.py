"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file).

    The GitHub token is deliberately absent: it is handed to every call by
    the caller and never read from configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_api_url: str = "https://api.github.com"
    user_agent: str = "github-repo-explorer/1.0"
    request_timeout: float = 30.0
    log_level: str = "INFO"
    sort_directories_first: bool = True
    expansion_error_detail: Literal["detailed", "generic"] = "detailed"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
