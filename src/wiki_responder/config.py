"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Backlog wiki
    backlog_space_id: str = ""
    backlog_api_key: str = ""
    backlog_project_id: str = ""

    # Dedup and processing budget
    dedup_capacity: int = 100
    dedup_history_limit: int = 10
    thread_history_limit: int = 50
    signature_max_age_seconds: int = 300
    original_deadline_seconds: float = 160.0
    retry_deadline_seconds: float = 120.0
    progress_interval_seconds: float = 2.0

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
