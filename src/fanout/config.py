"""Configuration settings for the application."""

from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Load environment variables from a .env file
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical
    LOG_DIR: str = "./logs"  # Transcript logs, one markdown file per agent

    # LLM Configuration
    LLM_BACKEND: str = "openai"  # Options: openai, anthropic
    MODEL: str | None = None  # Falls back to the backend's default model
    OPENAI_API_KEY: str | None = None
    ANTHROPIC_API_KEY: str | None = None
    MAX_TOKENS: int = 8192
    WEB_SEARCH: bool = True

    # History compaction
    SUMMARY_TOKEN_THRESHOLD: int = 5000
    SUMMARY_KEEP_LAST: int = 2


settings = Settings()
