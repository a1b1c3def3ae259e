"""Engine configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="DECISION_",
    )

    app_version: str = "0.1.0"
    log_level: Literal["debug", "info", "warning", "error"] = "info"

    # Execution settings
    node_timeout: float | None = 30.0
    max_depth: int = 1000

    # Default collaborators
    http_timeout: float = 30.0
    data_root: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
