"""
Application configuration using Pydantic settings.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefixed with PLANBOARD_)."""

    app_name: str = "Planboard"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Upper bound on the snapshot size accepted by the HTTP facade.
    # The pairwise conflict scan is O(n^2) in the tasks of one employee.
    max_tasks_per_request: int = 2000

    model_config = SettingsConfigDict(
        env_prefix="PLANBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
