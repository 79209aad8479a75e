"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Day enumeration
    home_location: str = "Home"
    travel_location: str = "Traveling"
    default_climate: str = "temperate"
    climate_by_location: dict[str, str] = Field(
        default_factory=lambda: {"Home": "temperate", "Traveling": "variable"}
    )
    max_trip_days: int = 366

    # Sync
    log_merge_conflicts: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
