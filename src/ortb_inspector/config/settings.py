# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Configuration settings for the OpenRTB inspector."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Result memo cache
    result_cache_enabled: bool = True
    result_cache_max_entries: Optional[int] = 1024  # None = unbounded

    # Analysis defaults
    force_ctv: bool = False
    default_partner_profile: Optional[str] = None  # eq

    # Logging
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
