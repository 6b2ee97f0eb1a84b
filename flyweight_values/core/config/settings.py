"""
Package settings and configuration management.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from enum import Enum
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheStrategy(str, Enum):
    """How the flyweight cache holds its instances."""

    STRONG = "strong"  # Entries live for the whole process
    WEAK = "weak"  # Entries vanish once no caller references them


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class FlyweightSettings(BaseSettings):
    """Settings for the process-wide flyweight cache and logging."""

    model_config = SettingsConfigDict(
        env_prefix="FLYWEIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cache
    enabled: bool = True
    cache_strategy: CacheStrategy = CacheStrategy.STRONG

    # Logging
    log_level: str = "WARNING"
    json_logs: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case and check the log level name."""
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {v!r}")
        return level


@lru_cache
def get_settings() -> FlyweightSettings:
    """Get cached settings instance."""
    return FlyweightSettings()
