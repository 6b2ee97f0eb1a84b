"""Configuration module for the flyweight-values package."""

from flyweight_values.core.config.settings import CacheStrategy, FlyweightSettings, get_settings

__all__ = ["CacheStrategy", "FlyweightSettings", "get_settings"]
