"""Core module containing shared utilities, configuration, and exceptions."""

from flyweight_values.core.config.settings import CacheStrategy, FlyweightSettings, get_settings
from flyweight_values.core.exceptions.base import (
    FlyweightValuesError,
    ConfigurationError,
    SchemaDefinitionError,
    InvalidValueError,
    RequiresAsyncValidationError,
    AsyncStepError,
    ImmutableValueError,
)

__all__ = [
    "CacheStrategy",
    "FlyweightSettings",
    "get_settings",
    "FlyweightValuesError",
    "ConfigurationError",
    "SchemaDefinitionError",
    "InvalidValueError",
    "RequiresAsyncValidationError",
    "AsyncStepError",
    "ImmutableValueError",
]
