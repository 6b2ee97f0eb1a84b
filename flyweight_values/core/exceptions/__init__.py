"""Custom exceptions for the flyweight-values package."""

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
    "FlyweightValuesError",
    "ConfigurationError",
    "SchemaDefinitionError",
    "InvalidValueError",
    "RequiresAsyncValidationError",
    "AsyncStepError",
    "ImmutableValueError",
]
