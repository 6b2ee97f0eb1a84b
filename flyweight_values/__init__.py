"""
flyweight-values - immutable, schema-validated value objects.

Provides:
- Flyweight identity: equal values of a kind are the same instance
- Deep immutability of every instance's value
- Validation through pydantic, with sync and async refinements/transforms
- Nominal kinds that double as field schemas inside other schemas
"""

from flyweight_values.core.config import CacheStrategy, FlyweightSettings, get_settings
from flyweight_values.core.exceptions import (
    AsyncStepError,
    ConfigurationError,
    FlyweightValuesError,
    ImmutableValueError,
    InvalidValueError,
    RequiresAsyncValidationError,
    SchemaDefinitionError,
)
from flyweight_values.core.utils import (
    FrozenDict,
    FrozenList,
    freeze,
    get_logger,
    is_value_object,
    setup_logging,
    to_plain_value,
)
from flyweight_values.domain import ValueObject, embed, value_object
from flyweight_values.flyweight import FlyweightCache, get_default_cache
from flyweight_values.schema import Schema

__version__ = "0.1.0"

__all__ = [
    # Factory and runtime
    "value_object",
    "embed",
    "ValueObject",
    "Schema",
    # Cache
    "FlyweightCache",
    "get_default_cache",
    # Values
    "to_plain_value",
    "is_value_object",
    "freeze",
    "FrozenDict",
    "FrozenList",
    # Errors
    "FlyweightValuesError",
    "InvalidValueError",
    "RequiresAsyncValidationError",
    "AsyncStepError",
    "ImmutableValueError",
    "SchemaDefinitionError",
    "ConfigurationError",
    # Configuration
    "CacheStrategy",
    "FlyweightSettings",
    "get_settings",
    "setup_logging",
    "get_logger",
]
