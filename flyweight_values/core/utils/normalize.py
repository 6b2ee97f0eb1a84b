"""Plain-value normalization."""

from collections.abc import Mapping
from typing import Any

# Set on ValueObject; checked by attribute to avoid an import cycle.
VALUE_OBJECT_MARKER = "__is_value_object__"


def is_value_object(value: Any) -> bool:
    """Check whether a value is a value-object instance."""
    return getattr(type(value), VALUE_OBJECT_MARKER, False) is True


def to_plain_value(value: Any) -> Any:
    """Strip value-object wrappers from a value, recursively.

    Value objects give back their (already plain) ``value``. Lists and tuples
    keep their family with each item normalized, mappings become ``dict``s
    with normalized values, anything else is returned unchanged.
    """
    if is_value_object(value):
        return value.value
    if isinstance(value, list):
        return [to_plain_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(to_plain_value(item) for item in value)
    if isinstance(value, Mapping):
        return {key: to_plain_value(item) for key, item in value.items()}
    return value
