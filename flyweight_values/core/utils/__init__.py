"""Utility modules for the flyweight-values package."""

from flyweight_values.core.utils.freeze import FrozenDict, FrozenList, freeze
from flyweight_values.core.utils.logging import get_logger, setup_logging
from flyweight_values.core.utils.normalize import is_value_object, to_plain_value

__all__ = [
    "FrozenDict",
    "FrozenList",
    "freeze",
    "get_logger",
    "setup_logging",
    "is_value_object",
    "to_plain_value",
]
