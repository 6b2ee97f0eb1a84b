"""
Domain Layer - value objects and the factory producing their kinds.

This layer contains:
- ValueObject: runtime shared by all instances (construction, equality, with_)
- value_object: factory binding a type tag and a schema into a kind
- embed: adapter turning a kind into an annotation for other schemas
"""

from flyweight_values.domain.factory import embed, value_object
from flyweight_values.domain.value_object import ValueObject, ValueObjectMeta

__all__ = [
    "ValueObject",
    "ValueObjectMeta",
    "embed",
    "value_object",
]
