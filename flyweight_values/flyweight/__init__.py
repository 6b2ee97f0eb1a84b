"""Flyweight cache for value-object instances."""

from flyweight_values.flyweight.cache import FlyweightCache, canonical_key, get_default_cache

__all__ = ["FlyweightCache", "canonical_key", "get_default_cache"]
