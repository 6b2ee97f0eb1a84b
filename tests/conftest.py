"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Generator

import pytest

from flyweight_values import CacheStrategy, FlyweightCache, FlyweightSettings, get_default_cache


@pytest.fixture
def settings() -> FlyweightSettings:
    """Create test settings, ignoring any .env file."""
    return FlyweightSettings(_env_file=None)


@pytest.fixture
def cache() -> FlyweightCache:
    """Create an isolated flyweight cache."""
    return FlyweightCache()


@pytest.fixture
def weak_cache() -> FlyweightCache:
    """Create an isolated cache holding weak references."""
    return FlyweightCache(strategy=CacheStrategy.WEAK)


@pytest.fixture
def default_cache() -> Generator[FlyweightCache, None, None]:
    """Yield the process-wide cache, restoring its switch afterwards."""
    cache = get_default_cache()
    was_enabled = cache.enabled
    yield cache
    if was_enabled:
        cache.enable()
    else:
        cache.disable()
