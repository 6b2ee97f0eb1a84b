"""Flyweight cache guaranteeing one instance per (type tag, value)."""

import json
import threading
import weakref
from collections.abc import Mapping, MutableMapping
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from flyweight_values.core.config import CacheStrategy, get_settings
from flyweight_values.core.exceptions import ConfigurationError
from flyweight_values.core.utils.logging import get_logger

if TYPE_CHECKING:
    from flyweight_values.domain.value_object import ValueObject


# Marks encoded values that have no plain JSON form
_TAG = "$t"
_JSON_SCALARS = (str, int, float, bool)


def _dump(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _encode(value: Any) -> Any:
    if value is None or type(value) in _JSON_SCALARS:
        return value
    if isinstance(value, Mapping):
        if all(type(key) is str for key in value) and _TAG not in value:
            return {key: _encode(value[key]) for key in sorted(value)}
        pairs = [[_encode(key), _encode(item)] for key, item in value.items()]
        return {_TAG: "map", "items": sorted(pairs, key=lambda pair: _dump(pair[0]))}
    if isinstance(value, list):
        return [_encode(item) for item in value]
    if isinstance(value, tuple):
        return {_TAG: "tuple", "items": [_encode(item) for item in value]}
    if isinstance(value, (set, frozenset)):
        return {_TAG: "set", "items": sorted((_encode(item) for item in value), key=_dump)}
    return {_TAG: f"{type(value).__module__}.{type(value).__qualname__}", "repr": repr(value)}


def canonical_key(value: Any) -> str:
    """Serialize a plain value so that equal values give equal keys.

    Mapping keys are sorted at every level; sequence order is kept. Values
    JSON cannot tell apart (tuples and lists, ``1`` and ``"1"`` as mapping
    keys, ``Decimal`` and ``str``) are encoded as tagged objects, so distinct
    values never share a key.
    """
    return _dump(_encode(value))


class FlyweightCache:
    """
    Store of value-object instances partitioned by type tag.

    ``resolve`` is the only way instances come into existence: it returns the
    cached instance for a value or builds and stores a new one. Check and
    insert happen under one lock.

    With ``strategy=CacheStrategy.WEAK`` an entry is dropped as soon as no
    caller references its instance. When the cache is disabled every
    resolution builds a fresh instance and nothing is stored.
    """

    def __init__(
        self,
        enabled: bool = True,
        strategy: CacheStrategy = CacheStrategy.STRONG,
    ):
        """Initialize the cache."""
        self._logger = get_logger("flyweight_values.cache")
        self._enabled = enabled
        self._strategy = CacheStrategy(strategy)
        self._lock = threading.RLock()
        self._partitions: dict[str, MutableMapping[str, "ValueObject"]] = {}
        self._owners: dict[str, type] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def strategy(self) -> CacheStrategy:
        return self._strategy

    def enable(self) -> None:
        """Resume caching for all kinds bound to this cache."""
        self._enabled = True
        self._logger.info("Flyweight cache enabled", strategy=self._strategy.value)

    def disable(self) -> None:
        """Stop consulting and populating the cache; existing entries are kept."""
        self._enabled = False
        self._logger.info("Flyweight cache disabled", strategy=self._strategy.value)

    def register(self, tag: str, kind: type) -> None:
        """Record the kind owning a type tag, warning when a tag is reused."""
        with self._lock:
            owner = self._owners.get(tag)
            if owner is not None and owner is not kind:
                self._logger.warning(
                    "Type tag reused by another kind",
                    type_tag=tag,
                    previous=owner.__qualname__,
                    kind=kind.__qualname__,
                )
            self._owners[tag] = kind

    def _new_partition(self) -> MutableMapping[str, "ValueObject"]:
        if self._strategy is CacheStrategy.WEAK:
            return weakref.WeakValueDictionary()
        return {}

    def resolve(self, kind: type, tag: str, value: Any) -> "ValueObject":
        """Return the single instance of ``kind`` holding ``value``.

        Args:
            kind: The value-object class building raw instances.
            tag: Type tag selecting the partition.
            value: Validated plain value.

        Returns:
            The cached instance, or a newly built one.
        """
        if not self._enabled:
            return kind._from_validated(value)

        key = canonical_key(value)
        with self._lock:
            partition = self._partitions.get(tag)
            if partition is None:
                partition = self._partitions[tag] = self._new_partition()

            instance = partition.get(key)
            if instance is not None:
                return instance

            instance = kind._from_validated(value)
            partition[key] = instance

        self._logger.debug("Flyweight instance cached", type_tag=tag, key=key)
        return instance

    def lookup(self, tag: str, value: Any) -> Optional["ValueObject"]:
        """Find the cached instance for a plain value without creating one."""
        if not self._enabled:
            return None
        partition = self._partitions.get(tag)
        if partition is None:
            return None
        return partition.get(canonical_key(value))

    def clear(self, tag: Optional[str] = None) -> None:
        """Drop cached instances, for one tag or for all of them."""
        with self._lock:
            if tag is None:
                self._partitions.clear()
            else:
                self._partitions.pop(tag, None)
        self._logger.debug("Flyweight cache cleared", type_tag=tag)

    def stats(self) -> dict[str, int]:
        """Number of cached instances per type tag."""
        with self._lock:
            return {tag: len(partition) for tag, partition in self._partitions.items()}

    def __len__(self) -> int:
        return sum(self.stats().values())

    def __contains__(self, tag: object) -> bool:
        return tag in self._partitions

    def __repr__(self) -> str:
        return (
            f"FlyweightCache(enabled={self._enabled}, "
            f"strategy={self._strategy.value}, entries={len(self)})"
        )


@lru_cache
def get_default_cache() -> FlyweightCache:
    """Get the process-wide cache, configured from settings."""
    try:
        settings = get_settings()
    except ValidationError as e:
        raise ConfigurationError("Invalid FLYWEIGHT_* settings", cause=e) from e
    return FlyweightCache(enabled=settings.enabled, strategy=settings.cache_strategy)
