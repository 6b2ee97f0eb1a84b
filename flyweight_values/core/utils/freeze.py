"""Deep freezing of plain values."""

from collections.abc import Mapping
from typing import Any, NoReturn

from flyweight_values.core.exceptions import ImmutableValueError


def _refuse(self: Any, *args: Any, **kwargs: Any) -> NoReturn:
    raise ImmutableValueError(
        f"'{type(self).__name__}' is frozen and cannot be modified"
    )


class FrozenDict(dict):
    """A ``dict`` whose contents can no longer change.

    Compares equal to plain dicts and serializes as a JSON object.
    """

    __slots__ = ("_sealed",)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if getattr(self, "_sealed", False):
            _refuse(self)
        super().__init__(*args, **kwargs)
        self._sealed = True

    __setitem__ = _refuse
    __delitem__ = _refuse
    __ior__ = _refuse
    clear = _refuse
    pop = _refuse
    popitem = _refuse
    setdefault = _refuse
    update = _refuse

    def __hash__(self) -> int:  # type: ignore[override]
        return hash(frozenset(self.items()))

    def __copy__(self) -> "FrozenDict":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "FrozenDict":
        return self

    def __reduce__(self) -> tuple[Any, ...]:
        return (FrozenDict, (dict(self),))


class FrozenList(list):
    """A ``list`` whose contents can no longer change.

    Compares equal to plain lists and serializes as a JSON array.
    """

    __slots__ = ("_sealed",)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if getattr(self, "_sealed", False):
            _refuse(self)
        super().__init__(*args, **kwargs)
        self._sealed = True

    __setitem__ = _refuse
    __delitem__ = _refuse
    __iadd__ = _refuse
    __imul__ = _refuse
    append = _refuse
    extend = _refuse
    insert = _refuse
    pop = _refuse
    remove = _refuse
    clear = _refuse
    sort = _refuse
    reverse = _refuse

    def __hash__(self) -> int:  # type: ignore[override]
        return hash(tuple(self))

    def __copy__(self) -> "FrozenList":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "FrozenList":
        return self

    def __reduce__(self) -> tuple[Any, ...]:
        return (FrozenList, (list(self),))


def freeze(value: Any) -> Any:
    """Recursively freeze a plain value.

    Mappings become ``FrozenDict``, lists ``FrozenList``, sets ``frozenset``;
    tuples keep their type with frozen items. Scalars are returned unchanged.
    """
    if isinstance(value, (FrozenDict, FrozenList)):
        return value
    if isinstance(value, Mapping):
        return FrozenDict((key, freeze(item)) for key, item in value.items())
    if isinstance(value, list):
        return FrozenList(freeze(item) for item in value)
    if isinstance(value, tuple):
        return tuple(freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(item) for item in value)
    return value
