"""Base runtime shared by every value-object kind."""

import json
import threading
import weakref
from collections.abc import Mapping
from typing import Any, ClassVar, Optional

from pydantic import ValidationError
from pydantic_core import PydanticCustomError, core_schema

from flyweight_values.core.exceptions import (
    AsyncStepError,
    ImmutableValueError,
    InvalidValueError,
    RequiresAsyncValidationError,
    SchemaDefinitionError,
)
from flyweight_values.core.utils.freeze import freeze
from flyweight_values.core.utils.logging import get_logger
from flyweight_values.core.utils.normalize import is_value_object, to_plain_value
from flyweight_values.flyweight.cache import FlyweightCache, get_default_cache
from flyweight_values.schema import ASYNC_STEP_MESSAGES, DeferredValue, Schema

logger = get_logger("flyweight_values.value_object")

_JSON_SCALARS = (str, int, float, bool, type(None))
_VIEW_LOCK = threading.Lock()


class ValueObjectMeta(type):
    """Metaclass giving kinds read-only ``type`` and ``schema`` attributes."""

    @property
    def type(cls) -> str:
        """Type tag of the kind."""
        if cls._kind is None:
            raise AttributeError(f"{cls.__name__} has no type tag")
        return cls._kind._type_tag

    @property
    def schema(cls) -> Schema:
        """Branded schema of the kind."""
        if cls._kind is None:
            raise AttributeError(f"{cls.__name__} has no schema")
        return cls._kind._schema


class ValueObject(metaclass=ValueObjectMeta):
    """
    Immutable value identified by its content.

    Instances are flyweights: constructing the same kind twice from equal
    values yields the same object. Kinds are made with ``value_object()``;
    subclassing a kind adds behavior (a role) on top of the same cached
    record. All construction happens in ``__new__``, so returning a cached
    instance never re-initializes it.

    Example:
        >>> class Name(value_object("Name", str)):
        ...     def initials(self) -> str:
        ...         return "".join(part[0] for part in self.value.split())
        >>> Name("John Doe") is Name("John Doe")
        True
    """

    __slots__ = ("_value", "_canonical", "_views", "__weakref__")

    __is_value_object__: ClassVar[bool] = True

    # Bound by the factory; roles inherit them from their kind
    _kind: ClassVar[Optional[type["ValueObject"]]] = None
    _type_tag: ClassVar[str]
    _schema: ClassVar[Schema]
    _cache: ClassVar[Optional[FlyweightCache]] = None

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def __new__(cls, value: Any) -> "ValueObject":
        kind = cls._require_kind()
        validated = cls._validate_sync(to_plain_value(value))
        canonical = kind._flyweight().resolve(kind, kind._type_tag, validated)
        return canonical._as_role(cls)

    def __init__(self, value: Any) -> None:
        pass

    @classmethod
    async def create_async(cls, value: Any) -> "ValueObject":
        """Construct an instance, awaiting asynchronous schema steps.

        Raises:
            InvalidValueError: If the schema rejects the value.
        """
        kind = cls._require_kind()
        plain = to_plain_value(value)
        try:
            validated = await kind._schema.parse_async(plain)
        except ValidationError as e:
            logger.debug("Value rejected", type_tag=kind._type_tag, errors=e.error_count())
            raise InvalidValueError.from_error(e, kind._type_tag) from e
        except AsyncStepError as e:
            raise RequiresAsyncValidationError(
                e.message, type_tag=kind._type_tag, cause=e
            ) from e
        canonical = kind._flyweight().resolve(
            kind, kind._type_tag, to_plain_value(validated)
        )
        return canonical._as_role(cls)

    @classmethod
    def _require_kind(cls) -> type["ValueObject"]:
        kind = cls._kind
        if kind is None:
            raise SchemaDefinitionError(
                f"{cls.__name__} is not bound to a schema; define kinds with value_object()"
            )
        return kind

    @classmethod
    def _flyweight(cls) -> FlyweightCache:
        kind = cls._kind
        if kind is not None and kind._cache is not None:
            return kind._cache
        return get_default_cache()

    @classmethod
    def _validate_sync(cls, plain: Any) -> Any:
        kind = cls._require_kind()
        schema = kind._schema
        try:
            if schema.requires_async:
                step = next(step for step in schema.steps if step.is_async)
                raise AsyncStepError(ASYNC_STEP_MESSAGES[step.kind], step.kind.value)
            return to_plain_value(schema.parse(plain))
        except AsyncStepError as e:
            message = e.message.replace(
                "Use .parse_async instead.",
                f"Use {cls.__name__}.create_async() instead of {cls.__name__}()",
            )
            raise RequiresAsyncValidationError(
                message, type_tag=kind._type_tag, cause=e
            ) from e
        except ValidationError as e:
            logger.debug("Value rejected", type_tag=kind._type_tag, errors=e.error_count())
            raise InvalidValueError.from_error(e, kind._type_tag) from e

    @classmethod
    def _from_validated(cls, value: Any) -> "ValueObject":
        """Build a raw canonical record. Only the flyweight cache calls this."""
        instance = object.__new__(cls)
        object.__setattr__(instance, "_value", freeze(value))
        object.__setattr__(instance, "_canonical", None)
        object.__setattr__(instance, "_views", weakref.WeakValueDictionary())
        return instance

    def _as_role(self, cls: type["ValueObject"]) -> "ValueObject":
        if cls is self.__class__:
            return self
        with _VIEW_LOCK:
            view = self._views.get(cls)
            if view is None:
                view = object.__new__(cls)
                object.__setattr__(view, "_value", self._value)
                object.__setattr__(view, "_canonical", self)
                object.__setattr__(view, "_views", None)
                self._views[cls] = view
        return view

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def value(self) -> Any:
        """The deeply frozen plain value."""
        return self._value

    @property
    def canonical(self) -> "ValueObject":
        """The cached record shared by this instance and all its roles."""
        return self if self._canonical is None else self._canonical

    @property
    def type(self) -> str:
        return self.__class__._require_kind()._type_tag

    @property
    def schema(self) -> Schema:
        return self.__class__._require_kind()._schema

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def equals(self, other: Any) -> bool:
        """Check whether ``other`` (instance or raw value) holds the same value.

        Relies on the cache: equal values share one instance, so this is an
        identity check.
        """
        found = self._flyweight().lookup(self.type, to_plain_value(other))
        return found is not None and found is self.canonical

    def with_(self, value: Any) -> "ValueObject":
        """Return the instance for this value with ``value`` applied.

        Mapping values are shallow-merged; anything else replaces the value.
        The result is validated like any other construction.
        """
        partial = to_plain_value(value)
        if isinstance(self._value, Mapping) and isinstance(partial, Mapping):
            return self.__class__({**self._value, **partial})
        return self.__class__(partial)

    def to_plain_value(self) -> Any:
        return self._value

    def value_of(self) -> Any:
        return self._value

    def to_json(self) -> Any:
        """JSON projection: scalars as-is, containers as compact JSON text."""
        if isinstance(self._value, _JSON_SCALARS):
            return self._value
        return json.dumps(
            self._value, separators=(",", ":"), ensure_ascii=False, default=str
        )

    # -------------------------------------------------------------------------
    # Python protocol
    # -------------------------------------------------------------------------

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutableValueError(
            f"Cannot set '{name}': {self.__class__.__name__} is immutable"
        )

    def __delattr__(self, name: str) -> None:
        raise ImmutableValueError(
            f"Cannot delete '{name}': {self.__class__.__name__} is immutable"
        )

    def __eq__(self, other: object) -> bool:
        if not is_value_object(other):
            return NotImplemented
        return self.canonical is other.canonical  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return object.__hash__(self.canonical)

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._value!r})"

    def __copy__(self) -> "ValueObject":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "ValueObject":
        return self

    # -------------------------------------------------------------------------
    # Flyweight switches
    # -------------------------------------------------------------------------

    @classmethod
    def _disable_flyweight(cls) -> None:
        """Disable the cache this kind is bound to (process-wide for the default)."""
        cls._flyweight().disable()

    @classmethod
    def _enable_flyweight(cls) -> None:
        cls._flyweight().enable()

    # -------------------------------------------------------------------------
    # pydantic integration
    # -------------------------------------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: Any
    ) -> core_schema.CoreSchema:
        """Allow a kind to be used as a field annotation in other schemas."""
        return core_schema.no_info_plain_validator_function(
            cls._validate_embedded,
            serialization=core_schema.plain_serializer_function_ser_schema(
                _dump_embedded
            ),
        )

    @classmethod
    def _validate_embedded(cls, value: Any) -> Any:
        try:
            return cls(value)
        except RequiresAsyncValidationError:
            if not DeferredValue.accepting():
                raise
            return DeferredValue.defer(value, lambda: cls._complete_embedded(value))
        except InvalidValueError as e:
            raise _embedded_error(e) from e

    @classmethod
    async def _complete_embedded(cls, value: Any) -> Any:
        try:
            instance = await cls.create_async(value)
        except InvalidValueError as e:
            raise _embedded_error(e) from e
        return to_plain_value(instance.value)


def _dump_embedded(value: Any) -> Any:
    return to_plain_value(value)


def _embedded_error(error: InvalidValueError) -> PydanticCustomError:
    reason = "; ".join(issue["msg"] for issue in error.issues) or error.message
    return PydanticCustomError(
        "invalid_value_object",
        "{type_tag} rejected the value: {reason}",
        {"type_tag": error.type_tag, "reason": reason},
    )

