"""
Validation schemas for value objects.

A ``Schema`` wraps a pydantic ``TypeAdapter`` and adds what pydantic does not
offer on its own: a brand (the type tag of the owning kind) and a chain of
refinement/transform steps that may be synchronous or ``async``.
"""

import copy
import inspect
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import InitErrorDetails, PydanticCustomError, core_schema

from flyweight_values.core.exceptions import (
    AsyncStepError,
    RequiresAsyncValidationError,
    SchemaDefinitionError,
)
from flyweight_values.core.utils.normalize import to_plain_value


class StepKind(str, Enum):
    """Kind of post-validation step."""

    REFINEMENT = "refinement"
    TRANSFORM = "transform"


ASYNC_STEP_MESSAGES = {
    StepKind.REFINEMENT: (
        "Async refinement encountered during synchronous parse operation. "
        "Use .parse_async instead."
    ),
    StepKind.TRANSFORM: (
        "Asynchronous transform encountered during synchronous parse operation. "
        "Use .parse_async instead."
    ),
}


@dataclass(frozen=True)
class SchemaStep:
    """A refinement or transform applied after base validation."""

    kind: StepKind
    fn: Callable[[Any], Any]
    message: str = "Invalid input"

    @property
    def is_async(self) -> bool:
        """Whether the step function is a coroutine function."""
        return inspect.iscoroutinefunction(self.fn)


# Collects embedded values waiting on async steps while parse_async runs base
# validation; None during synchronous parsing.
_PENDING: ContextVar[Optional[list["DeferredValue"]]] = ContextVar(
    "flyweight_values_pending", default=None
)


class DeferredValue:
    """Placeholder for an embedded value whose async steps are still to run.

    Embedded validators return one in place of their output when
    ``parse_async`` is validating the enclosing value; the enclosing schema
    awaits it once base validation is done.
    """

    __slots__ = ("input", "_complete")

    def __init__(self, value: Any, complete: Callable[[], Awaitable[Any]]) -> None:
        self.input = value
        self._complete = complete

    @staticmethod
    def accepting() -> bool:
        """Whether the current validation can defer async work."""
        return _PENDING.get() is not None

    @classmethod
    def defer(cls, value: Any, complete: Callable[[], Awaitable[Any]]) -> "DeferredValue":
        """Register ``complete`` to run after base validation of the enclosing value."""
        pending = _PENDING.get()
        if pending is None:
            raise RuntimeError("No asynchronous parse is collecting deferred values")
        deferred = cls(value, complete)
        pending.append(deferred)
        return deferred

    async def resolve(self) -> Any:
        """Run the deferred steps; failures raise ``PydanticCustomError``."""
        return await self._complete()

    def __repr__(self) -> str:
        return f"DeferredValue({self.input!r})"


class Schema:
    """Validation rules for one value-object kind.

    Example:
        >>> email = Schema(str).refine(lambda s: "@" in s, "Not an email")
        >>> email.parse("a@b.c")
        'a@b.c'

    Schemas are never modified in place: ``refine``, ``transform`` and
    ``brand`` return new schemas sharing the same pydantic adapter.
    """

    def __init__(self, annotation: Any = Any) -> None:
        if isinstance(annotation, Schema):
            raise SchemaDefinitionError(
                "Schema cannot wrap another Schema; use it directly",
                details={"schema": repr(annotation)},
            )
        try:
            adapter: TypeAdapter[Any] = TypeAdapter(annotation)
        except TypeError as e:
            raise SchemaDefinitionError(
                f"Cannot build a schema for {annotation!r}", cause=e
            ) from e

        self._annotation = annotation
        self._adapter = adapter
        self._steps: tuple[SchemaStep, ...] = ()
        self._brand: Optional[str] = None

    @property
    def annotation(self) -> Any:
        """The pydantic annotation validated first."""
        return self._annotation

    @property
    def steps(self) -> tuple[SchemaStep, ...]:
        """Refinement and transform steps, in order."""
        return self._steps

    @property
    def brand_tag(self) -> Optional[str]:
        """The type tag this schema is branded with, if any."""
        return self._brand

    @property
    def is_branded(self) -> bool:
        return self._brand is not None

    @property
    def requires_async(self) -> bool:
        """Whether any step is declared ``async``."""
        return any(step.is_async for step in self._steps)

    def _derive(self, **changes: Any) -> "Schema":
        clone = copy.copy(self)
        for name, value in changes.items():
            setattr(clone, f"_{name}", value)
        return clone

    # -------------------------------------------------------------------------
    # Combinators
    # -------------------------------------------------------------------------

    def refine(
        self, check: Callable[[Any], Any], message: str = "Invalid input"
    ) -> "Schema":
        """Add a check; a falsy result (or awaited result) rejects the value."""
        return self._derive(steps=self._steps + (SchemaStep(StepKind.REFINEMENT, check, message),))

    def transform(self, fn: Callable[[Any], Any]) -> "Schema":
        """Add a step replacing the value with ``fn(value)``."""
        return self._derive(steps=self._steps + (SchemaStep(StepKind.TRANSFORM, fn),))

    def brand(self, tag: str) -> "Schema":
        """Bind the schema to a type tag. Already branded schemas are returned as-is."""
        if self._brand is not None:
            return self
        return self._derive(brand=tag)

    def json_schema(self) -> dict[str, Any]:
        """JSON Schema of the base annotation."""
        return self._adapter.json_schema()

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def parse(self, value: Any) -> Any:
        """Validate synchronously.

        Raises:
            ValidationError: If the value is rejected.
            AsyncStepError: If a step needs to be awaited.
        """
        output = self._validate_base(value, pending=None)
        for step in self._steps:
            if step.is_async:
                raise AsyncStepError(ASYNC_STEP_MESSAGES[step.kind], step.kind.value)
            result = self._call_step(step, output)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise AsyncStepError(ASYNC_STEP_MESSAGES[step.kind], step.kind.value)
            output = self._apply_step(step, output, result)
        return output

    async def parse_async(self, value: Any) -> Any:
        """Validate, awaiting any asynchronous refinements and transforms.

        Embedded kinds and schemas with async steps are validated here too:
        their async work is deferred during base validation and awaited
        before this schema's own steps run.

        Raises:
            ValidationError: If the value is rejected.
        """
        pending: list[DeferredValue] = []
        output = self._validate_base(value, pending=pending)
        if pending:
            errors: list[InitErrorDetails] = []
            output = await self._resolve_deferred(output, (), errors)
            if errors:
                raise ValidationError.from_exception_data(self._brand or "Schema", errors)
        for step in self._steps:
            result = self._call_step(step, output)
            if inspect.isawaitable(result):
                try:
                    result = await result
                except ValidationError:
                    raise
                except (ValueError, AssertionError) as e:
                    raise self._step_failure(step, output, str(e) or step.message) from e
            output = self._apply_step(step, output, result)
        return output

    def _validate_base(
        self, value: Any, pending: Optional[list["DeferredValue"]]
    ) -> Any:
        token = _PENDING.set(pending)
        try:
            validated = self._adapter.validate_python(value)
            # Models and embedded kinds are dumped back to plain data
            return self._adapter.dump_python(validated)
        finally:
            _PENDING.reset(token)

    async def _resolve_deferred(
        self, value: Any, loc: tuple[Any, ...], errors: list[InitErrorDetails]
    ) -> Any:
        if isinstance(value, DeferredValue):
            try:
                return await value.resolve()
            except PydanticCustomError as e:
                errors.append(InitErrorDetails(type=e, loc=loc, input=value.input))
                return value.input
        if isinstance(value, dict):
            return {
                key: await self._resolve_deferred(item, loc + (key,), errors)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [
                await self._resolve_deferred(item, loc + (index,), errors)
                for index, item in enumerate(value)
            ]
        if isinstance(value, tuple):
            return tuple(
                [
                    await self._resolve_deferred(item, loc + (index,), errors)
                    for index, item in enumerate(value)
                ]
            )
        return value

    def _call_step(self, step: SchemaStep, value: Any) -> Any:
        try:
            return step.fn(value)
        except ValidationError:
            raise
        except (ValueError, AssertionError) as e:
            raise self._step_failure(step, value, str(e) or step.message) from e

    def _apply_step(self, step: SchemaStep, value: Any, result: Any) -> Any:
        if step.kind is StepKind.TRANSFORM:
            return result
        if not result:
            raise self._step_failure(step, value, step.message)
        return value

    def _step_failure(self, step: SchemaStep, value: Any, message: str) -> ValidationError:
        return ValidationError.from_exception_data(
            self._brand or "Schema",
            [
                InitErrorDetails(
                    type=PydanticCustomError(f"{step.kind.value}_failed", message),
                    loc=(),
                    input=value,
                )
            ],
        )

    # -------------------------------------------------------------------------
    # Embedding
    # -------------------------------------------------------------------------

    def __get_pydantic_core_schema__(
        self, source_type: Any, handler: Any
    ) -> core_schema.CoreSchema:
        """Let the schema act as ``Annotated`` metadata inside other annotations."""
        return core_schema.no_info_plain_validator_function(
            self._validate_embedded,
            serialization=core_schema.plain_serializer_function_ser_schema(
                to_plain_value
            ),
        )

    def _validate_embedded(self, value: Any) -> Any:
        plain = to_plain_value(value)
        try:
            return self.parse(plain)
        except (AsyncStepError, RequiresAsyncValidationError):
            if not DeferredValue.accepting():
                raise
            return DeferredValue.defer(plain, lambda: self._complete_embedded(plain))
        except ValidationError as e:
            raise self._embedded_error(e) from e

    async def _complete_embedded(self, plain: Any) -> Any:
        try:
            return await self.parse_async(plain)
        except ValidationError as e:
            raise self._embedded_error(e) from e

    def _embedded_error(self, error: ValidationError) -> PydanticCustomError:
        return PydanticCustomError(
            "invalid_embedded_value",
            "{tag} rejected the value: {reason}",
            {
                "tag": self._brand or "Schema",
                "reason": "; ".join(detail["msg"] for detail in error.errors()),
            },
        )

    def __repr__(self) -> str:
        parts = [repr(self._annotation)]
        if self._brand is not None:
            parts.append(f"brand={self._brand!r}")
        if self._steps:
            parts.append(f"steps={len(self._steps)}")
        return f"Schema({', '.join(parts)})"
