"""Validation schemas built on pydantic."""

from flyweight_values.schema.base import (
    ASYNC_STEP_MESSAGES,
    DeferredValue,
    Schema,
    SchemaStep,
    StepKind,
)

__all__ = ["ASYNC_STEP_MESSAGES", "DeferredValue", "Schema", "SchemaStep", "StepKind"]
