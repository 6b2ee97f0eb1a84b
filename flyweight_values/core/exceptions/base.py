"""Base exception classes for the flyweight-values package."""

from datetime import datetime
from typing import Any, Optional


class FlyweightValuesError(Exception):
    """Base exception for all flyweight-values errors."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.utcnow()

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(FlyweightValuesError):
    """Raised when there's a configuration issue."""

    pass


class SchemaDefinitionError(FlyweightValuesError):
    """Raised when a kind or schema is defined with invalid arguments."""

    pass


class InvalidValueError(FlyweightValuesError):
    """Raised when a schema rejects a value.

    The schema engine's diagnostic is kept as-is: ``message`` is the text of
    the original error and ``issues`` its per-field error list.
    """

    def __init__(
        self,
        message: str,
        type_tag: Optional[str] = None,
        issues: Optional[list[dict[str, Any]]] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, details, cause)
        self.type_tag = type_tag
        self.issues = issues or []

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_error(
        cls, error: Exception, type_tag: Optional[str] = None
    ) -> "InvalidValueError":
        """Wrap an arbitrary schema error, keeping its message and issues."""
        issues: list[dict[str, Any]] = []
        errors = getattr(error, "errors", None)
        if callable(errors):
            issues = list(errors())
        return cls(str(error), type_tag=type_tag, issues=issues, cause=error)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["type_tag"] = self.type_tag
        data["issues"] = [
            {key: value for key, value in issue.items() if key != "ctx"}
            for issue in self.issues
        ]
        return data


class RequiresAsyncValidationError(InvalidValueError):
    """Raised when synchronous construction meets an asynchronous schema step."""

    pass


class AsyncStepError(FlyweightValuesError):
    """Raised by ``Schema.parse`` when a step can only run asynchronously.

    Not a ``ValueError``, so it passes through pydantic validators untouched.
    """

    def __init__(
        self,
        message: str,
        step_kind: str,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, details, cause)
        self.step_kind = step_kind
        self.details["step_kind"] = step_kind

    def __str__(self) -> str:
        return self.message


class ImmutableValueError(FlyweightValuesError, TypeError):
    """Raised on any attempt to mutate a frozen value or a value object."""

    pass
