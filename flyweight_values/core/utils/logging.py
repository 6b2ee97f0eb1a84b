"""Structured logging configuration."""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.typing import EventDict, WrappedLogger


def add_timestamp(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add timestamp to log events."""
    from datetime import datetime

    event_dict["timestamp"] = datetime.utcnow().isoformat()
    return event_dict


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> None:
    """Set up structured logging.

    The package never calls this itself; applications opt in.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to
            ``FLYWEIGHT_LOG_LEVEL``.
        json_format: If True, output logs in JSON format. Defaults to
            ``FLYWEIGHT_JSON_LOGS``.
        log_file: Optional file path for log output.
    """
    if level is None or json_format is None:
        from flyweight_values.core.config import get_settings

        settings = get_settings()
        level = level or settings.log_level
        json_format = settings.json_logs if json_format is None else json_format

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_level = getattr(logging, level.upper())
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("flyweight_values").setLevel(log_level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        logging.getLogger().addHandler(file_handler)


def get_logger(name: Optional[str] = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (usually module name).
        **initial_context: Initial context to bind to the logger.

    Returns:
        A bound structlog logger.
    """
    # Wrap a stdlib logger so the package stays silent until the application
    # configures logging.
    return structlog.wrap_logger(
        logging.getLogger(name or "flyweight_values"), **initial_context
    )
