"""Logging for sqlbind.

Every module obtains its logger through :func:`get_logger`, which keeps all
loggers under the ``sqlbind`` namespace. Records are tagged with the current
correlation id: one set by the caller through :func:`correlation_context`,
or the id a :class:`~sqlbind.bulk.BulkInsert` session opens around each
flush. Bind values are never logged.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlbind._serialization import encode_json

if TYPE_CHECKING:
    from collections.abc import Generator
    from logging import LogRecord

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_context",
    "get_correlation_id",
    "get_logger",
    "log_with_context",
)

_ROOT = "sqlbind"

correlation_id_var: ContextVar[str | None] = ContextVar("sqlbind_correlation_id", default=None)


def get_correlation_id() -> str | None:
    """The correlation id of the current context, if any."""
    return correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str, None, None]:
    """Tag every sqlbind log record inside the block with a correlation id.

    Args:
        correlation_id: The id to use; a random one is generated when omitted.

    Yields:
        The id in effect inside the block.
    """
    correlation_id = correlation_id or uuid.uuid4().hex
    token = correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(token)


class CorrelationIDFilter(logging.Filter):
    """Copy the current correlation id onto each record."""

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Fields passed through :func:`log_with_context` are merged into the top
    level; the correlation id is included when the record carries one.
    """

    def format(self, record: LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return encode_json(entry)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger under the ``sqlbind`` namespace.

    Args:
        name: Module name, with or without the ``sqlbind.`` prefix.

    Returns:
        The logger, with the correlation id filter attached.
    """
    if name is None:
        return logging.getLogger(_ROOT)
    if name != _ROOT and not name.startswith(f"{_ROOT}."):
        name = f"{_ROOT}.{name}"

    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def configure_logging(
    level: str = "INFO",
    structured: bool = True,
    handlers: list[logging.Handler] | None = None,
) -> None:
    """Send sqlbind's log records to stderr, or to the given handlers.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        structured: JSON lines when true, plain text otherwise.
        handlers: Handlers to use instead of a stderr stream handler.
    """
    root = logging.getLogger(_ROOT)
    root.setLevel(getattr(logging, level.upper()))
    root.handlers.clear()

    formatter: logging.Formatter = (
        StructuredFormatter()
        if structured
        else logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    for handler in handlers or [logging.StreamHandler(sys.stderr)]:
        if handler.formatter is None:
            handler.setFormatter(formatter)
        root.addHandler(handler)
    root.propagate = False


def log_with_context(logger: logging.Logger, level: int, message: str, **extra_fields: Any) -> None:
    """Log a message with structured fields, skipping the work when the level is disabled.

    Args:
        logger: The logger to use.
        level: Log level.
        message: Log message.
        **extra_fields: Fields merged into structured output.
    """
    if not logger.isEnabledFor(level):
        return
    logger.log(level, message, extra={"extra_fields": extra_fields})
