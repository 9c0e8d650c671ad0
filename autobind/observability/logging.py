"""
Logging utilities for autobind.

Log records emitted while a graph is being built carry the chain of
identifiers that led to them, e.g. ``app.Mailer -> app.Transport``.
"""

import contextvars
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from ..exceptions import describe

# Identifiers currently being resolved, outermost first
_resolution_path: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "resolution_path", default=()
)


def get_resolution_path() -> tuple[str, ...]:
    """Names of the identifiers being resolved in this context, outermost first."""
    return _resolution_path.get()


@contextmanager
def resolution_frame(identifier: Any) -> Iterator[tuple[str, ...]]:
    """Push ``identifier`` onto the logging resolution path for the block."""
    path = _resolution_path.get() + (describe(identifier),)
    token = _resolution_path.set(path)
    try:
        yield path
    finally:
        _resolution_path.reset(token)


def get_logging_context() -> dict[str, Any]:
    """Fields attached to every autobind record: a timestamp and, mid-resolution, the path."""
    context: dict[str, Any] = {"timestamp": datetime.now().isoformat()}
    path = _resolution_path.get()
    if path:
        context["resolution_path"] = " -> ".join(path)
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Adds :func:`get_logging_context` to each record; explicit ``extra`` wins."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = get_logging_context()
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = context
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    level: int = logging.INFO,
    success: bool = True,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    """
    Emit one structured record for a finished container operation.

    Args:
        logger: Logger or adapter to write to
        operation: Operation name, e.g. ``container.resolve``
        level: Log level
        success: Whether the operation succeeded
        duration_ms: Wall time of the operation, if measured
        **context: Extra record fields (identifier names and the like)
    """
    fields = get_logging_context()
    fields.update(operation=operation, success=success)
    if duration_ms is not None:
        fields["duration_ms"] = round(duration_ms, 2)
    fields.update(context)

    status = "succeeded" if success else "failed"
    message = f"{operation} {status}"
    if duration_ms is not None:
        message += f" in {duration_ms:.2f}ms"

    logger.log(level, message, extra=fields)
