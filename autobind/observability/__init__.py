"""
Observability components.

Provides structured logging with resolution-path context and metrics
collection for container operations.
"""

from .logging import (
    ContextualLoggerAdapter,
    get_logger,
    get_logging_context,
    get_resolution_path,
    log_operation,
    resolution_frame,
)
from .metrics import MetricsCollector, OperationMetrics

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationMetrics",
    # Logging
    "get_resolution_path",
    "resolution_frame",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
]
