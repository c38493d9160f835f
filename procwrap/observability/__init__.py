"""Observability library: logging, metrics."""

from .logging import setup_logging, get_logger, correlation_id_var, JsonFormatter
from .metrics import (
    RETRY_ATTEMPTS,
    TIMEOUTS_TOTAL,
    PROCEDURE_DURATION,
    BOTTLENECK_RUNNING,
    BOTTLENECK_QUEUED,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "correlation_id_var",
    "JsonFormatter",
    "RETRY_ATTEMPTS",
    "TIMEOUTS_TOTAL",
    "PROCEDURE_DURATION",
    "BOTTLENECK_RUNNING",
    "BOTTLENECK_QUEUED",
]
