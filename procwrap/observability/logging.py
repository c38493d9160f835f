"""Structured JSON logging setup.

Every log record includes:
- timestamp (ISO-8601)
- level
- logger name
- service name (from SERVICE_NAME env var)
- correlation_id (from contextvars, set by the caller around a procedure call)
- trace_id / span_id (if an OpenTelemetry span is active)
- message
- any extra kwargs

Events emitted by the wrappers, with their extra fields:
- ``procedure_timed_out`` (WARNING): operation, threshold_ms
- ``retrying_after_error`` (INFO): operation, error
- ``bottleneck_admitted`` (DEBUG): limiter, running, queued

The retry notice sent to a caller's own ``context.log`` is not routed here;
it goes to whatever logger the context carries.
"""
from __future__ import annotations

import json
import logging
import sys
import time
from contextvars import ContextVar
from typing import Optional

from opentelemetry import trace as otel_trace

from procwrap.settings import get_settings

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message",
    "taskName",
})


class JsonFormatter(logging.Formatter):
    def __init__(self, service_name: Optional[str] = None) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        trace_id = ""
        span_id = ""
        ctx = otel_trace.get_current_span().get_span_context()
        if ctx.is_valid:
            trace_id = format(ctx.trace_id, "032x")
            span_id = format(ctx.span_id, "016x")

        log_entry = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
                         + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "service": self._service_name or get_settings().service_name,
            "correlation_id": correlation_id_var.get(""),
            "trace_id": trace_id,
            "span_id": span_id,
            "message": record.getMessage(),
        }

        # Merge any extra fields added via extra={} in log calls
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logger to emit structured JSON."""
    level = level or get_settings().log_level
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
