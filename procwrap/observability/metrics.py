"""Prometheus metrics for the procedure wrappers.

All collectors are created here so import order doesn't matter.  Expose them
with ``prometheus_client.start_http_server`` or any registry exporter.
"""
from prometheus_client import Counter, Gauge, Histogram

# ── Retry ────────────────────────────────────────────────────────────────────
RETRY_ATTEMPTS = Counter(
    "procwrap_retry_attempts_total",
    "Number of retry attempts made by with_retry",
    ["operation"],
)

# ── Timeout ──────────────────────────────────────────────────────────────────
TIMEOUTS_TOTAL = Counter(
    "procwrap_timeouts_total",
    "Procedures that exceeded their with_timeout threshold",
    ["operation"],
)

PROCEDURE_DURATION = Histogram(
    "procwrap_procedure_duration_seconds",
    "Duration of procedures that settled before their timeout",
    ["operation", "outcome"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30],
)

# ── Bottleneck ───────────────────────────────────────────────────────────────
BOTTLENECK_RUNNING = Gauge(
    "procwrap_bottleneck_running",
    "Executions currently admitted by a bottleneck",
    ["limiter"],
)

BOTTLENECK_QUEUED = Gauge(
    "procwrap_bottleneck_queued",
    "Executions waiting for a bottleneck slot",
    ["limiter"],
)
