"""procwrap: composable timeout, retry and concurrency wrappers for async procedures."""

from .observability import get_logger, setup_logging
from .resilience import (
    Arity,
    Bottleneck,
    BottleneckOptions,
    CompositionError,
    Duration,
    ProcedureTimeoutError,
    ProcwrapError,
    RetryOptions,
    TimeoutOptions,
    Wrapper,
    WrapperChoice,
    arity_of,
    set_wrapper,
    shared_bottleneck,
    to_milliseconds,
    with_bottleneck,
    with_retry,
    with_timeout,
    with_wrappers,
)

__all__ = [
    "Arity",
    "Bottleneck",
    "BottleneckOptions",
    "CompositionError",
    "Duration",
    "ProcedureTimeoutError",
    "ProcwrapError",
    "RetryOptions",
    "TimeoutOptions",
    "Wrapper",
    "WrapperChoice",
    "arity_of",
    "get_logger",
    "set_wrapper",
    "setup_logging",
    "shared_bottleneck",
    "to_milliseconds",
    "with_bottleneck",
    "with_retry",
    "with_timeout",
    "with_wrappers",
]
