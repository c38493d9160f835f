"""Resilience wrappers for async procedures: timeout, retry, bottleneck, composition."""

from .bottleneck import Bottleneck, BottleneckOptions, shared_bottleneck, with_bottleneck
from .duration import Duration, to_milliseconds
from .errors import CompositionError, ProcedureTimeoutError, ProcwrapError
from .procedure import Arity, arity_of
from .retry import RETRY_MESSAGE, RetryOptions, with_retry
from .timeout import TimeoutOptions, with_timeout
from .wrapper import Wrapper, WrapperChoice, set_wrapper, with_wrappers

__all__ = [
    "Bottleneck",
    "BottleneckOptions",
    "shared_bottleneck",
    "with_bottleneck",
    "Duration",
    "to_milliseconds",
    "CompositionError",
    "ProcedureTimeoutError",
    "ProcwrapError",
    "Arity",
    "arity_of",
    "RETRY_MESSAGE",
    "RetryOptions",
    "with_retry",
    "TimeoutOptions",
    "with_timeout",
    "Wrapper",
    "WrapperChoice",
    "set_wrapper",
    "with_wrappers",
]
