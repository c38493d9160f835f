"""Exceptions raised by the procedure wrappers."""
from __future__ import annotations

from typing import Union


class ProcwrapError(Exception):
    """Base class for errors raised by procwrap itself."""


class CompositionError(ProcwrapError, TypeError):
    """A composition plan entry was not built with ``set_wrapper``."""


class ProcedureTimeoutError(ProcwrapError, TimeoutError):
    """Raised by ``with_timeout`` when a procedure outlives its threshold.

    Inherits from built-in TimeoutError for broad exception handling.  The
    message format is fixed so callers can match on it.

    Attributes:
        threshold_ms: the threshold that was exceeded, in milliseconds
        operation: label of the wrapped procedure
    """

    def __init__(self, threshold_ms: Union[int, float], operation: str = "unknown") -> None:
        self.threshold_ms = threshold_ms
        self.operation = operation
        super().__init__(f"promise was timed out in {threshold_ms} ms, by withTimeout")
