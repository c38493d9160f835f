"""Single-retry wrapper.

Design decisions:
- exactly one retry (two attempts in total); the count is not configurable
- only ``Exception`` subclasses are retried; cancellation, KeyboardInterrupt
  and other BaseException raises pass straight through
- the second attempt's outcome is surfaced as-is, so a double failure raises
  the second error, not the first
- the retry is reported through the caller's own logger (``context.log``)
  when the context carries one, and silently skipped otherwise
"""
from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from procwrap.observability.metrics import RETRY_ATTEMPTS

from .procedure import MISSING, P, BinaryProcedure, adapt_procedure
from .wrapper import coerce_options

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "withRetry.progress: caught an error, will retry"


@dataclass(frozen=True)
class RetryOptions:
    operation: str = "unknown"


def _context_log(context: Any) -> Optional[Any]:
    """Return the context's logger if it has a ``warning`` or ``warn`` method."""
    if context is MISSING or context is None:
        return None
    if isinstance(context, Mapping):
        log = context.get("log")
    else:
        log = getattr(context, "log", None)
    if callable(getattr(log, "warning", None)) or callable(getattr(log, "warn", None)):
        return log
    return None


def _warn(log: Any, payload: dict) -> None:
    # logging.Logger and adapters take structured fields through extra=;
    # warn-only log methods take the payload as the second argument
    if callable(getattr(log, "warning", None)):
        log.warning(RETRY_MESSAGE, extra=payload)
    else:
        log.warn(RETRY_MESSAGE, payload)


def with_retry(procedure: P, options: Union[RetryOptions, Mapping[str, Any], None] = None) -> P:
    """Return a procedure that calls *procedure* again once if it raises."""
    options = coerce_options(options, RetryOptions)

    def build(logic: BinaryProcedure) -> BinaryProcedure:
        async def retry_once(input: Any, context: Any) -> Any:
            try:
                return await logic(input, context)
            except Exception as exc:
                log = _context_log(context)
                if log is not None:
                    _warn(log, {
                        "error": {
                            "message": str(exc),
                            "stack": "".join(
                                traceback.format_exception(type(exc), exc, exc.__traceback__)
                            ),
                        },
                    })
                RETRY_ATTEMPTS.labels(operation=options.operation).inc()
                logger.info(
                    "retrying_after_error",
                    extra={"operation": options.operation, "error": str(exc)},
                )
            # Outside the except block so the second error is not chained to the first
            return await logic(input, context)

        return retry_once

    return adapt_procedure(procedure, build)
