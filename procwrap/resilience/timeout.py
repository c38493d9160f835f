"""Timeout wrapper.

``with_timeout`` races a procedure against a deadline.  The procedure is
*not* cancelled when the deadline wins: it keeps running in the background
and its eventual result or error is discarded.  Timing out means the caller
stops waiting, not that the work is aborted.  Cancellation may come later as
an explicit option; it is deliberately absent today.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Union

from procwrap.observability.metrics import PROCEDURE_DURATION, TIMEOUTS_TOTAL

from .duration import Duration, to_milliseconds
from .errors import ProcedureTimeoutError
from .procedure import P, BinaryProcedure, adapt_procedure
from .wrapper import coerce_options

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeoutOptions:
    threshold: Duration
    # Label for logs and metrics
    operation: str = "unknown"


def _discard_outcome(task: asyncio.Future) -> None:
    # Retrieve the late outcome so asyncio does not report it as unhandled
    if not task.cancelled():
        task.exception()


def with_timeout(procedure: P, options: Union[TimeoutOptions, Mapping[str, Any]]) -> P:
    """Return a procedure that fails if *procedure* outlives ``options.threshold``.

    - if the procedure settles first, its result is returned or its error
      re-raised unchanged
    - if the threshold passes first, ProcedureTimeoutError is raised with the
      message ``promise was timed out in {ms} ms, by withTimeout``

    Usage::

        fetch = with_timeout(fetch_quote, TimeoutOptions(threshold={"seconds": 3}))
        quote = await fetch({"symbol": "ACME"}, context)
    """
    options = coerce_options(options, TimeoutOptions)
    threshold_ms = to_milliseconds(options.threshold)

    def build(logic: BinaryProcedure) -> BinaryProcedure:
        async def race(input: Any, context: Any) -> Any:
            loop = asyncio.get_running_loop()
            started = loop.time()
            task = asyncio.ensure_future(logic(input, context))
            try:
                # asyncio.wait never cancels the task and always releases its timer
                done, _ = await asyncio.wait({task}, timeout=threshold_ms / 1000)
            except asyncio.CancelledError:
                task.add_done_callback(_discard_outcome)
                raise

            if task in done:
                outcome = "error" if task.cancelled() or task.exception() else "success"
                PROCEDURE_DURATION.labels(
                    operation=options.operation, outcome=outcome
                ).observe(loop.time() - started)
                return task.result()

            task.add_done_callback(_discard_outcome)
            TIMEOUTS_TOTAL.labels(operation=options.operation).inc()
            logger.warning(
                "procedure_timed_out",
                extra={"operation": options.operation, "threshold_ms": threshold_ms},
            )
            raise ProcedureTimeoutError(threshold_ms, options.operation)

        return race

    return adapt_procedure(procedure, build)
