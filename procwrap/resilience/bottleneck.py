"""Bottleneck: semaphore-based concurrency admission for procedures.

``with_bottleneck`` routes every call of a procedure through a
``Bottleneck``.  Calls beyond ``max_concurrent`` wait for a slot rather than
being rejected.  When no limiter is given, each wrapped procedure gets its
own; share one across call sites by passing the same instance, or opt into
``shared_bottleneck()``.
"""
from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from procwrap.observability.metrics import BOTTLENECK_QUEUED, BOTTLENECK_RUNNING
from procwrap.settings import get_settings

from .procedure import P, BinaryProcedure, adapt_procedure
from .wrapper import coerce_options

logger = logging.getLogger(__name__)


class Bottleneck:
    """Async semaphore admission queue.

    An asyncio.Semaphore binds to the first event loop it waits on, so one is
    kept per running loop.  A limiter built at import time, or reused across
    successive ``asyncio.run`` calls, caps concurrency within each loop;
    ``running`` and ``queued`` count across all of them.

    Args:
        name: identifies the limiter (for metrics/logs)
        max_concurrent: maximum simultaneous executions; defaults to
            PROCWRAP_DEFAULT_MAX_CONCURRENT (1 unless configured)
    """

    def __init__(self, name: str = "default", max_concurrent: Optional[int] = None) -> None:
        if max_concurrent is None:
            max_concurrent = get_settings().default_max_concurrent
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self.name = name
        self.max_concurrent = max_concurrent
        self._semaphores: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Semaphore] = (
            weakref.WeakKeyDictionary()
        )
        self._running = 0
        self._queued = 0

    def _semaphore_for_running_loop(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        semaphore = self._semaphores.get(loop)
        if semaphore is None:
            semaphore = self._semaphores[loop] = asyncio.Semaphore(self.max_concurrent)
        return semaphore

    async def schedule(self, func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """Run ``func(*args)`` once a slot is free and return its result."""
        semaphore = self._semaphore_for_running_loop()
        self._queued += 1
        BOTTLENECK_QUEUED.labels(limiter=self.name).inc()
        try:
            await semaphore.acquire()
        finally:
            self._queued -= 1
            BOTTLENECK_QUEUED.labels(limiter=self.name).dec()

        self._running += 1
        BOTTLENECK_RUNNING.labels(limiter=self.name).inc()
        logger.debug(
            "bottleneck_admitted",
            extra={"limiter": self.name, "running": self._running, "queued": self._queued},
        )
        try:
            return await func(*args)
        finally:
            self._running -= 1
            BOTTLENECK_RUNNING.labels(limiter=self.name).dec()
            semaphore.release()

    @property
    def running(self) -> int:
        return self._running

    @property
    def queued(self) -> int:
        return self._queued


@lru_cache(maxsize=1)
def shared_bottleneck() -> Bottleneck:
    """Process-wide limiter for call sites that explicitly want to share one.

    Safe to call at import time; admission is per event loop (see Bottleneck).
    """
    return Bottleneck(name="shared")


@dataclass(frozen=True)
class BottleneckOptions:
    limiter: Optional[Bottleneck] = None
    operation: str = "unknown"


def with_bottleneck(procedure: P, options: Union[BottleneckOptions, Mapping[str, Any], None] = None) -> P:
    """Return a procedure whose calls run through a concurrency limiter."""
    options = coerce_options(options, BottleneckOptions)
    limiter = options.limiter if options.limiter is not None else Bottleneck(name=options.operation)

    def build(logic: BinaryProcedure) -> BinaryProcedure:
        async def admit(input: Any, context: Any) -> Any:
            return await limiter.schedule(logic, input, context)

        return admit

    return adapt_procedure(procedure, build)
