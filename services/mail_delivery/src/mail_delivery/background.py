"""Detached, bounded background work with its own error boundary."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Runs fire-and-forget coroutines on the current event loop.

    At most ``max_concurrency`` bodies run at once; the rest wait on a
    semaphore.  Strong references are held until each task finishes so the
    loop cannot garbage-collect them mid-flight.  Exceptions are logged,
    never re-raised: callers do not join these tasks.
    """

    def __init__(self, max_concurrency: int = 8) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._max_concurrency = max_concurrency
        self._semaphore: asyncio.Semaphore | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[None]:
        """Schedule *coro* without waiting for it. Must be called on a running loop."""
        task = asyncio.get_running_loop().create_task(self._guarded(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every spawned task (including ones spawned meanwhile) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _guarded(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        # Created lazily so the semaphore binds to the loop actually running tasks.
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrency)
        try:
            async with self._semaphore:
                await coro
        except asyncio.CancelledError:
            coro.close()
            logger.warning("Background task cancelled", extra={"task": name})
            raise
        except Exception:
            logger.exception("Background task failed", extra={"task": name})
