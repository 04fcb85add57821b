"""A long-lived event loop in a background thread for sync callers."""

import asyncio
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoopThread:
    """Owns one event loop running in a daemon thread.

    Flask views are synchronous; running each request's coroutine on this
    shared loop (instead of a throwaway loop per request) lets detached
    audit and notification tasks outlive the request that spawned them.
    """

    def __init__(self, name: str = "mail-delivery-loop") -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._started = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def start(self) -> "LoopThread":
        if not self._started:
            self._thread.start()
            self._started = True
        return self

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run *coro* on the loop and block until it finishes."""
        if not self._started:
            coro.close()
            raise RuntimeError("LoopThread.start() has not been called")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout)

    def stop(
        self,
        drain: Callable[[], Coroutine[Any, Any, None]] | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Optionally await *drain* on the loop, then stop and join the thread."""
        if not self._started or self._loop.is_closed():
            return
        if drain is not None:
            try:
                self.run(drain(), timeout=timeout)
            except Exception:
                logger.exception("Error while draining background work")
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        self._loop.close()
        logger.info("Event loop stopped")

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()
