"""Debounced sync scheduler — one remote write per key per burst of edits.

The UI updates a line's quantity on every click; the server only needs the
value the user settles on. Each key has at most one pending timer. Scheduling
again for the same key replaces the timer and the payload, so a burst of N
calls inside the window produces a single write carrying the last payload.
Keys are independent of each other.

Timers live on the running asyncio loop (``loop.call_later``). When a timer
fires its registry entry is removed and the write runs as a task. In-flight
writes are tracked so callers can wait for them (``drain``) or force every
pending write out at once (``flush_all``, e.g. on page unload).
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_DELAY = 0.5

P = TypeVar("P")


class DebouncedSyncScheduler(Generic[P]):
    def __init__(self, write: Callable[[str, P], Awaitable[Any]], delay: float = DEFAULT_DELAY) -> None:
        self._write = write
        self.delay = delay
        self._pending: dict[str, tuple[asyncio.TimerHandle, P]] = {}
        self._inflight: set[asyncio.Task] = set()

    # -------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------
    @property
    def pending_keys(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def has_pending(self, key: str) -> bool:
        return key in self._pending

    @property
    def in_flight(self) -> int:
        return len(self._inflight)

    # -------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------
    def schedule(self, key: str, payload: P) -> None:
        """Replace any pending write for ``key`` with one carrying ``payload``.

        Must be called from code running on the event loop.
        """
        self.cancel(key)
        loop = asyncio.get_running_loop()
        handle = loop.call_later(self.delay, self._fire, key)
        self._pending[key] = (handle, payload)
        logger.debug("Write scheduled", key=key, delay=self.delay)

    def cancel(self, key: str) -> bool:
        """Drop the pending write for ``key``. Returns False if none was pending."""
        entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry[0].cancel()
        return True

    def cancel_all(self) -> int:
        """Drop every pending write; in-flight writes are left to finish."""
        keys = list(self._pending)
        for key in keys:
            self.cancel(key)
        if keys:
            logger.info("Pending writes cancelled", count=len(keys))
        return len(keys)

    async def flush_all(self) -> None:
        """Fire every pending write now and wait for all writes to finish."""
        for key in list(self._pending):
            handle, _ = self._pending[key]
            handle.cancel()
            self._fire(key)
        await self.drain()

    async def drain(self) -> None:
        """Wait until no write is in flight."""
        while self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    # -------------------------------------------------------------------
    # Firing
    # -------------------------------------------------------------------
    def _fire(self, key: str) -> None:
        entry = self._pending.pop(key, None)
        if entry is None:
            return
        _, payload = entry
        task = asyncio.get_running_loop().create_task(self._run(key, payload))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, key: str, payload: P) -> None:
        try:
            await self._write(key, payload)
        except Exception:
            # Writers report their own failures; anything reaching here is a bug
            logger.exception("Debounced write crashed", key=key)
