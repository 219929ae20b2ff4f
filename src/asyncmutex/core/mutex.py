"""FIFO mutex for cooperative asyncio code."""

from __future__ import annotations

import asyncio
import contextlib
from collections import deque
from typing import Deque

from asyncmutex.core.exceptions import LockStateError
from asyncmutex.utils.logging import get_logger


logger = get_logger(__name__)


class AsyncMutex:
    """Asynchronous analog of a thread mutex.

    Serializes a critical section that spans several awaits. ``acquire`` never
    blocks the event loop: when the mutex is taken, the calling task is parked
    on a future and resumed by a later ``release``. Waiters are served strictly
    in the order they called ``acquire``.

    Ownership is handed directly from the releasing caller to the head waiter,
    so the mutex never looks free while somebody is queued.

    Example::

        mutex = AsyncMutex()

        async def critical_section():
            async with mutex:
                await step_one()
                await step_two()
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._held = False
        self._waiters: Deque["asyncio.Future[None]"] = deque()
        self._strict = strict

    def __repr__(self) -> str:
        state = "locked" if self._held else "unlocked"
        return f"<{type(self).__name__} [{state}, waiters:{len(self._waiters)}]>"

    async def __aenter__(self) -> None:
        await self.acquire()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()

    def locked(self) -> bool:
        """Return True if some caller currently holds the mutex."""
        return self._held

    def queue_size(self) -> int:
        """Number of callers waiting for the mutex, not counting the holder."""
        return len(self._waiters)

    async def acquire(self) -> None:
        """Wait until the caller owns the mutex.

        Returns without yielding to the event loop when the mutex is free.
        """
        if not self._held:
            self._held = True
            return

        future: "asyncio.Future[None]" = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        logger.debug("Mutex busy, queued waiter #%d", len(self._waiters))
        try:
            await future
        except asyncio.CancelledError:
            if future.done() and not future.cancelled():
                # Ownership was already handed over; pass it on.
                self.release()
            else:
                with contextlib.suppress(ValueError):
                    self._waiters.remove(future)
            raise

    def release(self) -> None:
        """Give up ownership, handing the mutex to the next waiter if any."""
        while self._waiters:
            future = self._waiters.popleft()
            if future.done():
                continue
            future.set_result(None)
            logger.debug("Mutex handed off, %d still waiting", len(self._waiters))
            return

        if not self._held:
            if self._strict:
                raise LockStateError("release() called on an unlocked mutex")
            logger.warning("release() called on an unlocked mutex")
        self._held = False
