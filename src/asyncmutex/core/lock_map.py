"""Registry of per-key mutexes that are created and dropped on demand."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Dict, Hashable, List

from asyncmutex.core.exceptions import LockStateError
from asyncmutex.core.locks import AsyncLock, LockManager
from asyncmutex.core.models import LockStatus
from asyncmutex.core.mutex import AsyncMutex
from asyncmutex.utils.logging import get_logger

if TYPE_CHECKING:
    from asyncmutex.core.settings import LockSettings


logger = get_logger(__name__)


class _KeyedLock:
    def __init__(self, lock_map: "AsyncLockMap", key: Hashable) -> None:
        self._lock_map = lock_map
        self._key = key

    async def __aenter__(self) -> None:
        await self._lock_map.acquire(self._key)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._lock_map.release(self._key)


class AsyncLockMap(LockManager):
    """One ``AsyncMutex`` per key, kept only while the key is contested.

    Entries are created by the first ``acquire`` for a key and removed by the
    ``release`` that leaves the mutex with nobody holding or waiting on it.
    Keys are independent: holding one never delays another.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._locks: Dict[Hashable, AsyncMutex] = {}
        self._strict = strict

    @classmethod
    def from_settings(cls, settings: "LockSettings") -> "AsyncLockMap":
        return cls(strict=settings.strict)

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, key: object) -> bool:
        return key in self._locks

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [keys:{len(self._locks)}]>"

    def lock(self, key: Hashable) -> AsyncLock:
        return _KeyedLock(self, key)

    def locked(self, key: Hashable) -> bool:
        mutex = self._locks.get(key)
        return mutex is not None and mutex.locked()

    def queue_size(self, key: Hashable) -> int:
        mutex = self._locks.get(key)
        return mutex.queue_size() if mutex is not None else 0

    def snapshot(self) -> List[LockStatus]:
        return [
            LockStatus(key=str(key), locked=mutex.locked(), waiters=mutex.queue_size())
            for key, mutex in self._locks.items()
        ]

    async def acquire(self, key: Hashable) -> None:
        """Wait until the caller owns the lock for ``key``."""
        mutex = self._locks.get(key)
        if mutex is None:
            mutex = AsyncMutex(strict=self._strict)
            self._locks[key] = mutex
            logger.debug("Created lock for key %r", key)

        try:
            await mutex.acquire()
        except asyncio.CancelledError:
            self._evict_if_idle(key, mutex)
            raise

    def release(self, key: Hashable) -> None:
        """Release ``key``; unknown keys are ignored unless strict."""
        mutex = self._locks.get(key)
        if mutex is None:
            if self._strict:
                raise LockStateError(f"release() called for key {key!r} which is not locked")
            logger.debug("Ignoring release of unknown key %r", key)
            return

        mutex.release()
        if mutex.queue_size() == 0:
            self._evict_if_idle(key, mutex)

    def _evict_if_idle(self, key: Hashable, mutex: AsyncMutex) -> None:
        if mutex.locked() or mutex.queue_size():
            return
        if self._locks.get(key) is mutex:
            del self._locks[key]
            logger.debug("Evicted idle lock for key %r", key)
