"""Asynchronous FIFO mutexes and keyed lock maps for asyncio."""

from .core import AsyncLockMap, AsyncMutex, LockSettings, LockStateError, LockStatus

__all__ = [
    "__version__",
    "AsyncLockMap",
    "AsyncMutex",
    "LockSettings",
    "LockStateError",
    "LockStatus",
]

__version__ = "0.1.0"
