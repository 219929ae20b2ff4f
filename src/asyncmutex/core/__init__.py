"""Core lock primitives."""

from .exceptions import LockStateError
from .lock_map import AsyncLockMap
from .locks import AsyncLock, LockManager
from .models import LockStatus
from .mutex import AsyncMutex
from .settings import LockSettings

__all__ = [
    "AsyncLock",
    "AsyncLockMap",
    "AsyncMutex",
    "LockManager",
    "LockSettings",
    "LockStateError",
    "LockStatus",
]
