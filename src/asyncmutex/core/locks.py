"""Abstract interfaces for keyed locks."""

from __future__ import annotations

import abc
from typing import Hashable, Protocol


class AsyncLock(Protocol):
    async def __aenter__(self) -> None: ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...


class LockManager(abc.ABC):
    @abc.abstractmethod
    def lock(self, key: Hashable) -> AsyncLock:  # pragma: no cover - interface
        """Return an async context manager that holds the lock for ``key``."""
        raise NotImplementedError
