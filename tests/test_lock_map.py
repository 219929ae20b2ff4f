from __future__ import annotations

import asyncio
import logging

import pytest

from asyncmutex.core.exceptions import LockStateError
from asyncmutex.core.lock_map import AsyncLockMap
from asyncmutex.core.locks import LockManager
from asyncmutex.core.models import LockStatus
from asyncmutex.core.settings import LockSettings


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_release_evicts_idle_entry():
    locks = AsyncLockMap()
    await locks.acquire("x")
    assert "x" in locks
    assert locks.locked("x")

    locks.release("x")

    assert "x" not in locks
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_distinct_keys_do_not_block_each_other():
    locks = AsyncLockMap()
    await locks.acquire("a")
    await asyncio.wait_for(locks.acquire("b"), timeout=1)

    assert locks.locked("a")
    assert locks.locked("b")
    assert len(locks) == 2


def test_release_unknown_key_is_noop():
    locks = AsyncLockMap()
    locks.release("unknown")
    assert len(locks) == 0
    assert "unknown" not in locks


def test_release_unknown_key_raises_in_strict_mode():
    locks = AsyncLockMap(strict=True)
    with pytest.raises(LockStateError):
        locks.release("unknown")
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_double_release_on_key_detected_in_strict_mode():
    locks = AsyncLockMap.from_settings(LockSettings(strict=True))
    await locks.acquire("job")
    locks.release("job")
    with pytest.raises(LockStateError):
        locks.release("job")


@pytest.mark.asyncio
async def test_entry_kept_while_waiters_pending():
    locks = AsyncLockMap()
    await locks.acquire("k")

    waiter = asyncio.create_task(locks.acquire("k"))
    await settle()
    assert locks.queue_size("k") == 1

    locks.release("k")
    await asyncio.wait_for(waiter, timeout=1)
    assert "k" in locks
    assert locks.locked("k")

    locks.release("k")
    assert "k" not in locks


@pytest.mark.asyncio
async def test_reacquire_after_eviction_is_immediate():
    locks = AsyncLockMap()
    await locks.acquire("k")
    locks.release("k")

    await asyncio.wait_for(locks.acquire("k"), timeout=1)
    assert locks.locked("k")
    assert locks.queue_size("k") == 0


@pytest.mark.asyncio
async def test_same_key_fifo_with_context_manager():
    locks = AsyncLockMap()
    order: list[int] = []

    async def worker(n: int) -> None:
        async with locks.lock("shared"):
            order.append(n)
            await asyncio.sleep(0)

    tasks = []
    for n in range(5):
        tasks.append(asyncio.create_task(worker(n)))
        await asyncio.sleep(0)
    await asyncio.wait_for(asyncio.gather(*tasks), timeout=1)

    assert order == list(range(5))
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_context_manager_releases_key_on_error():
    locks = AsyncLockMap()
    assert isinstance(locks, LockManager)

    with pytest.raises(RuntimeError):
        async with locks.lock("job"):
            raise RuntimeError("failed inside critical section")

    assert "job" not in locks


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_leak_entry():
    locks = AsyncLockMap()
    await locks.acquire("k")

    waiter = asyncio.create_task(locks.acquire("k"))
    await settle()
    waiter.cancel()
    await settle()

    assert waiter.cancelled()
    assert locks.queue_size("k") == 0
    locks.release("k")
    assert "k" not in locks


@pytest.mark.asyncio
async def test_granted_waiter_cancelled_before_resuming_evicts_entry():
    locks = AsyncLockMap()
    await locks.acquire("k")

    waiter = asyncio.create_task(locks.acquire("k"))
    await settle()
    locks.release("k")
    waiter.cancel()

    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert "k" not in locks


@pytest.mark.asyncio
async def test_snapshot_reports_contention():
    locks = AsyncLockMap()
    await locks.acquire("a")
    await locks.acquire(42)
    waiter = asyncio.create_task(locks.acquire("a"))
    await settle()

    statuses = {status.key: status for status in locks.snapshot()}

    assert statuses["a"] == LockStatus(key="a", locked=True, waiters=1)
    assert statuses["42"] == LockStatus(key="42", locked=True, waiters=0)
    assert locks.queue_size("missing") == 0
    assert not locks.locked("missing")

    locks.release("a")
    await asyncio.wait_for(waiter, timeout=1)
    locks.release("a")
    locks.release(42)
    assert locks.snapshot() == []


def test_release_unknown_key_logs_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="asyncmutex")

    AsyncLockMap().release("unknown")

    records = [r for r in caplog.records if r.name == "asyncmutex.core.lock_map"]
    assert [r.levelno for r in records] == [logging.DEBUG]
    assert "'unknown'" in records[0].getMessage()
