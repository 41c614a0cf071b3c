"""Tests for single-flight caches."""

import asyncio
import threading

import pytest

from apicase.io.cache import AsyncConcurrentCache, ConcurrentCache


# ─────────────────────────────────────────────────────────────────────────────
# ConcurrentCache
# ─────────────────────────────────────────────────────────────────────────────


def test_get_or_add_caches_value() -> None:
    cache: ConcurrentCache[str, int] = ConcurrentCache()
    calls: list[str] = []

    def factory(key: str) -> int:
        calls.append(key)
        return len(key)

    assert cache.get_or_add("abc", factory) == 3
    assert cache.get_or_add("abc", factory) == 3
    assert calls == ["abc"]
    assert "abc" in cache
    assert cache.try_get("abc") == 3
    assert cache.try_get("missing") is None


def test_concurrent_callers_share_one_invocation() -> None:
    """1000 threads released together on one key run the factory exactly once."""
    cache: ConcurrentCache[str, object] = ConcurrentCache()
    calls = 0
    counter_lock = threading.Lock()
    start = threading.Barrier(1000)
    results: list[object] = [None] * 1000

    def factory(key: str) -> object:
        nonlocal calls
        with counter_lock:
            calls += 1
        threading.Event().wait(0.05)
        return object()

    def worker(i: int) -> None:
        start.wait()
        results[i] = cache.get_or_add("key", factory)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(1000)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert calls == 1
    assert results[0] is not None
    assert all(r is results[0] for r in results)


def test_failure_is_not_cached() -> None:
    cache: ConcurrentCache[str, int] = ConcurrentCache()
    attempts = 0

    def flaky(key: str) -> int:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("boom")
        return 7

    with pytest.raises(RuntimeError, match="boom"):
        cache.get_or_add("k", flaky)
    assert "k" not in cache
    assert len(cache) == 0

    assert cache.get_or_add("k", flaky) == 7
    assert attempts == 2


def test_remove_and_clear() -> None:
    cache: ConcurrentCache[int, int] = ConcurrentCache()
    cache.get_or_add(1, lambda k: k)
    cache.get_or_add(2, lambda k: k)

    assert cache.remove(1)
    assert not cache.remove(1)
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


# ─────────────────────────────────────────────────────────────────────────────
# AsyncConcurrentCache
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_async_concurrent_callers_share_one_invocation() -> None:
    cache: AsyncConcurrentCache[str, object] = AsyncConcurrentCache()
    calls = 0

    async def factory(key: str) -> object:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        return object()

    results = await asyncio.gather(*(cache.get_or_add("key", factory) for _ in range(1000)))

    assert calls == 1
    assert all(r is results[0] for r in results)
    assert "key" in cache
    assert cache.try_get("key") is results[0]


@pytest.mark.asyncio
async def test_async_waiters_observe_same_error_and_next_call_retries() -> None:
    cache: AsyncConcurrentCache[str, int] = AsyncConcurrentCache()
    attempts = 0

    async def flaky(key: str) -> int:
        nonlocal attempts
        attempts += 1
        await asyncio.sleep(0.01)
        if attempts == 1:
            raise ValueError("first attempt fails")
        return 42

    results = await asyncio.gather(*(cache.get_or_add("k", flaky) for _ in range(10)), return_exceptions=True)
    assert attempts == 1
    assert all(isinstance(r, ValueError) for r in results)
    assert "k" not in cache

    assert await cache.get_or_add("k", flaky) == 42
    assert attempts == 2


@pytest.mark.asyncio
async def test_async_cancelling_a_waiter_keeps_shared_computation() -> None:
    cache: AsyncConcurrentCache[str, str] = AsyncConcurrentCache()
    release = asyncio.Event()
    calls = 0

    async def factory(key: str) -> str:
        nonlocal calls
        calls += 1
        await release.wait()
        return "value"

    first = asyncio.create_task(cache.get_or_add("k", factory))
    second = asyncio.create_task(cache.get_or_add("k", factory))
    await asyncio.sleep(0)

    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first

    release.set()
    assert await second == "value"
    assert await cache.get_or_add("k", factory) == "value"
    assert calls == 1
