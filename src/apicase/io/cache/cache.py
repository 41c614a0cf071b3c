"""Single-flight memoizing caches.

At most one factory invocation runs per key at any time. Concurrent callers
for the same key wait for that one invocation and observe the identical
value or error. Failures are never cached: the pending entry is removed so
the next caller retries.

- ConcurrentCache: thread-safe, synchronous factories (descriptor building,
  provider lookup)
- AsyncConcurrentCache: asyncio, awaitable factories; bound to one event loop
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable, Hashable
from enum import StrEnum
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class EntryState(StrEnum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


class CacheEntry(Generic[K, V]):
    """A lazily computed value. Readers see it only once it completes."""

    __slots__ = ("key", "state", "_value", "_error", "_ready")

    def __init__(self, key: K) -> None:
        self.key = key
        self.state = EntryState.PENDING
        self._value: V | None = None
        self._error: BaseException | None = None
        self._ready = threading.Event()

    def complete(self, value: V) -> None:
        self._value = value
        self.state = EntryState.DONE
        self._ready.set()

    def fail(self, error: BaseException) -> None:
        self._error = error
        self.state = EntryState.FAILED
        self._ready.set()

    def wait(self) -> V:
        self._ready.wait()
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]


class ConcurrentCache(Generic[K, V]):
    """Thread-safe keyed cache with one factory call per key.

    The lock only guards the entry table; factories run outside it, so
    different keys compute in parallel.

    Example:
        >>> cache: ConcurrentCache[str, int] = ConcurrentCache()
        >>> cache.get_or_add("answer", lambda key: 42)
        42
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[K, CacheEntry[K, V]] = {}
        self._lock = threading.Lock()

    def get_or_add(self, key: K, factory: Callable[[K], V]) -> V:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.state is EntryState.DONE:
                return entry.wait()
            owner = entry is None
            if owner:
                entry = self._entries[key] = CacheEntry(key)

        if not owner:
            return entry.wait()

        try:
            value = factory(key)
        except BaseException as e:
            with self._lock:
                if self._entries.get(key) is entry:
                    del self._entries[key]
            entry.fail(e)
            raise
        entry.complete(value)
        return value

    def try_get(self, key: K) -> V | None:
        """Completed value for key, or None (never waits)."""
        with self._lock:
            entry = self._entries.get(key)
        return entry.wait() if entry is not None and entry.state is EntryState.DONE else None

    def remove(self, key: K) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[call-overload]
        return entry is not None and entry.state is EntryState.DONE

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class AsyncConcurrentCache(Generic[K, V]):
    """Asyncio keyed cache with one in-flight computation per key.

    The computation runs as its own task; every caller awaits it through
    asyncio.shield. Cancelling a caller only cancels that caller's wait, the
    shared computation still completes and is cached for the others.

    Example:
        >>> cache: AsyncConcurrentCache[str, str] = AsyncConcurrentCache()
        >>> await cache.get_or_add("token", fetch_token)
    """

    __slots__ = ("_tasks",)

    def __init__(self) -> None:
        self._tasks: dict[K, asyncio.Task[V]] = {}

    async def get_or_add(self, key: K, factory: Callable[[K], Awaitable[V]]) -> V:
        task = self._tasks.get(key)
        if task is None or _failed(task):
            task = self._tasks[key] = asyncio.ensure_future(factory(key))
            task.add_done_callback(lambda t: self._discard_failed(key, t))
        elif task.done():
            return task.result()
        return await asyncio.shield(task)

    def _discard_failed(self, key: K, task: asyncio.Task[V]) -> None:
        if _failed(task) and self._tasks.get(key) is task:
            del self._tasks[key]

    def try_get(self, key: K) -> V | None:
        task = self._tasks.get(key)
        return task.result() if task is not None and task.done() and not _failed(task) else None

    def remove(self, key: K) -> bool:
        return self._tasks.pop(key, None) is not None

    def clear(self) -> None:
        self._tasks.clear()

    def __contains__(self, key: object) -> bool:
        task = self._tasks.get(key)  # type: ignore[call-overload]
        return task is not None and task.done() and not _failed(task)

    def __len__(self) -> int:
        return len(self._tasks)


def _failed(task: asyncio.Future[object]) -> bool:
    return task.done() and (task.cancelled() or task.exception() is not None)
