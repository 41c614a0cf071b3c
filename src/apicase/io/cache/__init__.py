"""Process-local single-flight caches."""

from .cache import AsyncConcurrentCache, CacheEntry, ConcurrentCache, EntryState

__all__ = ["AsyncConcurrentCache", "CacheEntry", "ConcurrentCache", "EntryState"]
