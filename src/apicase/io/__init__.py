"""IO layer: caching."""

from .cache import AsyncConcurrentCache, ConcurrentCache

__all__ = ["AsyncConcurrentCache", "ConcurrentCache"]
