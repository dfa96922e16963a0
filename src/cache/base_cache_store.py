# src/cache/base_cache_store.py — v2
"""Abstract cache store interface.

Caching is a performance optimisation, never a correctness dependency:
implementations treat an unreadable backing store as empty and log it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta

from paperchat.cache.models import CacheEntry, CacheStats


class BaseCacheStore(ABC):
    """Unified interface for persistent key-value cache backends."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by content hash, or None."""

    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Persist an entry before returning. Last writer wins."""

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Entry count and approximate serialized size."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove all entries and the backing store (maintenance only)."""

    @abstractmethod
    async def evict_older_than(self, max_age: timedelta) -> int:
        """Age-based sweep (maintenance only). Returns evicted count."""
