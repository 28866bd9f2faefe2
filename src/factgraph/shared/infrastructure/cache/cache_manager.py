"""
In-memory caching for FactGraph.

Caches are plain objects owned by whoever needs them (for example one
``GraphExplorer`` per canonical graph); nothing here is process-wide.
"""

import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional


@dataclass
class CacheEntry:
    """Represents a cached item with metadata."""

    value: Any
    created_at: float


class CacheBackend(ABC):
    """Abstract base for cache backends."""

    @abstractmethod
    def get(self, key: Hashable) -> Optional[CacheEntry]:
        """Get cached entry by key."""
        pass

    @abstractmethod
    def set(self, key: Hashable, value: Any) -> None:
        """Set cached value."""
        pass

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        entry = self.get(key)
        if entry is not None:
            return entry.value

        value = compute()
        self.set(key, value)
        return value


class MemoryCache(CacheBackend):
    """In-memory cache backend with LRU eviction."""

    def __init__(self, max_size: int = 32):
        if max_size < 1:
            raise ValueError("Cache size must be at least 1")
        self.max_size = max_size
        self._cache: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()

    def get(self, key: Hashable) -> Optional[CacheEntry]:
        """Get cached entry by key, marking it most recently used."""
        entry = self._cache.get(key)
        if entry is not None:
            self._cache.move_to_end(key)
        return entry

    def set(self, key: Hashable, value: Any) -> None:
        """Set cached value, evicting the least recently used entries."""
        self._cache[key] = CacheEntry(value=value, created_at=time.time())
        self._cache.move_to_end(key)

        while len(self._cache) > self.max_size:
            self._cache.popitem(last=False)
