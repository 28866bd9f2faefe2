"""
Caching infrastructure for FactGraph.
"""

from .cache_manager import CacheBackend, CacheEntry, MemoryCache

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "MemoryCache",
]
