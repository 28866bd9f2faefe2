"""
Shared infrastructure components for FactGraph.

Provides centralized infrastructure services including:
- In-memory caching for memoized layouts
- Logging configuration
- Metrics collection
"""

from .cache.cache_manager import CacheBackend, CacheEntry, MemoryCache
from .monitoring.logger import get_logger, setup_logging
from .monitoring.metrics import MetricsCollector, get_metrics, timed_operation

__all__ = [
    # Cache
    "CacheBackend",
    "CacheEntry",
    "MemoryCache",

    # Monitoring
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
    "timed_operation",
]
