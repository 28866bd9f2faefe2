"""
Shared components for FactGraph.

Contains common models, utilities, and infrastructure used across all services:

- Canonical graph models and validation
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (cache, logging, metrics)
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "FrozenModel",
    "KGNode", "KGEdge", "ParsedGraphResult", "CanonicalGraph",
    "make_node_id", "collect_types",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "FactGraphError", "ValidationError", "LayoutError",

    # From infrastructure
    "CacheBackend", "CacheEntry", "MemoryCache",
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics",
    "timed_operation",
]
