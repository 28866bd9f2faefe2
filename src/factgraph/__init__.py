"""
FactGraph - knowledge graph extraction and layout engine.
"""

__version__ = "1.0.0"
__author__ = "FactGraph Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.models.graph import CanonicalGraph, KGEdge, KGNode, ParsedGraphResult
from .shared.exceptions import FactGraphError, LayoutError, ValidationError

__all__ = [
    "get_settings",
    "KGNode",
    "KGEdge",
    "ParsedGraphResult",
    "CanonicalGraph",
    "FactGraphError",
    "LayoutError",
    "ValidationError",
]
