"""
Shared data models for FactGraph.
"""

from .base import BaseModel, FrozenModel
from .graph import (
    KGNode,
    KGEdge,
    ParsedGraphResult,
    CanonicalGraph,
    make_node_id,
    collect_types,
)

__all__ = [
    # Graph models
    "KGNode",
    "KGEdge",
    "ParsedGraphResult",
    "CanonicalGraph",
    "make_node_id",
    "collect_types",
    # Base models
    "BaseModel",
    "FrozenModel",
]
