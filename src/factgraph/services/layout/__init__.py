"""
Layout Engine for FactGraph.

Force-directed placement of graph nodes on an adaptive canvas, plus
deterministic per-type colors.
"""

from .colors import PALETTE, TypeColorPalette, hash_hue
from .engine import ForceLayoutEngine, compute_dimensions, position_nodes
from .models import (
    LayoutDimensions,
    LayoutResult,
    LayoutSettings,
    Point,
    PositionedNode,
    TypeColor,
)

__all__ = [
    "ForceLayoutEngine",
    "compute_dimensions",
    "position_nodes",
    "TypeColorPalette",
    "PALETTE",
    "hash_hue",
    "LayoutSettings",
    "LayoutDimensions",
    "LayoutResult",
    "Point",
    "PositionedNode",
    "TypeColor",
]
