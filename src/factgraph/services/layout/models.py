"""
Layout models: tuning constants, canvas dimensions and positioned output.
"""

from typing import Dict

from pydantic import Field

from ...shared.models.base import BaseModel, FrozenModel
from ...shared.models.graph import KGNode


class LayoutSettings(FrozenModel):
    """Constants of the force simulation and adaptive sizing."""

    # Sizing
    base_node_width: float = Field(default=120.0, gt=0, description="Node width for small graphs")
    base_node_height: float = Field(default=32.0, gt=0, description="Node height for small graphs")
    min_node_width: float = Field(default=80.0, gt=0, description="Smallest node width")
    min_node_height: float = Field(default=24.0, gt=0, description="Smallest node height")
    min_node_scale: float = Field(default=0.7, gt=0, le=1, description="Smallest node scale factor")
    scale_threshold: int = Field(default=50, ge=0, description="Node count above which nodes shrink")
    scale_span: float = Field(default=200.0, gt=0, description="Node count over which nodes shrink fully")
    base_canvas_size: float = Field(default=800.0, gt=0, description="Smallest canvas side")
    canvas_reference_nodes: float = Field(default=10.0, gt=0, description="Node count of the base canvas")

    # Seeding
    anchor_radius: float = Field(default=120.0, ge=0, description="Largest radius of the type anchor circle")
    anchor_radius_ratio: float = Field(default=0.2, ge=0, description="Anchor radius as a share of the canvas")
    seed_jitter: float = Field(default=80.0, ge=0, description="Width of the random jitter around anchors")

    # Forces
    repulsion_strength: float = Field(default=4.0, ge=0, description="Repulsion numerator in node widths")
    repulsion_min_distance: float = Field(default=0.8, gt=0, description="Repulsion distance floor in node widths")
    spring_rest_length: float = Field(default=2.5, gt=0, description="Preferred edge length in node widths")
    spring_stiffness: float = Field(default=0.01, ge=0, description="Spring constant")
    center_strength: float = Field(default=0.008, ge=0, description="Center pull constant")
    center_reach: float = Field(default=0.35, gt=0, description="Distance, as a share of the canvas, of full center pull")
    damping: float = Field(default=0.85, gt=0, lt=1, description="Velocity damping per step")
    min_alpha: float = Field(default=0.05, gt=0, le=1, description="Temperature floor")

    # Boundary
    boundary_padding: float = Field(default=2.0, ge=0, description="Gap between canvas edge and boundary, in node widths")
    soft_boundary_width: float = Field(default=1.5, gt=0, description="Width of the soft boundary band, in node widths")
    soft_boundary_min_push: float = Field(default=0.4, ge=0, description="Inward push at the start of the band")
    soft_boundary_max_push: float = Field(default=1.0, ge=0, description="Inward push at the boundary")


class LayoutDimensions(FrozenModel):
    """Canvas and node footprint for one node count."""

    node_count: int = Field(..., ge=0)
    node_width: float = Field(..., gt=0)
    node_height: float = Field(..., gt=0)
    canvas_size: float = Field(..., gt=0)

    center: float = Field(..., description="Center coordinate on both axes")
    boundary_radius: float = Field(..., description="Radius no node may leave")
    soft_boundary_start: float = Field(..., description="Radius where the inward push begins")
    rest_length: float = Field(..., description="Preferred edge length")


class Point(FrozenModel):
    """A position on the canvas."""

    x: float
    y: float


class LayoutResult(BaseModel):
    """Positions produced by one simulation run."""

    positions: Dict[str, Point] = Field(default_factory=dict, description="Node id to position")
    dimensions: LayoutDimensions = Field(..., description="Canvas the positions live on")
    iterations: int = Field(default=0, ge=0, description="Iterations simulated")


class TypeColor(FrozenModel):
    """Fill, stroke and glow colors of one entity type."""

    fill: str
    stroke: str
    glow: str


class PositionedNode(KGNode):
    """A node with its canvas position, footprint and type colors."""

    x: float = Field(..., description="Horizontal center")
    y: float = Field(..., description="Vertical center")
    width: float = Field(..., gt=0, description="Node width")
    height: float = Field(..., gt=0, description="Node height")
    fill: str = Field(..., description="Fill color")
    stroke: str = Field(..., description="Stroke color")
