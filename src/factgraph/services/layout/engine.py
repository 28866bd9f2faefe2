"""
Force-directed layout engine.

Positions the nodes of a graph on a square canvas with a damped force
simulation: pairwise repulsion, springs along edges, a gentle pull toward the
center and a circular boundary that no node leaves. Nodes start clustered
around one anchor per entity type, so nodes of the same type stay close.
"""

import math
from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from ...shared import LayoutError, get_logger, get_settings, timed_operation
from ...shared.models.graph import KGEdge, KGNode
from .colors import TypeColorPalette
from .models import LayoutDimensions, LayoutResult, LayoutSettings, Point, PositionedNode

Seed = Union[int, np.random.Generator, None]


def compute_dimensions(node_count: int, config: Optional[LayoutSettings] = None) -> LayoutDimensions:
    """
    Node footprint and canvas size for a node count.

    Nodes shrink once the graph grows past ``scale_threshold`` nodes, never
    below the minimum size. The canvas grows with the square root of the node
    count, never below the base size.

    Args:
        node_count: Number of nodes to place
        config: Layout constants

    Returns:
        Dimensions of the canvas and of each node
    """
    if node_count < 0:
        raise LayoutError(f"Node count must be non-negative, got {node_count}")
    config = config or LayoutSettings()

    scale = 1.0
    if node_count > config.scale_threshold:
        scale = max(config.min_node_scale,
                    1 - (node_count - config.scale_threshold) / config.scale_span)

    node_width = max(config.min_node_width, config.base_node_width * scale)
    node_height = max(config.min_node_height, config.base_node_height * scale)
    canvas_size = max(config.base_canvas_size,
                      config.base_canvas_size * math.sqrt(node_count / config.canvas_reference_nodes))

    center = canvas_size / 2
    boundary_radius = center - config.boundary_padding * node_width
    soft_boundary_start = boundary_radius - config.soft_boundary_width * node_width

    return LayoutDimensions(
        node_count=node_count,
        node_width=node_width,
        node_height=node_height,
        canvas_size=canvas_size,
        center=center,
        boundary_radius=boundary_radius,
        soft_boundary_start=soft_boundary_start,
        rest_length=config.spring_rest_length * node_width,
    )


class ForceLayoutEngine:
    """
    Damped force simulation over node positions.

    Forces are evaluated on whole position arrays; a run costs O(n^2) per
    iteration in the number of nodes. The temperature ``alpha`` falls
    linearly from 1 to ``min_alpha`` and scales every force. Velocity does
    not carry over between iterations.
    """

    def __init__(self, config: Optional[LayoutSettings] = None):
        self.config = config or LayoutSettings()
        self.logger = get_logger(__name__)

    @timed_operation("layout_duration")
    def layout(self,
               nodes: Sequence[KGNode],
               edges: Iterable[KGEdge],
               iterations: Optional[int] = None,
               rng: Seed = None) -> LayoutResult:
        """
        Compute positions for ``nodes``.

        Edges whose endpoints are not both among ``nodes`` are ignored.

        Args:
            nodes: Nodes to place; duplicate ids are placed once
            edges: Edges acting as springs
            iterations: Simulation steps, defaults to the configured count
            rng: Seed or ``numpy.random.Generator`` for the initial jitter

        Returns:
            A position per node id, all within the boundary circle

        Raises:
            LayoutError: If ``iterations`` is negative
        """
        if iterations is None:
            iterations = get_settings().layout_iterations
        if iterations < 0:
            raise LayoutError(f"Iterations must be non-negative, got {iterations}")

        unique: Dict[str, KGNode] = {}
        for node in nodes:
            unique.setdefault(node.id, node)
        ordered = list(unique.values())

        dims = compute_dimensions(len(ordered), self.config)
        if not ordered:
            return LayoutResult(positions={}, dimensions=dims, iterations=iterations)

        generator = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
        index = {node.id: i for i, node in enumerate(ordered)}
        sources, targets = self._edge_arrays(edges, index)

        positions = self._clamp(self._seed_positions(ordered, dims, generator), dims)
        for step in range(iterations):
            alpha = max(self.config.min_alpha, 1 - step / iterations)
            velocity = self._repulsion(positions, dims, alpha)
            velocity += self._springs(positions, sources, targets, dims, alpha)
            velocity += self._center_pull(positions, dims, alpha)
            velocity += self._boundary_push(positions, dims, alpha)

            positions = self._clamp(positions + velocity * self.config.damping, dims)

        self.logger.debug(
            f"Laid out {len(ordered)} nodes and {len(sources)} edges "
            f"in {iterations} iterations on a {dims.canvas_size:.0f}px canvas"
        )
        return LayoutResult(
            positions={
                node.id: Point(x=float(positions[i, 0]), y=float(positions[i, 1]))
                for i, node in enumerate(ordered)
            },
            dimensions=dims,
            iterations=iterations,
        )

    def _edge_arrays(self, edges: Iterable[KGEdge], index: Dict[str, int]):
        sources: List[int] = []
        targets: List[int] = []
        for edge in edges:
            if edge.source_id in index and edge.target_id in index:
                sources.append(index[edge.source_id])
                targets.append(index[edge.target_id])
        return np.array(sources, dtype=np.intp), np.array(targets, dtype=np.intp)

    def _seed_positions(self, nodes: List[KGNode], dims: LayoutDimensions,
                        generator: np.random.Generator) -> np.ndarray:
        """Place each node near the anchor of its type, with random jitter."""
        type_order: List[str] = []
        for node in nodes:
            if node.type not in type_order:
                type_order.append(node.type)

        anchor_radius = min(dims.canvas_size * self.config.anchor_radius_ratio, self.config.anchor_radius)
        angles = np.array([
            type_order.index(node.type) / len(type_order) * 2 * math.pi for node in nodes
        ])
        anchors = np.column_stack([
            dims.center + np.cos(angles) * anchor_radius,
            dims.center + np.sin(angles) * anchor_radius,
        ])
        jitter = (generator.random((len(nodes), 2)) - 0.5) * self.config.seed_jitter
        return anchors + jitter

    def _repulsion(self, positions: np.ndarray, dims: LayoutDimensions, alpha: float) -> np.ndarray:
        delta = positions[:, None, :] - positions[None, :, :]
        distance = np.maximum(np.linalg.norm(delta, axis=2), 1.0)
        strength = (self.config.repulsion_strength * dims.node_width
                    / np.maximum(distance, self.config.repulsion_min_distance * dims.node_width))
        forces = delta / distance[:, :, None] * (strength * alpha)[:, :, None]
        return forces.sum(axis=1)

    def _springs(self, positions: np.ndarray, sources: np.ndarray, targets: np.ndarray,
                 dims: LayoutDimensions, alpha: float) -> np.ndarray:
        velocity = np.zeros_like(positions)
        if len(sources) == 0:
            return velocity

        delta = positions[targets] - positions[sources]
        distance = np.linalg.norm(delta, axis=1)
        distance[distance == 0] = 1.0
        pull = (distance - dims.rest_length) * self.config.spring_stiffness * alpha
        forces = delta / distance[:, None] * pull[:, None]

        np.add.at(velocity, sources, forces)
        np.add.at(velocity, targets, -forces)
        return velocity

    def _center_pull(self, positions: np.ndarray, dims: LayoutDimensions, alpha: float) -> np.ndarray:
        offset = dims.center - positions
        distance = np.linalg.norm(offset, axis=1)
        reach = dims.canvas_size * self.config.center_reach
        strength = np.minimum(distance / reach, 1.0) * self.config.center_strength * alpha
        return offset * strength[:, None]

    def _boundary_push(self, positions: np.ndarray, dims: LayoutDimensions, alpha: float) -> np.ndarray:
        """Inward push that grows across the band between the soft start and the boundary."""
        relative = positions - dims.center
        radius = np.linalg.norm(relative, axis=1)
        # A node exactly at the center has no inward direction
        outside = (radius > dims.soft_boundary_start) & (radius > 0)

        push = np.zeros_like(positions)
        if not outside.any():
            return push

        band = dims.boundary_radius - dims.soft_boundary_start
        depth = np.minimum(1.0, (radius[outside] - dims.soft_boundary_start) / band)
        low, high = self.config.soft_boundary_min_push, self.config.soft_boundary_max_push
        strength = (low + (high - low) * depth) * alpha
        push[outside] = -relative[outside] / radius[outside, None] * strength[:, None]
        return push

    def _clamp(self, positions: np.ndarray, dims: LayoutDimensions) -> np.ndarray:
        """Project nodes outside the boundary circle back onto it."""
        relative = positions - dims.center
        radius = np.linalg.norm(relative, axis=1)
        outside = radius > dims.boundary_radius
        if outside.any():
            scale = dims.boundary_radius / radius[outside]
            positions = positions.copy()
            positions[outside] = dims.center + relative[outside] * scale[:, None]
        return positions


def position_nodes(nodes: Sequence[KGNode],
                   result: LayoutResult,
                   palette: Optional[TypeColorPalette] = None) -> List[PositionedNode]:
    """
    Attach positions, footprint and type colors to nodes.

    Nodes missing from ``result`` are placed at the canvas center.
    """
    dims = result.dimensions
    if palette is None:
        palette = TypeColorPalette(sorted({node.type for node in nodes}))

    positioned = []
    for node in nodes:
        point = result.positions.get(node.id) or Point(x=dims.center, y=dims.center)
        color = palette.color_for(node.type)
        positioned.append(PositionedNode(
            **node.model_dump(),
            x=point.x,
            y=point.y,
            width=dims.node_width,
            height=dims.node_height,
            fill=color.fill,
            stroke=color.stroke,
        ))
    return positioned
