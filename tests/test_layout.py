"""Tests for the force-directed layout engine and type colors."""

import math

import numpy as np
import pytest

from factgraph.services.layout import (
    PALETTE,
    ForceLayoutEngine,
    LayoutSettings,
    TypeColorPalette,
    compute_dimensions,
    hash_hue,
    position_nodes,
)
from factgraph.services.layout.colors import hashed_color
from factgraph.shared import KGEdge, KGNode, LayoutError


def chain_graph(count, types=("service", "risk", "team")):
    nodes = [KGNode(type=types[i % len(types)], label=f"n{i}") for i in range(count)]
    edges = [
        KGEdge(id=f"e_{i}", source_id=nodes[i].id, target_id=nodes[i + 1].id, relation_label="NEXT")
        for i in range(count - 1)
    ]
    return nodes, edges


def distance_from_center(point, dims):
    return math.hypot(point.x - dims.center, point.y - dims.center)


class TestDimensions:

    def test_small_graph(self):
        dims = compute_dimensions(10)

        assert dims.node_width == 120
        assert dims.node_height == 32
        assert dims.canvas_size == 800
        assert dims.center == 400
        assert dims.boundary_radius == 160
        assert dims.rest_length == 300

    def test_nodes_shrink_and_canvas_grows(self):
        dims = compute_dimensions(100)

        assert dims.node_width == pytest.approx(90)
        assert dims.node_height == 24
        assert dims.canvas_size == pytest.approx(800 * math.sqrt(10))

    def test_node_size_floor(self):
        dims = compute_dimensions(250)

        assert dims.node_width == pytest.approx(84)
        assert dims.node_height == 24
        assert dims.canvas_size == pytest.approx(4000)

    def test_empty_graph(self):
        assert compute_dimensions(0).canvas_size == 800

    def test_negative_count(self):
        with pytest.raises(LayoutError):
            compute_dimensions(-1)


class TestForceLayoutEngine:

    @pytest.mark.parametrize("count", [1, 2, 7, 60])
    def test_positions_stay_inside_boundary(self, count):
        nodes, edges = chain_graph(count)
        result = ForceLayoutEngine().layout(nodes, edges, iterations=150, rng=3)

        assert set(result.positions) == {node.id for node in nodes}
        for point in result.positions.values():
            assert distance_from_center(point, result.dimensions) <= result.dimensions.boundary_radius + 1e-6

    def test_zero_iterations_inside_boundary(self):
        nodes, edges = chain_graph(5)
        result = ForceLayoutEngine().layout(nodes, edges, iterations=0, rng=11)

        assert result.iterations == 0
        for point in result.positions.values():
            assert distance_from_center(point, result.dimensions) <= result.dimensions.boundary_radius + 1e-6

    def test_same_seed_same_positions(self):
        nodes, edges = chain_graph(12)
        engine = ForceLayoutEngine()

        first = engine.layout(nodes, edges, iterations=80, rng=42)
        second = engine.layout(nodes, edges, iterations=80, rng=np.random.default_rng(42))

        assert first.positions == second.positions

    def test_edge_lengths_near_rest_length(self):
        nodes, edges = chain_graph(5)
        engine = ForceLayoutEngine()

        for _ in range(3):
            result = engine.layout(nodes, edges, iterations=150)
            lengths = [
                math.hypot(result.positions[e.source_id].x - result.positions[e.target_id].x,
                           result.positions[e.source_id].y - result.positions[e.target_id].y)
                for e in edges
            ]
            ratio = np.mean(lengths) / result.dimensions.rest_length
            assert 0.3 <= ratio <= 1.5

    def test_edges_to_unknown_nodes_are_ignored(self):
        nodes, edges = chain_graph(3)
        edges.append(KGEdge(id="e_x", source_id=nodes[0].id, target_id="ghost:node", relation_label="R"))

        result = ForceLayoutEngine().layout(nodes, edges, iterations=10, rng=1)
        assert "ghost:node" not in result.positions

    def test_empty_graph(self):
        result = ForceLayoutEngine().layout([], [], iterations=10)
        assert result.positions == {}

    def test_negative_iterations(self):
        nodes, edges = chain_graph(3)
        with pytest.raises(LayoutError):
            ForceLayoutEngine().layout(nodes, edges, iterations=-1)

    def test_default_iterations_from_settings(self, monkeypatch):
        monkeypatch.setenv("FACTGRAPH_LAYOUT_ITERATIONS", "7")
        nodes, edges = chain_graph(3)

        assert ForceLayoutEngine().layout(nodes, edges, rng=0).iterations == 7

    def test_custom_settings(self):
        config = LayoutSettings(base_canvas_size=1000)
        dims = compute_dimensions(4, config)
        assert dims.canvas_size == 1000


class TestColors:

    def test_hash_hue_matches_string_hash(self):
        assert hash_hue("a") == 97
        assert hash_hue("hello") == 99162322 % 360
        # The 32-bit hash of this string is the most negative int
        assert hash_hue("polygenelubricants") == 2147483648 % 360

    def test_palette_then_hash(self):
        types = [f"t{i}" for i in range(9)]
        palette = TypeColorPalette(types)

        assert [palette.color_for(t) for t in types[:8]] == PALETTE
        assert palette.color_for("t8") == hashed_color("t8")
        assert palette.color_for("t8").fill == f"hsl({hash_hue('t8')} 85% 95%)"

    def test_unknown_types_are_appended(self):
        palette = TypeColorPalette(["risk"])

        assert palette.color_for("service") == PALETTE[1]
        assert palette.type_order == ["risk", "service"]
        assert list(palette.legend()) == ["risk", "service"]

    def test_palettes_do_not_share_state(self):
        first = TypeColorPalette(["a", "b"])
        second = TypeColorPalette(["b", "a"])

        assert first.color_for("a") != second.color_for("a")


class TestPositionNodes:

    def test_positions_sizes_and_colors(self):
        nodes, edges = chain_graph(3)
        result = ForceLayoutEngine().layout(nodes, edges, iterations=20, rng=5)
        palette = TypeColorPalette(["risk", "service", "team"])

        positioned = position_nodes(nodes, result, palette)

        assert [p.id for p in positioned] == [n.id for n in nodes]
        service = positioned[0]
        assert service.fill == PALETTE[1].fill
        assert service.stroke == PALETTE[1].stroke
        assert service.width == result.dimensions.node_width
        assert (service.x, service.y) == (result.positions[service.id].x, result.positions[service.id].y)

    def test_missing_position_falls_back_to_center(self):
        nodes, _ = chain_graph(2)
        result = ForceLayoutEngine().layout(nodes[:1], [], iterations=5, rng=0)

        positioned = position_nodes(nodes, result)
        assert (positioned[1].x, positioned[1].y) == (result.dimensions.center, result.dimensions.center)
