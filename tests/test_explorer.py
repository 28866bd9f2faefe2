"""Tests for the graph explorer and the full-graph adapter."""

import math

import pytest
from pydantic import ValidationError as PydanticValidationError

from factgraph.services.graph_explorer import FilterState, GraphExplorer, build_full_graph
from factgraph.services.layout import ForceLayoutEngine
from factgraph.shared import CanonicalGraph, KGEdge, KGNode, ValidationError


class CountingEngine(ForceLayoutEngine):

    def __init__(self):
        super().__init__()
        self.calls = 0

    def layout(self, nodes, edges, iterations=None, rng=None):
        self.calls += 1
        return super().layout(nodes, edges, iterations=iterations, rng=rng)


def labels(nodes):
    return [node.label for node in nodes]


class TestFilterState:

    def test_hashable_and_equal(self):
        first = FilterState(selected_types=frozenset({"risk"}), search_term="fr")
        second = FilterState(selected_types={"risk"}, search_term="fr")

        assert first == second
        assert hash(first) == hash(second)

    def test_degree_range(self):
        with pytest.raises(PydanticValidationError):
            FilterState(min_degree=3, max_degree=1)


class TestExplore:

    def test_default_view_hides_isolates(self, sample_graph):
        view = GraphExplorer(sample_graph).explore()

        assert labels(view.visible_nodes) == ["risk mgmt", "fraud", "theft"]
        assert [e.id for e in view.visible_edges] == ["e_0", "e_1", "e_2"]
        assert view.isolate_count == 1
        assert view.max_degree == 2
        assert view.relation_types == ["MITIGATES", "RELATES", "USES"]

    def test_show_isolates(self, sample_graph):
        view = GraphExplorer(sample_graph).explore(FilterState(show_isolates=True))
        assert "ledger" in labels(view.visible_nodes)

    def test_degree_is_independent_of_filter(self, sample_graph):
        explorer = GraphExplorer(sample_graph)
        full = explorer.explore(FilterState(show_isolates=True))
        searched = explorer.explore(FilterState(search_term="FR"))

        assert labels(searched.visible_nodes) == ["fraud"]
        assert searched.degree_per_node == full.degree_per_node
        assert searched.degree_per_node["risk:fraud"] == 2

    def test_edge_needs_both_endpoints(self, sample_graph):
        view = GraphExplorer(sample_graph).explore(FilterState(selected_types={"risk"}))

        assert labels(view.visible_nodes) == ["fraud", "theft"]
        assert [e.id for e in view.visible_edges] == ["e_2"]

    def test_relation_filter(self, sample_graph):
        view = GraphExplorer(sample_graph).explore(FilterState(selected_relations={"USES"}))

        assert len(view.visible_nodes) == 3
        assert [e.relation_label for e in view.visible_edges] == ["USES"]

    def test_degree_bounds(self, sample_graph):
        explorer = GraphExplorer(sample_graph)

        assert explorer.explore(FilterState(min_degree=3)).visible_nodes == []
        isolates_only = explorer.explore(FilterState(max_degree=0, show_isolates=True))
        assert labels(isolates_only.visible_nodes) == ["ledger"]

    def test_views_are_memoized(self, sample_graph):
        explorer = GraphExplorer(sample_graph)

        first = explorer.explore(FilterState(search_term="t"))
        second = explorer.explore(FilterState(search_term="t"))
        assert first is second

    def test_self_loop_counts_twice(self):
        node = KGNode(type="a", label="x")
        graph = CanonicalGraph(
            nodes=[node],
            edges=[KGEdge(id="e_0", source_id=node.id, target_id=node.id, relation_label="SELF")],
        )
        explorer = GraphExplorer(graph)

        assert explorer.degree(node.id) == 2
        assert explorer.isolate_count == 0


class TestCitationBadges:

    def test_union_sorted(self, sample_graph):
        badge = GraphExplorer(sample_graph).citation_badges("service:risk mgmt")

        assert badge.shown == [1, 2, 3]
        assert badge.overflow == 0
        assert badge.urls == {1: "https://a.com", 2: "https://b.com"}

    def test_overflow(self, sample_graph):
        badge = GraphExplorer(sample_graph).citation_badges("risk:theft")

        assert badge.shown == [2, 3, 4]
        assert badge.overflow == 1
        assert badge.total == 4

    def test_node_without_citations(self, sample_graph):
        badge = GraphExplorer(sample_graph).citation_badges("tool:ledger")
        assert badge.shown == [] and badge.overflow == 0


class TestPositionedView:

    def test_layout_of_visible_nodes(self, sample_graph):
        explorer = GraphExplorer(sample_graph)
        positioned = explorer.positioned_view(FilterState(), seed=4, iterations=30)

        assert [n.id for n in positioned.nodes] == [n.id for n in positioned.view.visible_nodes]
        assert set(positioned.badges) == {n.id for n in positioned.nodes}
        radius = positioned.dimensions.boundary_radius
        center = positioned.dimensions.center
        for node in positioned.nodes:
            assert math.hypot(node.x - center, node.y - center) <= radius + 1e-6

    def test_layout_is_reused_for_same_visible_set(self, sample_graph):
        engine = CountingEngine()
        explorer = GraphExplorer(sample_graph, layout_engine=engine)

        first = explorer.positioned_view(FilterState(), seed=1, iterations=10)
        # Different state, same visible nodes and edges
        second = explorer.positioned_view(FilterState(selected_types={"risk", "service"}), seed=1, iterations=10)

        assert engine.calls == 1
        assert [(n.x, n.y) for n in first.nodes] == [(n.x, n.y) for n in second.nodes]


class TestSummaries:

    def test_statistics(self, sample_graph):
        stats = GraphExplorer(sample_graph).statistics()

        assert stats.node_count == 4
        assert stats.edge_count == 3
        assert stats.type_count == 3
        assert stats.relation_count == 3
        assert stats.isolate_count == 1
        assert stats.max_degree == 2
        assert stats.average_degree == pytest.approx(1.5)
        assert stats.density == pytest.approx(0.5)
        assert [n.label for n in stats.top_connected] == ["risk mgmt", "fraud", "theft", "ledger"]

    def test_statistics_of_empty_graph(self):
        stats = GraphExplorer(CanonicalGraph()).statistics()

        assert stats.average_degree == 0.0
        assert stats.density == 0.0

    def test_legend(self, sample_graph):
        explorer = GraphExplorer(sample_graph)
        legend = {entry.type: entry for entry in explorer.legend(explorer.explore())}

        assert (legend["risk"].total, legend["risk"].displayed, legend["risk"].hidden) == (2, 2, 0)
        assert (legend["tool"].total, legend["tool"].displayed, legend["tool"].hidden) == (1, 0, 1)
        assert legend["risk"].color == explorer.palette.color_for("risk")

    def test_ontology(self, sample_graph):
        ontology = GraphExplorer(sample_graph).ontology()
        types = {entry.type: entry for entry in ontology.types}
        relations = {entry.relation: entry for entry in ontology.relations}

        assert types["risk"].relations == ["MITIGATES", "RELATES", "USES"]
        assert types["risk"].examples == ["fraud", "theft"]
        assert types["tool"].relations == []
        assert relations["USES"].source_types == ["service"]
        assert relations["USES"].target_types == ["risk"]
        assert relations["RELATES"].count == 1

    def test_ontology_example_overflow(self):
        nodes = [KGNode(type="risk", label=f"r{i}") for i in range(5)]
        ontology = GraphExplorer(CanonicalGraph(nodes=nodes)).ontology()

        assert ontology.types[0].examples == ["r0", "r1", "r2"]
        assert ontology.types[0].more == 2

    def test_taxonomy(self, sample_graph):
        groups = {group.type: group for group in GraphExplorer(sample_graph).taxonomy(limit=1)}

        assert [n.label for n in groups["risk"].nodes] == ["fraud"]
        assert groups["risk"].more == 1
        assert groups["service"].nodes[0].degree == 2


class TestFullGraph:

    def test_records_to_canonical_graph(self):
        graph = build_full_graph(
            "acme",
            [
                {"labels": ["Service"], "name": "Risk", "url": "https://a", "page_id": 4, "description": "d"},
                {"labels": [], "name": "Fraud", "url": "https://b"},
                {"labels": ["Service"], "name": "  "},
            ],
            [{"id": 10, "source": "Service:Risk", "target": "Thing:Fraud", "label": None}],
            {"https://a": 1, "https://b": 2},
        )

        assert [n.id for n in graph.nodes] == ["Service:Risk", "Thing:Fraud"]
        risk = graph.nodes[0]
        assert risk.page == "4"
        assert risk.attributes == {"page": "4", "description": "d", "url": "https://a"}
        edge = graph.edges[0]
        assert edge.id == "10"
        assert edge.relation_label == "relation"
        assert edge.citation_indices == [1, 2]
        assert edge.citation_urls == ["https://a", "https://b"]
        assert graph.types == ["Service", "Thing"]
        assert graph.source_index_to_url == {1: "https://a", 2: "https://b"}
        assert graph.tenant == "acme"

    def test_edge_without_id(self):
        graph = build_full_graph(None, [{"labels": ["A"], "name": "x"}],
                                 [{"source": "A:x", "target": "A:x"}])
        assert graph.edges[0].id == "e_0"
        assert graph.edges[0].citation_indices == []

    def test_blank_labels_fall_back(self):
        graph = build_full_graph("t", [
            {"labels": [""], "name": "x"},
            {"labels": [" ", "Service"], "name": "y"},
        ], [])

        assert [n.id for n in graph.nodes] == ["Thing:x", "Service:y"]

    def test_invalid_record(self):
        with pytest.raises(ValidationError):
            build_full_graph("acme", [], [{"label": "missing endpoints"}])
