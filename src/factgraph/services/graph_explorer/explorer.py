"""
Graph explorer.

Derives filtered views, citation badges and summaries from one canonical
graph. Degree data is computed once when the explorer is built; every
filtered view reports the same degrees whatever the filter.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import networkx as nx

from ...shared import CanonicalGraph, KGNode, MemoryCache, get_logger, get_metrics, get_settings
from ..layout import ForceLayoutEngine, TypeColorPalette, position_nodes
from .models import (
    CitationBadge,
    ConnectedNode,
    ExplorationView,
    FilterState,
    GraphStatistics,
    LegendEntry,
    Ontology,
    OntologyRelation,
    OntologyType,
    PositionedView,
    TaxonomyGroup,
)


class GraphExplorer:
    """
    Filter and summary controller over one immutable canonical graph.

    Views are memoized per ``FilterState`` and layouts per visible subgraph;
    both caches belong to the explorer instance.
    """

    def __init__(self,
                 graph: CanonicalGraph,
                 layout_engine: Optional[ForceLayoutEngine] = None,
                 cache_size: Optional[int] = None):
        settings = get_settings()
        self.graph = graph
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.layout_engine = layout_engine or ForceLayoutEngine()
        self.palette = TypeColorPalette(graph.types)

        cache_size = cache_size or settings.layout_cache_size
        self._views = MemoryCache(max_size=cache_size)
        self._layouts = MemoryCache(max_size=cache_size)

        self._nodes_by_id: Dict[str, KGNode] = {}
        for node in graph.nodes:
            self._nodes_by_id.setdefault(node.id, node)

        self._multigraph = self._build_multigraph()
        self.degree_per_node: Dict[str, int] = {
            node_id: self._multigraph.degree(node_id) for node_id in self._nodes_by_id
        }
        self.isolate_count = sum(1 for degree in self.degree_per_node.values() if degree == 0)
        self.max_degree = max(self.degree_per_node.values(), default=0)
        self.relation_types: List[str] = sorted({edge.relation_label for edge in graph.edges})
        self._citations = self._collect_citations()

    def _build_multigraph(self) -> nx.MultiDiGraph:
        """Every edge is kept; a self-loop adds two to its node's degree."""
        multigraph = nx.MultiDiGraph()
        multigraph.add_nodes_from(self._nodes_by_id)
        for edge in self.graph.edges:
            multigraph.add_edge(edge.source_id, edge.target_id, key=edge.id, relation=edge.relation_label)
        return multigraph

    def _collect_citations(self) -> Dict[str, List[int]]:
        citations = defaultdict(set)
        for edge in self.graph.edges:
            if not edge.citation_indices:
                continue
            citations[edge.source_id].update(edge.citation_indices)
            citations[edge.target_id].update(edge.citation_indices)
        return {node_id: sorted(indices) for node_id, indices in citations.items()}

    def degree(self, node_id: str) -> int:
        return self.degree_per_node.get(node_id, 0)

    def explore(self, state: Optional[FilterState] = None) -> ExplorationView:
        """
        Visible subgraph for a filter state.

        Identical states return the identical view object while it stays in
        the cache.

        Args:
            state: Filter predicates, no filtering when omitted

        Returns:
            Visible nodes and edges with full-graph degree data
        """
        state = state or FilterState()
        return self._views.get_or_compute(state, lambda: self._compute_view(state))

    def _compute_view(self, state: FilterState) -> ExplorationView:
        visible_nodes = [node for node in self._nodes_by_id.values() if self._node_visible(node, state)]
        visible_ids = {node.id for node in visible_nodes}
        visible_edges = [
            edge for edge in self.graph.edges
            if edge.source_id in visible_ids and edge.target_id in visible_ids
            and (not state.selected_relations or edge.relation_label in state.selected_relations)
        ]

        self.metrics.counter('graph_views_computed_total')
        self.logger.debug(
            f"Filtered view: {len(visible_nodes)}/{len(self._nodes_by_id)} nodes, "
            f"{len(visible_edges)}/{len(self.graph.edges)} edges"
        )
        return ExplorationView(
            visible_nodes=visible_nodes,
            visible_edges=visible_edges,
            degree_per_node=dict(self.degree_per_node),
            isolate_count=self.isolate_count,
            max_degree=self.max_degree,
            relation_types=list(self.relation_types),
        )

    def _node_visible(self, node: KGNode, state: FilterState) -> bool:
        if state.selected_types and node.type not in state.selected_types:
            return False
        if state.search_term and state.search_term.lower() not in node.label.lower():
            return False

        degree = self.degree(node.id)
        if degree < state.min_degree:
            return False
        if state.max_degree is not None and degree > state.max_degree:
            return False
        if degree == 0 and not state.show_isolates:
            return False
        return True

    def citation_badges(self, node_id: str, max_display: Optional[int] = None) -> CitationBadge:
        """
        Citation indices of every edge touching a node.

        Args:
            node_id: Node to aggregate for
            max_display: Indices to show before counting the rest as overflow

        Returns:
            Ascending unique indices, capped, with URLs where the source table has them
        """
        if max_display is None:
            max_display = get_settings().badge_display_limit
        indices = self._citations.get(node_id, [])
        shown = indices[:max_display]
        urls = {
            index: self.graph.source_index_to_url[index]
            for index in shown if index in self.graph.source_index_to_url
        }
        return CitationBadge(node_id=node_id, shown=shown, overflow=len(indices) - len(shown), urls=urls)

    def positioned_view(self, state: Optional[FilterState] = None,
                        seed: Optional[int] = None,
                        iterations: Optional[int] = None) -> PositionedView:
        """
        Lay out the visible subgraph of a filter state.

        Layouts are reused for any state that yields the same visible node
        and edge sets with the same seed.
        """
        view = self.explore(state)
        key: Tuple = (
            tuple(node.id for node in view.visible_nodes),
            tuple(edge.id for edge in view.visible_edges),
            seed,
            iterations,
        )
        result = self._layouts.get_or_compute(
            key,
            lambda: self.layout_engine.layout(view.visible_nodes, view.visible_edges,
                                              iterations=iterations, rng=seed),
        )

        return PositionedView(
            view=view,
            nodes=position_nodes(view.visible_nodes, result, self.palette),
            edges=view.visible_edges,
            dimensions=result.dimensions,
            badges={node.id: self.citation_badges(node.id) for node in view.visible_nodes},
        )

    def statistics(self, top: Optional[int] = None) -> GraphStatistics:
        """Connectivity summary of the whole graph."""
        if top is None:
            top = get_settings().top_connected_limit

        node_count = len(self._nodes_by_id)
        edge_count = len(self.graph.edges)
        average_degree = 2 * edge_count / node_count if node_count else 0.0
        density = 2 * edge_count / (node_count * (node_count - 1)) if node_count > 1 else 0.0

        return GraphStatistics(
            node_count=node_count,
            edge_count=edge_count,
            type_count=len({node.type for node in self._nodes_by_id.values()}),
            relation_count=len(self.relation_types),
            isolate_count=self.isolate_count,
            max_degree=self.max_degree,
            average_degree=average_degree,
            density=density,
            top_connected=self._ranked(list(self._nodes_by_id.values()))[:top],
        )

    def legend(self, view: Optional[ExplorationView] = None) -> List[LegendEntry]:
        """Per-type total, displayed and hidden node counts of a view."""
        view = view or self.explore()
        totals: Dict[str, int] = defaultdict(int)
        displayed: Dict[str, int] = defaultdict(int)
        for node in self._nodes_by_id.values():
            totals[node.type] += 1
        for node in view.visible_nodes:
            displayed[node.type] += 1

        return [
            LegendEntry(
                type=type_name,
                color=self.palette.color_for(type_name),
                total=totals[type_name],
                displayed=displayed[type_name],
                hidden=totals[type_name] - displayed[type_name],
            )
            for type_name in self._type_order()
        ]

    def ontology(self, examples: int = 3) -> Ontology:
        """Relations and examples per entity type, endpoints per relation."""
        by_type = self._nodes_by_type()
        relations_by_type: Dict[str, set] = defaultdict(set)
        edge_counts: Dict[str, int] = defaultdict(int)
        source_types: Dict[str, set] = defaultdict(set)
        target_types: Dict[str, set] = defaultdict(set)

        for edge in self.graph.edges:
            source = self._nodes_by_id.get(edge.source_id)
            target = self._nodes_by_id.get(edge.target_id)
            edge_counts[edge.relation_label] += 1
            if source is not None:
                relations_by_type[source.type].add(edge.relation_label)
                source_types[edge.relation_label].add(source.type)
            if target is not None:
                relations_by_type[target.type].add(edge.relation_label)
                target_types[edge.relation_label].add(target.type)

        types = []
        for type_name in self._type_order():
            nodes = by_type.get(type_name, [])
            types.append(OntologyType(
                type=type_name,
                entity_count=len(nodes),
                relations=sorted(relations_by_type[type_name]),
                examples=[node.label for node in nodes[:examples]],
                more=max(0, len(nodes) - examples),
            ))

        relations = [
            OntologyRelation(
                relation=relation,
                count=edge_counts[relation],
                source_types=sorted(source_types[relation]),
                target_types=sorted(target_types[relation]),
            )
            for relation in self.relation_types
        ]
        return Ontology(types=types, relations=relations)

    def taxonomy(self, limit: int = 12) -> List[TaxonomyGroup]:
        """Nodes grouped by type, most connected first, capped per type."""
        by_type = self._nodes_by_type()
        groups = []
        for type_name in self._type_order():
            ranked = self._ranked(by_type.get(type_name, []))
            groups.append(TaxonomyGroup(
                type=type_name,
                entity_count=len(ranked),
                nodes=ranked[:limit],
                more=max(0, len(ranked) - limit),
            ))
        return groups

    def _type_order(self) -> List[str]:
        return self.graph.types or sorted({node.type for node in self._nodes_by_id.values()})

    def _nodes_by_type(self) -> Dict[str, List[KGNode]]:
        by_type: Dict[str, List[KGNode]] = defaultdict(list)
        for node in self._nodes_by_id.values():
            by_type[node.type].append(node)
        return by_type

    def _ranked(self, nodes: List[KGNode]) -> List[ConnectedNode]:
        # Stable: ties keep graph order
        ordered = sorted(nodes, key=lambda node: -self.degree(node.id))
        return [
            ConnectedNode(id=node.id, label=node.label, type=node.type,
                          degree=self.degree(node.id), url=node.url)
            for node in ordered
        ]
