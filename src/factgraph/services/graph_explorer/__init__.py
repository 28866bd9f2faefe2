"""
Filter/Query Controller for FactGraph.

Derives visible subgraphs, citation badges, statistics, legends, ontology
and taxonomy summaries from a canonical graph.
"""

from .explorer import GraphExplorer
from .full_graph import build_full_graph
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
    RawGraphEdge,
    RawGraphNode,
    TaxonomyGroup,
)

__all__ = [
    "GraphExplorer",
    "build_full_graph",
    "FilterState",
    "ExplorationView",
    "CitationBadge",
    "PositionedView",
    "ConnectedNode",
    "GraphStatistics",
    "LegendEntry",
    "Ontology",
    "OntologyType",
    "OntologyRelation",
    "TaxonomyGroup",
    "RawGraphNode",
    "RawGraphEdge",
]
