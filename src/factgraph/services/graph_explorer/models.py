"""
Explorer models: filter state, visible views and derived summaries.
"""

from typing import Dict, FrozenSet, List, Optional, Union

from pydantic import Field, model_validator

from ...shared.models.base import FrozenModel
from ...shared.models.graph import KGEdge, KGNode
from ..layout.models import LayoutDimensions, PositionedNode, TypeColor
from ..response_normalizer.models import PayloadModel


class FilterState(FrozenModel):
    """
    View-side predicates over a canonical graph.

    Instances are immutable and hashable, so they key memoized views.
    An empty type or relation selection means no filtering on that axis.
    """

    selected_types: FrozenSet[str] = Field(default_factory=frozenset, description="Entity types to show")
    selected_relations: FrozenSet[str] = Field(default_factory=frozenset, description="Relations to show")
    search_term: str = Field(default="", description="Case-insensitive label substring")
    min_degree: int = Field(default=0, ge=0, description="Smallest degree shown")
    max_degree: Optional[int] = Field(default=None, ge=0, description="Largest degree shown, unbounded if None")
    show_isolates: bool = Field(default=False, description="Whether degree-0 nodes are shown")

    @model_validator(mode='after')
    def validate_degree_range(self):
        if self.max_degree is not None and self.max_degree < self.min_degree:
            raise ValueError(f"max_degree {self.max_degree} is below min_degree {self.min_degree}")
        return self


class ExplorationView(FrozenModel):
    """The visible subgraph for one filter state, plus full-graph degree data."""

    visible_nodes: List[KGNode] = Field(default_factory=list)
    visible_edges: List[KGEdge] = Field(default_factory=list)
    degree_per_node: Dict[str, int] = Field(default_factory=dict, description="Degree over the full edge set")
    isolate_count: int = Field(default=0, ge=0)
    max_degree: int = Field(default=0, ge=0)
    relation_types: List[str] = Field(default_factory=list, description="Sorted unique relation labels")


class CitationBadge(FrozenModel):
    """Citation indices to show on a node, capped with an overflow count."""

    node_id: str
    shown: List[int] = Field(default_factory=list, description="Indices to display, ascending")
    overflow: int = Field(default=0, ge=0, description="Indices not displayed")
    urls: Dict[int, str] = Field(default_factory=dict, description="Resolvable URLs of the shown indices")

    @property
    def total(self) -> int:
        return len(self.shown) + self.overflow


class PositionedView(FrozenModel):
    """A filtered view laid out on a canvas."""

    view: ExplorationView
    nodes: List[PositionedNode] = Field(default_factory=list)
    edges: List[KGEdge] = Field(default_factory=list)
    dimensions: LayoutDimensions
    badges: Dict[str, CitationBadge] = Field(default_factory=dict)


class ConnectedNode(FrozenModel):
    """A node with its degree, as listed in rankings."""

    id: str
    label: str
    type: str
    degree: int = Field(..., ge=0)
    url: Optional[str] = None


class GraphStatistics(FrozenModel):
    """Connectivity summary of a whole graph."""

    node_count: int = Field(..., ge=0)
    edge_count: int = Field(..., ge=0)
    type_count: int = Field(..., ge=0)
    relation_count: int = Field(..., ge=0)
    isolate_count: int = Field(..., ge=0)
    max_degree: int = Field(..., ge=0)
    average_degree: float = Field(..., ge=0, description="2E/N")
    density: float = Field(..., ge=0, description="2E/(N(N-1))")
    top_connected: List[ConnectedNode] = Field(default_factory=list)


class LegendEntry(FrozenModel):
    """Per-type node counts of a view."""

    type: str
    color: TypeColor
    total: int = Field(..., ge=0)
    displayed: int = Field(..., ge=0)
    hidden: int = Field(..., ge=0)


class OntologyType(FrozenModel):
    """Relations and example labels of one entity type."""

    type: str
    entity_count: int = Field(..., ge=0)
    relations: List[str] = Field(default_factory=list)
    examples: List[str] = Field(default_factory=list)
    more: int = Field(default=0, ge=0, description="Entities beyond the examples")


class OntologyRelation(FrozenModel):
    """Usage of one relation label."""

    relation: str
    count: int = Field(..., ge=0)
    source_types: List[str] = Field(default_factory=list)
    target_types: List[str] = Field(default_factory=list)


class Ontology(FrozenModel):
    types: List[OntologyType] = Field(default_factory=list)
    relations: List[OntologyRelation] = Field(default_factory=list)


class TaxonomyGroup(FrozenModel):
    """Nodes of one type, most connected first."""

    type: str
    entity_count: int = Field(..., ge=0)
    nodes: List[ConnectedNode] = Field(default_factory=list)
    more: int = Field(default=0, ge=0)


class RawGraphNode(PayloadModel):
    """A node record as returned by the full-graph retrieval path."""

    labels: List[str] = Field(default_factory=list, description="Store labels, the first is the type")
    name: str = Field(default="", description="Entity name")
    url: Optional[str] = None
    page_id: Optional[Union[int, str]] = None
    description: Optional[str] = None
    summary: Optional[str] = None


class RawGraphEdge(PayloadModel):
    """An edge record as returned by the full-graph retrieval path."""

    id: Optional[Union[int, str]] = None
    source: str = Field(..., description="Source node id, type:name")
    target: str = Field(..., description="Target node id, type:name")
    label: Optional[str] = None
