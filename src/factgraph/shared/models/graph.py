"""
Graph data models for FactGraph.

These models are the canonical graph shape shared by every service:
- fact_parser: builds them from fact text
- response_normalizer: carries them out of backend payloads
- layout: positions them
- graph_explorer: filters and summarizes them
"""

from typing import Dict, List, Optional
from pydantic import Field, field_validator, model_validator

from .base import BaseModel, FrozenModel


def make_node_id(node_type: str, label: str) -> str:
    """Build the identity of an entity from its type and label."""
    return f"{node_type}:{label}"


class KGNode(FrozenModel):
    """
    An entity extracted from fact text.

    Identity is ``type:label``; repeated mentions of the same entity collapse
    to one node.
    """

    id: str = Field(..., description="Stable identifier, type:label")
    type: str = Field(..., description="Entity type, e.g. 'service'")
    label: str = Field(..., description="Human-readable entity name")
    url: Optional[str] = Field(default=None, description="Entity URL, from the url attribute")
    page: Optional[str] = Field(default=None, description="Entity page, from the page attribute")
    attributes: Dict[str, str] = Field(default_factory=dict, description="Secondary key/value attributes")

    @model_validator(mode='before')
    @classmethod
    def derive_id(cls, data):
        """Fill in the id from type and label when it is not given."""
        if isinstance(data, dict) and not data.get('id') and data.get('type') and data.get('label'):
            data = dict(data)
            data['id'] = make_node_id(data['type'], data['label'])
        return data

    @field_validator('type', 'label')
    @classmethod
    def validate_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Entity type and label cannot be empty")
        return v


class KGEdge(FrozenModel):
    """
    A directed, labeled relation between two entities.

    Edges reference node ids only; citation indices point into the
    response's source table.
    """

    id: str = Field(..., description="Synthetic sequential identifier")
    source_id: str = Field(..., description="ID of the source node")
    target_id: str = Field(..., description="ID of the target node")
    relation_label: str = Field(..., description="Relation, e.g. 'ADDRESSES'")
    citation_urls: List[str] = Field(default_factory=list, description="Resolved citation URLs")
    citation_indices: List[int] = Field(default_factory=list, description="Citation indices as written")


def collect_types(nodes: List[KGNode]) -> List[str]:
    """Sorted unique node types."""
    return sorted({node.type for node in nodes})


class ParsedGraphResult(FrozenModel):
    """
    Result of parsing one block of fact text.

    ``clean_text`` is the prose with the facts and sources blocks removed;
    ``preamble`` holds diagnostics found before the answer marker.
    """

    clean_text: str = Field(default="", description="Prose with graph blocks removed")
    nodes: List[KGNode] = Field(default_factory=list, description="Deduplicated entities")
    edges: List[KGEdge] = Field(default_factory=list, description="Relations in textual order")
    types: List[str] = Field(default_factory=list, description="Sorted unique node types")
    source_index_to_url: Dict[int, str] = Field(default_factory=dict, description="Citation table")
    preamble: Optional[str] = Field(default=None, description="Diagnostics preceding the answer")
    skipped_items: int = Field(default=0, ge=0, description="Unparseable items dropped")

    @property
    def has_graph(self) -> bool:
        """Check whether any entity or relation was extracted."""
        return bool(self.nodes or self.edges)


class CanonicalGraph(FrozenModel):
    """
    The immutable node/edge set built once per backend response.

    This is the input of the explorer and the shape accepted from the
    full-graph retrieval path.
    """

    nodes: List[KGNode] = Field(default_factory=list, description="Entities")
    edges: List[KGEdge] = Field(default_factory=list, description="Relations")
    types: List[str] = Field(default_factory=list, description="Sorted unique node types")
    source_index_to_url: Dict[int, str] = Field(default_factory=dict, description="Citation table")
    tenant: Optional[str] = Field(default=None, description="Tenant the graph belongs to")

    @model_validator(mode='before')
    @classmethod
    def fill_types(cls, data):
        """Derive the type list from the nodes when it is not given."""
        if isinstance(data, dict) and not data.get('types') and data.get('nodes'):
            data = dict(data)
            data['types'] = sorted({
                node.type if isinstance(node, KGNode) else node.get('type')
                for node in data['nodes']
            } - {None})
        return data
