"""
Incremental construction of a canonical graph from parsed fact items.
"""

from typing import Dict, List, Optional

from ...shared.models.graph import KGEdge, KGNode, collect_types, make_node_id
from .grammar import EntitySpan


class GraphBuilder:
    """
    Collects entities and relations while a parser walks its input.

    Entities with the same ``type:label`` identity collapse to one node whose
    attributes are the union of every mention, first-seen value winning on a
    conflicting key. Relations are never deduplicated: each occurrence gets
    its own sequential edge id.
    """

    def __init__(self, source_index_to_url: Optional[Dict[int, str]] = None):
        self.source_index_to_url = dict(source_index_to_url or {})
        self._nodes: Dict[str, EntitySpan] = {}
        self._edges: List[KGEdge] = []
        self.skipped = 0

    def add_entity(self, entity: EntitySpan) -> str:
        """Register or merge an entity and return its node id."""
        node_id = make_node_id(entity.type, entity.label)
        existing = self._nodes.get(node_id)

        if existing is None:
            self._nodes[node_id] = EntitySpan(entity.type, entity.label, dict(entity.attributes))
        else:
            for key, value in entity.attributes.items():
                existing.attributes.setdefault(key, value)

        return node_id

    def add_relation(self, source_id: str, target_id: str, relation: str,
                     citation_indices: Optional[List[int]] = None) -> KGEdge:
        """Append one edge, resolving its citation indices where possible."""
        indices = list(citation_indices or [])
        urls = [self.source_index_to_url[i] for i in indices if i in self.source_index_to_url]

        edge = KGEdge(
            id=f"e_{len(self._edges)}",
            source_id=source_id,
            target_id=target_id,
            relation_label=relation,
            citation_urls=urls,
            citation_indices=indices,
        )
        self._edges.append(edge)
        return edge

    def skip(self) -> None:
        """Count an item that could not be parsed."""
        self.skipped += 1

    @property
    def nodes(self) -> List[KGNode]:
        """Nodes in first-mention order."""
        return [
            KGNode(
                id=node_id,
                type=entity.type,
                label=entity.label,
                url=entity.attributes.get('url'),
                page=entity.attributes.get('page'),
                attributes=dict(entity.attributes),
            )
            for node_id, entity in self._nodes.items()
        ]

    @property
    def edges(self) -> List[KGEdge]:
        return list(self._edges)

    @property
    def types(self) -> List[str]:
        return collect_types(self.nodes)

    @property
    def is_empty(self) -> bool:
        return not self._nodes and not self._edges
