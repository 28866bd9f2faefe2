"""
Full-graph adapter.

Converts node and edge records fetched from the graph store for a whole
tenant into the canonical graph, bypassing text parsing.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ...shared import CanonicalGraph, KGEdge, KGNode, ValidationError, get_logger, make_node_id
from .models import RawGraphEdge, RawGraphNode

DEFAULT_TYPE = 'Thing'
DEFAULT_RELATION = 'relation'

logger = get_logger(__name__)


def _node_type(record: RawGraphNode) -> str:
    return next((label for label in record.labels if label and label.strip()), DEFAULT_TYPE)


def _node_attributes(record: RawGraphNode) -> Dict[str, str]:
    attributes = {}
    if record.page_id is not None:
        attributes['page'] = str(record.page_id)
    if record.description:
        attributes['description'] = str(record.description)
    if record.summary:
        attributes['summary'] = str(record.summary)
    if record.url:
        attributes['url'] = str(record.url)
    return attributes


def _validate(model, records: Iterable[Union[Mapping[str, Any], Any]], kind: str) -> List:
    validated = []
    for position, record in enumerate(records):
        if isinstance(record, model):
            validated.append(record)
            continue
        try:
            validated.append(model.model_validate(record))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {kind} record at position {position}: {e}") from e
    return validated


def build_full_graph(tenant: Optional[str],
                     raw_nodes: Iterable[Union[Mapping[str, Any], RawGraphNode]],
                     raw_edges: Iterable[Union[Mapping[str, Any], RawGraphEdge]],
                     url_to_id: Optional[Mapping[str, int]] = None) -> CanonicalGraph:
    """
    Build a canonical graph from full-graph records.

    The node type is the record's first non-blank label, or ``Thing``.
    Edge citation indices come from the URLs of the edge's endpoints, looked
    up in ``url_to_id``.

    Args:
        tenant: Tenant the records belong to
        raw_nodes: Node records with labels, name, url, page_id, description, summary
        raw_edges: Edge records with id, source, target, label
        url_to_id: Source URL to citation index

    Returns:
        The canonical graph; nodes without a name are dropped

    Raises:
        ValidationError: If a record has the wrong shape
    """
    url_to_id = dict(url_to_id or {})
    source_index_to_url = {int(index): url for url, index in url_to_id.items()}

    records: Dict[str, RawGraphNode] = {}
    nodes: List[KGNode] = []
    for record in _validate(RawGraphNode, raw_nodes, 'node'):
        if not record.name.strip():
            logger.debug(f"Dropping unnamed node record with labels {record.labels}")
            continue
        node_type = _node_type(record)
        node_id = make_node_id(node_type, record.name)
        if node_id in records:
            continue
        try:
            node = KGNode(
                id=node_id,
                type=node_type,
                label=record.name,
                url=record.url or None,
                page=str(record.page_id) if record.page_id is not None else None,
                attributes=_node_attributes(record),
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid node record {node_id!r}: {e}") from e
        records[node_id] = record
        nodes.append(node)

    edges: List[KGEdge] = []
    for position, record in enumerate(_validate(RawGraphEdge, raw_edges, 'edge')):
        indices = set()
        for endpoint in (records.get(record.source), records.get(record.target)):
            if endpoint is not None and endpoint.url and url_to_id.get(endpoint.url):
                indices.add(int(url_to_id[endpoint.url]))
        citation_indices = sorted(indices)

        edges.append(KGEdge(
            id=str(record.id) if record.id is not None else f"e_{position}",
            source_id=record.source,
            target_id=record.target,
            relation_label=record.label or DEFAULT_RELATION,
            citation_indices=citation_indices,
            citation_urls=[source_index_to_url[i] for i in citation_indices if i in source_index_to_url],
        ))

    logger.info(f"Built full graph for tenant {tenant!r}: {len(nodes)} nodes, {len(edges)} edges")
    return CanonicalGraph(
        nodes=nodes,
        edges=edges,
        source_index_to_url=source_index_to_url,
        tenant=tenant,
    )
