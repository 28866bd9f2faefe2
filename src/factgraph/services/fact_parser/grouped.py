"""
Parser for the grouped facts layout.

Some backends send the facts preview grouped around central entities::

    (organization:"usi") [3]
    -[PROVIDES]-> (service:"benefits consulting") [3]
    <-[PARTNERS_WITH]- (organization:"acme") [4]

Continuation lines refer to the most recent standalone entity line.
"""

from typing import Dict, Iterable, Optional

from ...shared import get_logger, get_metrics
from ...shared.models.graph import ParsedGraphResult
from .builder import GraphBuilder
from .grammar import (
    extract_citation_indices,
    parse_entity_span,
    scan_continuation,
    scan_standalone_entity,
    scan_triple,
)


class GroupedFactsParser:
    """
    Parses grouped fact lines into a graph.

    The current central entity is parser state: it is replaced only when a
    new standalone entity line appears, so full triple lines and unparseable
    lines leave it untouched.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

    def parse(self, lines: Iterable[str],
              source_index_to_url: Optional[Dict[int, str]] = None) -> ParsedGraphResult:
        """
        Parse grouped lines.

        Args:
            lines: Facts preview lines
            source_index_to_url: Citation table used to resolve ``[n]``

        Returns:
            A result with an empty ``clean_text``; check ``has_graph`` to see
            whether anything was extracted
        """
        builder = GraphBuilder(source_index_to_url)
        central_id: Optional[str] = None

        for raw_line in lines:
            line = (raw_line or '').strip()
            if not line:
                continue

            citations = extract_citation_indices(line)

            triple = scan_triple(line)
            if triple is not None:
                left = parse_entity_span(triple.left)
                right = parse_entity_span(triple.right)
                if left is None or right is None:
                    builder.skip()
                    continue
                builder.add_relation(builder.add_entity(left), builder.add_entity(right),
                                     triple.relation, citations)
                continue

            if line.startswith('('):
                entity = scan_standalone_entity(line)
                if entity is None:
                    builder.skip()
                    continue
                central_id = builder.add_entity(entity)
                continue

            continuation = scan_continuation(line)
            if continuation is None or central_id is None:
                builder.skip()
                continue

            other = parse_entity_span(continuation.entity)
            if other is None:
                builder.skip()
                continue

            other_id = builder.add_entity(other)
            if continuation.direction == 'out':
                builder.add_relation(central_id, other_id, continuation.relation, citations)
            else:
                builder.add_relation(other_id, central_id, continuation.relation, citations)

        if builder.skipped:
            self.logger.debug(f"Skipped {builder.skipped} unparseable grouped lines")
        self.metrics.record_parse('grouped', len(builder.nodes), len(builder.edges), builder.skipped)

        return ParsedGraphResult(
            clean_text='',
            nodes=builder.nodes,
            edges=builder.edges,
            types=builder.types,
            source_index_to_url=builder.source_index_to_url,
            skipped_items=builder.skipped,
        )


def parse_grouped_facts(lines: Iterable[str],
                        source_index_to_url: Optional[Dict[int, str]] = None) -> ParsedGraphResult:
    """Parse grouped fact lines."""
    return GroupedFactsParser().parse(lines, source_index_to_url)
