"""
Parser for "Retrieved Facts" blocks embedded in backend answer text.

Example input::

    Chat Response: Fraud is handled by the risk team.
    Retrieved Facts: • (service:"risk mgmt" url=https://a.com) -[ADDRESSES]-> (risk:"fraud") [1] • ...
    Sources: [1] https://a.com [2] https://b.com

The parser extracts entities and relations, resolves citation indices against
the sources block, and returns the prose with both blocks removed.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from ...shared import get_logger, get_metrics, get_settings
from ...shared.models.graph import ParsedGraphResult
from .builder import GraphBuilder
from .grammar import (
    extract_citation_indices,
    parse_entity_span,
    parse_sources_block,
    scan_triple,
)

# Markers never start in the middle of a word, so "Resources:" is prose
MARKER_BOUNDARY = r'(?<![A-Za-z0-9_])'


@dataclass
class FactBlocks:
    """The regions of an answer that the parser cares about."""

    preamble: Optional[str]
    facts_block: Optional[str]
    sources_block: Optional[str]
    clean_text: str


class FactTextParser:
    """
    Turns answer text into a ``ParsedGraphResult``.

    Markers and the bullet glyph come from settings so a backend that changes
    its wording can be followed without code changes.
    """

    def __init__(self,
                 answer_marker: Optional[str] = None,
                 facts_marker: Optional[str] = None,
                 sources_marker: Optional[str] = None,
                 bullet_glyph: Optional[str] = None):
        parser_config = get_settings().parser_config
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

        self.answer_marker = answer_marker or parser_config['answer_marker']
        self.facts_marker = facts_marker or parser_config['facts_marker']
        self.sources_marker = sources_marker or parser_config['sources_marker']
        self.bullet_glyph = bullet_glyph or parser_config['bullet_glyph']

        self._answer_pattern = re.compile(
            r'(?:^|\n)' + re.escape(self.answer_marker) + r'\s*', re.IGNORECASE
        )
        self._facts_pattern = re.compile(MARKER_BOUNDARY + re.escape(self.facts_marker) + r'\s*', re.IGNORECASE)
        self._sources_pattern = re.compile(MARKER_BOUNDARY + re.escape(self.sources_marker) + r'\s*', re.IGNORECASE)

    def parse(self, text: Optional[str],
              known_sources: Optional[Dict[int, str]] = None) -> Optional[ParsedGraphResult]:
        """
        Parse answer text.

        Args:
            text: Raw answer text
            known_sources: Citation table from elsewhere in the response, used
                for indices the inline sources block does not define

        Returns:
            The parsed result, or None when the text holds no facts block, no
            sources and no preamble (the text should be shown as-is)
        """
        if not text:
            return None

        blocks = self.split_blocks(text)
        if not blocks.preamble and not blocks.facts_block and not blocks.sources_block:
            return None

        source_index_to_url = dict(known_sources or {})
        source_index_to_url.update(parse_sources_block(blocks.sources_block))

        builder = GraphBuilder(source_index_to_url)
        if blocks.facts_block:
            self._parse_bullets(blocks.facts_block, builder)

        if builder.skipped:
            self.logger.debug(f"Skipped {builder.skipped} unparseable fact items")
        self.metrics.record_parse('bullets', len(builder.nodes), len(builder.edges), builder.skipped)

        return ParsedGraphResult(
            clean_text=blocks.clean_text,
            nodes=builder.nodes,
            edges=builder.edges,
            types=builder.types,
            source_index_to_url=builder.source_index_to_url,
            preamble=blocks.preamble,
            skipped_items=builder.skipped,
        )

    def split_blocks(self, text: str) -> FactBlocks:
        """
        Separate preamble, facts block, sources block and visible prose.

        Everything before the answer marker is preamble. The facts block runs
        from its marker to the sources marker or the end of the text; the
        visible prose stops at the start of the line holding the facts marker.
        """
        preamble = None
        working = text

        answer = self._answer_pattern.search(text)
        if answer:
            preamble = text[:answer.start()].strip() or None
            working = text[answer.end():]

        facts_block = None
        sources_block = None
        clean_text = working

        facts = self._facts_pattern.search(working)
        if facts:
            sources = self._sources_pattern.search(working, facts.end())
            if sources:
                facts_block = working[facts.end():sources.start()].strip()
                sources_block = working[sources.end():].strip()
            else:
                facts_block = working[facts.end():].strip()

            line_start = working.rfind('\n', 0, facts.start()) + 1
            clean_text = working[:line_start].rstrip()
        else:
            sources = self._sources_pattern.search(working)
            if sources:
                sources_block = working[sources.end():].strip()
                if sources_block:
                    clean_text = working[:sources.start()].rstrip()

        return FactBlocks(
            preamble=preamble,
            facts_block=facts_block,
            sources_block=sources_block,
            clean_text=clean_text,
        )

    def _parse_bullets(self, facts_block: str, builder: GraphBuilder) -> None:
        items = [item.strip() for item in facts_block.split(self.bullet_glyph)]

        for item in items:
            # Markdown residue such as a bold marker is not an item
            if not any(char.isalnum() for char in item):
                continue

            triple = scan_triple(item)
            if triple is None:
                builder.skip()
                continue

            left = parse_entity_span(triple.left)
            right = parse_entity_span(triple.right)
            if left is None or right is None:
                builder.skip()
                continue

            builder.add_relation(
                builder.add_entity(left),
                builder.add_entity(right),
                triple.relation,
                extract_citation_indices(item),
            )


def parse_retrieved_facts(text: Optional[str],
                          known_sources: Optional[Dict[int, str]] = None) -> Optional[ParsedGraphResult]:
    """Parse answer text with the configured markers."""
    return FactTextParser().parse(text, known_sources)
