"""
Response normalizer.

Reconciles the structured and legacy backend payloads into one
``NormalizedResponse``, running the fact parsers on whichever text carries
the graph.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ...shared import ValidationError, get_logger, get_metrics
from ...shared.models.graph import CanonicalGraph, ParsedGraphResult
from ..fact_parser import FactTextParser, GroupedFactsParser
from .models import (
    LegacyBackendResponse,
    NormalizedResponse,
    StructuredBackendResponse,
    backend_payload_adapter,
)

Payload = Union[StructuredBackendResponse, LegacyBackendResponse]


@dataclass
class _Extraction:
    answer_result: Optional[ParsedGraphResult]
    graph_result: Optional[ParsedGraphResult]


class ResponseNormalizer:
    """
    Turns backend payloads of either shape into one canonical response.

    The displayed prose never loses content because graph parsing failed:
    when the answer cannot be parsed it is returned verbatim.
    """

    def __init__(self,
                 parser: Optional[FactTextParser] = None,
                 grouped_parser: Optional[GroupedFactsParser] = None):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.parser = parser or FactTextParser()
        self.grouped_parser = grouped_parser or GroupedFactsParser()

    def validate_payload(self, payload: Union[Payload, Dict[str, Any]]) -> Payload:
        """
        Validate a raw payload into one of the two shapes.

        Raises:
            ValidationError: If the payload matches neither shape
        """
        if isinstance(payload, (StructuredBackendResponse, LegacyBackendResponse)):
            return payload
        if not isinstance(payload, dict):
            raise ValidationError(f"Backend payload must be an object, got {type(payload).__name__}")

        try:
            return backend_payload_adapter.validate_python(payload)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid backend payload: {e}") from e

    def normalize(self, payload: Union[Payload, Dict[str, Any]]) -> NormalizedResponse:
        """
        Normalize a backend payload.

        Args:
            payload: Structured or legacy payload, as a model or raw dict

        Returns:
            The canonical response
        """
        payload = self.validate_payload(payload)
        known_sources = {source.id: source.url for source in payload.sources}

        if isinstance(payload, StructuredBackendResponse):
            structured = payload.structured_response
            research = structured.research
            answer = structured.chat_response or ''
            research_targets = list(research.targets) if research else []
            research_findings = list(research.findings) if research else []
            suggested_actions = list(structured.suggested_actions or [])
            has_structured_data = True
        else:
            answer = payload.answer or ''
            research_targets = []
            research_findings = []
            suggested_actions = []
            has_structured_data = False

        extraction = self._extract(answer, payload.facts_preview or [], known_sources)
        answer_result = extraction.answer_result
        graph_result = extraction.graph_result

        if answer_result is not None and answer_result.clean_text.strip():
            chat_response = answer_result.clean_text
        else:
            chat_response = answer

        source_index_to_url = dict(known_sources)
        preamble = None
        for result in (answer_result, graph_result):
            if result is None:
                continue
            source_index_to_url.update(result.source_index_to_url)
            preamble = preamble or result.preamble

        reported = graph_result or answer_result
        skipped_items = reported.skipped_items if reported else 0

        normalized = NormalizedResponse(
            chat_response=chat_response,
            research_targets=research_targets,
            research_findings=research_findings,
            suggested_actions=suggested_actions,
            nodes=graph_result.nodes if graph_result else [],
            edges=graph_result.edges if graph_result else [],
            types=graph_result.types if graph_result else [],
            source_index_to_url=source_index_to_url,
            preamble=preamble,
            has_structured_data=has_structured_data,
            skipped_items=skipped_items,
        )

        shape = 'structured' if has_structured_data else 'legacy'
        self.metrics.counter('responses_normalized_total', tags={'shape': shape})
        self.logger.info(
            f"Normalized {shape} response: {len(normalized.nodes)} nodes, "
            f"{len(normalized.edges)} edges"
        )
        return normalized

    def _extract(self, answer: str, facts_preview: List[str],
                 known_sources: Dict[int, str]) -> _Extraction:
        answer_result = self.parser.parse(answer, known_sources) if answer else None
        if answer_result is not None and answer_result.has_graph:
            return _Extraction(answer_result, answer_result)

        if not facts_preview:
            return _Extraction(answer_result, None)

        preview_result = self.parser.parse('\n'.join(facts_preview), known_sources)
        if preview_result is not None and preview_result.has_graph:
            return _Extraction(answer_result, preview_result)

        self.logger.debug("Bullet grammar found no facts in preview, trying grouped layout")
        sources = dict(known_sources)
        if preview_result is not None:
            sources.update(preview_result.source_index_to_url)
        grouped_result = self.grouped_parser.parse(facts_preview, sources)
        if grouped_result.has_graph:
            return _Extraction(answer_result, grouped_result)

        return _Extraction(answer_result, None)


def normalize_response(payload: Union[Payload, Dict[str, Any]]) -> NormalizedResponse:
    """Normalize a backend payload with default parsers."""
    return ResponseNormalizer().normalize(payload)


def to_canonical_graph(response: NormalizedResponse, tenant: Optional[str] = None) -> CanonicalGraph:
    """Build the explorer's canonical graph from a normalized response."""
    return CanonicalGraph(
        nodes=response.nodes,
        edges=response.edges,
        types=response.types,
        source_index_to_url=response.source_index_to_url,
        tenant=tenant,
    )
