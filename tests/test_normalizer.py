"""Tests for the response normalizer."""

import pytest

from factgraph.services.response_normalizer import (
    LegacyBackendResponse,
    ResponseNormalizer,
    StructuredBackendResponse,
    normalize_response,
    to_canonical_graph,
)
from factgraph.services.response_normalizer.models import backend_payload_adapter
from factgraph.shared import ValidationError

from conftest import ANSWER_WITH_FACTS, GROUPED_LINES


def structured_payload(chat_response, facts_preview=None, sources=None):
    payload = {
        "tenant": "acme",
        "question": "Who handles fraud?",
        "structured_response": {
            "Research": {
                "targets": ["fraud controls"],
                "findings": [{"title": "Fraud memo", "url": "https://memo.com", "snippet": "..."}],
            },
            "Chat_Response": chat_response,
            "Suggested_Actions": [{"action": "Open ticket", "description": "Escalate to risk"}],
        },
        "sources": sources or [],
    }
    if facts_preview is not None:
        payload["factsPreview"] = facts_preview
    return payload


class TestPayloadShapes:

    def test_discriminates_shapes(self):
        structured = backend_payload_adapter.validate_python(structured_payload("hi"))
        legacy = backend_payload_adapter.validate_python({"answer": "hi", "sources": []})

        assert isinstance(structured, StructuredBackendResponse)
        assert isinstance(legacy, LegacyBackendResponse)

    def test_invalid_payload(self):
        normalizer = ResponseNormalizer()

        with pytest.raises(ValidationError):
            normalizer.normalize({"structured_response": "not an object"})
        with pytest.raises(ValidationError):
            normalizer.normalize(["not", "a", "mapping"])


class TestStructuredPath:

    def test_embedded_facts(self):
        normalized = normalize_response(structured_payload(ANSWER_WITH_FACTS))

        assert normalized.chat_response == "Fraud is handled by the risk team."
        assert normalized.has_structured_data
        assert normalized.has_graph_data
        assert normalized.preamble == "Diagnostics: retrieved 3 facts in 12ms"
        assert normalized.skipped_items == 1
        assert normalized.research_targets == ["fraud controls"]
        assert normalized.suggested_actions[0].action == "Open ticket"
        assert normalized.has_research_data
        assert normalized.has_debug_data

    def test_no_graph_keeps_text_verbatim(self):
        normalized = normalize_response(structured_payload("Plain answer, nothing to draw."))

        assert normalized.chat_response == "Plain answer, nothing to draw."
        assert normalized.has_structured_data
        assert not normalized.has_graph_data
        assert not normalized.has_debug_data

    def test_bullet_preview_fallback(self):
        normalized = normalize_response(structured_payload(
            "Plain answer.",
            facts_preview=['Retrieved Facts: • (service:"a") -[USES]-> (tool:"b") [2]'],
            sources=[{"id": 2, "url": "https://b.com"}],
        ))

        assert normalized.chat_response == "Plain answer."
        assert [e.relation_label for e in normalized.edges] == ["USES"]
        assert normalized.edges[0].citation_urls == ["https://b.com"]
        assert normalized.source_index_to_url == {2: "https://b.com"}

    def test_grouped_preview_fallback(self):
        normalized = normalize_response(structured_payload("Plain answer.", facts_preview=GROUPED_LINES))

        assert [e.relation_label for e in normalized.edges] == ["PROVIDES", "PARTNERS_WITH"]
        assert normalized.types == ["organization", "service"]

    def test_answer_graph_wins_over_preview(self):
        normalized = normalize_response(structured_payload(ANSWER_WITH_FACTS, facts_preview=GROUPED_LINES))
        assert [e.relation_label for e in normalized.edges] == ["ADDRESSES", "OWNS"]


class TestLegacyPath:

    def test_answer_with_facts(self):
        normalized = normalize_response({"tenant": "acme", "question": "q",
                                         "answer": ANSWER_WITH_FACTS, "sources": []})

        assert normalized.chat_response == "Fraud is handled by the risk team."
        assert not normalized.has_structured_data
        assert normalized.research_targets == []
        assert normalized.suggested_actions == []
        assert len(normalized.nodes) == 3

    def test_null_answer(self):
        normalized = normalize_response({"answer": None, "sources": []})

        assert normalized.chat_response == ""
        assert not normalized.has_graph_data

    def test_preview_fallback(self):
        normalized = normalize_response({"answer": "See graph.", "sources": [], "factsPreview": GROUPED_LINES})

        assert normalized.chat_response == "See graph."
        assert len(normalized.edges) == 2

    def test_canonical_graph(self):
        normalized = normalize_response({"answer": ANSWER_WITH_FACTS, "sources": []})
        graph = to_canonical_graph(normalized, tenant="acme")

        assert graph.tenant == "acme"
        assert graph.types == ["risk", "service", "team"]
        assert [e.source_id for e in graph.edges] == ["service:risk mgmt", "team:risk team"]


class TestWireFormat:

    def test_predicates_are_serialized(self):
        wire = normalize_response(structured_payload(ANSWER_WITH_FACTS)).to_wire()

        assert wire["chatResponse"] == "Fraud is handled by the risk team."
        assert wire["hasGraphData"] is True
        assert wire["hasStructuredData"] is True
        assert wire["edges"][0]["sourceId"] == "service:risk mgmt"
