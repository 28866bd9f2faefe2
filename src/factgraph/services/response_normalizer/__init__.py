"""
Response Normalizer for FactGraph.

Reconciles structured and legacy backend payloads into one canonical
response with an extracted graph.
"""

from .models import (
    BackendPayload,
    LegacyBackendResponse,
    NormalizedResponse,
    ResearchData,
    ResearchFinding,
    SourceRef,
    StructuredBackendResponse,
    StructuredResponse,
    SuggestedAction,
)
from .normalizer import ResponseNormalizer, normalize_response, to_canonical_graph

__all__ = [
    "ResponseNormalizer",
    "normalize_response",
    "to_canonical_graph",
    "BackendPayload",
    "StructuredBackendResponse",
    "LegacyBackendResponse",
    "StructuredResponse",
    "ResearchData",
    "ResearchFinding",
    "SuggestedAction",
    "SourceRef",
    "NormalizedResponse",
]
