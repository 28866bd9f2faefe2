"""
API models for request/response handling.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from ..services.graph_explorer.models import FilterState
from ..shared.models.base import BaseModel
from ..shared.models.graph import CanonicalGraph, KGEdge, KGNode


def utc_timestamp() -> str:
    """Current UTC time in ISO 8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    success: bool = Field(..., description="Whether the request succeeded")
    data: Any = Field(default=None, description="Response data")
    message: Optional[str] = Field(default=None, description="Response message")
    timestamp: Optional[str] = Field(default=None, description="Response timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {"nodes": [], "edges": []},
                "message": "Facts parsed",
                "timestamp": "2024-01-01T12:00:00Z"
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
    timestamp: Optional[str] = Field(default=None, description="Error timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "LayoutError",
                "message": "Iterations must be non-negative, got -1",
                "details": None,
                "timestamp": "2024-01-01T12:00:00Z"
            }
        }
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    services: Dict[str, str] = Field(default_factory=dict, description="Individual service status")
    timestamp: str = Field(..., description="Check timestamp")


class ParseFactsRequest(BaseModel):
    """Fact text to parse."""

    text: str = Field(..., description="Answer text with embedded facts and sources blocks")
    known_sources: Dict[int, str] = Field(default_factory=dict, description="Citation table to resolve against")


class ExploreRequest(BaseModel):
    """A graph, a filter state and layout options."""

    graph: CanonicalGraph
    filter_state: FilterState = Field(default_factory=FilterState, alias="filter")
    seed: Optional[int] = Field(default=None, description="Seed of the initial layout jitter")
    iterations: Optional[int] = Field(default=None, description="Layout iterations")


class LayoutRequest(BaseModel):
    """Nodes and edges to lay out."""

    nodes: List[KGNode] = Field(default_factory=list)
    edges: List[KGEdge] = Field(default_factory=list)
    iterations: Optional[int] = Field(default=None, description="Layout iterations")
    seed: Optional[int] = Field(default=None, description="Seed of the initial layout jitter")


class FullGraphRequest(BaseModel):
    """Records fetched for a whole tenant graph."""

    tenant: Optional[str] = None
    nodes: List[Dict[str, Any]] = Field(default_factory=list, description="Raw node records")
    edges: List[Dict[str, Any]] = Field(default_factory=list, description="Raw edge records")
    url_to_id: Dict[str, int] = Field(default_factory=dict, description="Source URL to citation index")


class StatisticsRequest(BaseModel):
    """A graph to summarize."""

    graph: CanonicalGraph
    taxonomy_limit: int = Field(default=12, ge=1, description="Nodes listed per type")
