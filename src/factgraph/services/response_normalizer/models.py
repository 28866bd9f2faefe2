"""
Backend payload models and the normalized response.

The retrieval backend answers in one of two shapes. Both are validated at the
boundary into a tagged union and normalized immediately, so nothing after
the normalizer needs to know which shape arrived.
"""

from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import ConfigDict, Discriminator, Field, Tag, TypeAdapter, computed_field

from ...shared.models.base import BaseModel
from ...shared.models.graph import KGEdge, KGNode


class PayloadModel(BaseModel):
    """Base for models validated from backend JSON; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class SourceRef(PayloadModel):
    """One entry of the payload's citation table."""

    id: int = Field(..., description="Citation index")
    url: str = Field(..., description="Source URL")


class ResearchFinding(PayloadModel):
    """A research finding returned with a structured answer."""

    title: Optional[str] = Field(default=None, description="Finding title")
    url: str = Field(..., description="Finding URL")
    snippet: str = Field(default="", description="Excerpt supporting the finding")


class ResearchData(PayloadModel):
    """Research targets and findings of a structured answer."""

    targets: List[str] = Field(default_factory=list, description="Research targets")
    findings: List[ResearchFinding] = Field(default_factory=list, description="Research findings")


class SuggestedAction(PayloadModel):
    """A follow-up action suggested by the backend."""

    action: str = Field(..., description="Short action label")
    description: str = Field(default="", description="What the action does")


class StructuredResponse(PayloadModel):
    """The ``structured_response`` object of the newer payload shape."""

    research: Optional[ResearchData] = Field(default=None, alias="Research")
    chat_response: Optional[str] = Field(default=None, alias="Chat_Response")
    suggested_actions: Optional[List[SuggestedAction]] = Field(default=None, alias="Suggested_Actions")


class StructuredBackendResponse(PayloadModel):
    """Newer payload shape: structured answer plus research and actions."""

    tenant: str = Field(default="", description="Tenant the question was asked for")
    question: str = Field(default="", description="Original question")
    structured_response: StructuredResponse = Field(..., alias="structured_response")
    sources: List[SourceRef] = Field(default_factory=list, description="Citation table")
    facts_preview: Optional[List[str]] = Field(default=None, alias="factsPreview")
    diagnostics: Optional[Any] = Field(default=None, description="Opaque backend diagnostics")


class LegacyBackendResponse(PayloadModel):
    """Legacy payload shape: a free-text answer."""

    tenant: str = Field(default="", description="Tenant the question was asked for")
    question: str = Field(default="", description="Original question")
    answer: Optional[str] = Field(default=None, description="Free-text answer")
    sources: List[SourceRef] = Field(default_factory=list, description="Citation table")
    facts_preview: Optional[List[str]] = Field(default=None, alias="factsPreview")
    diagnostics: Optional[Any] = Field(default=None, description="Opaque backend diagnostics")


def payload_kind(value: Any) -> str:
    """Tell the two payload shapes apart."""
    if isinstance(value, StructuredBackendResponse):
        return 'structured'
    if isinstance(value, LegacyBackendResponse):
        return 'legacy'
    if isinstance(value, dict) and value.get('structured_response') is not None:
        return 'structured'
    return 'legacy'


BackendPayload = Annotated[
    Union[
        Annotated[StructuredBackendResponse, Tag('structured')],
        Annotated[LegacyBackendResponse, Tag('legacy')],
    ],
    Discriminator(payload_kind),
]

backend_payload_adapter = TypeAdapter(BackendPayload)


class NormalizedResponse(BaseModel):
    """
    One canonical view of a backend answer, whatever its shape.

    ``chat_response`` is the prose to display; the graph fields are empty when
    no facts could be extracted.
    """

    chat_response: str = Field(default="", description="Prose to display")
    research_targets: List[str] = Field(default_factory=list, description="Research targets")
    research_findings: List[ResearchFinding] = Field(default_factory=list, description="Research findings")
    suggested_actions: List[SuggestedAction] = Field(default_factory=list, description="Suggested actions")
    nodes: List[KGNode] = Field(default_factory=list, description="Extracted entities")
    edges: List[KGEdge] = Field(default_factory=list, description="Extracted relations")
    types: List[str] = Field(default_factory=list, description="Sorted unique node types")
    source_index_to_url: Dict[int, str] = Field(default_factory=dict, description="Citation table")
    preamble: Optional[str] = Field(default=None, description="Diagnostics preceding the answer")
    has_structured_data: bool = Field(default=False, description="Whether the structured shape arrived")
    skipped_items: int = Field(default=0, ge=0, description="Unparseable fact items dropped")

    @computed_field
    @property
    def has_graph_data(self) -> bool:
        """At least one node or edge was extracted."""
        return len(self.nodes) > 0 or len(self.edges) > 0

    @computed_field
    @property
    def has_research_data(self) -> bool:
        """At least one research target or finding is present."""
        return len(self.research_targets) > 0 or len(self.research_findings) > 0

    @computed_field
    @property
    def has_debug_data(self) -> bool:
        """A preamble or a non-empty citation table is present."""
        return bool(self.preamble) or len(self.source_index_to_url) > 0
