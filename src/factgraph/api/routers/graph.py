"""
Fact parsing, response normalization and graph exploration endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body

from ...services.fact_parser import FactTextParser
from ...services.graph_explorer import GraphExplorer, build_full_graph
from ...services.layout import ForceLayoutEngine, TypeColorPalette, position_nodes
from ...services.response_normalizer import ResponseNormalizer
from ...shared import collect_types, get_logger
from ..models import (
    APIResponse,
    ExploreRequest,
    FullGraphRequest,
    LayoutRequest,
    ParseFactsRequest,
    StatisticsRequest,
    utc_timestamp,
)

router = APIRouter()
logger = get_logger(__name__)

# Initialize services
fact_parser = FactTextParser()
response_normalizer = ResponseNormalizer(parser=fact_parser)
layout_engine = ForceLayoutEngine()


@router.post("/facts/parse", response_model=APIResponse)
async def parse_facts(request: ParseFactsRequest):
    """
    Parse the facts and sources blocks out of answer text.

    Returns:
        The parsed graph, or null data when the text carries nothing to visualize
    """
    result = fact_parser.parse(request.text, request.known_sources)
    if result is None:
        return APIResponse(
            success=True,
            data=None,
            message="No graph content found",
            timestamp=utc_timestamp()
        )

    return APIResponse(
        success=True,
        data=result.to_wire(),
        message=f"Parsed {len(result.nodes)} nodes and {len(result.edges)} edges",
        timestamp=utc_timestamp()
    )


@router.post("/responses/normalize", response_model=APIResponse)
async def normalize_response(payload: Dict[str, Any] = Body(...)):
    """
    Normalize a structured or legacy backend payload.

    Returns:
        The canonical response with its extracted graph
    """
    normalized = response_normalizer.normalize(payload)
    return APIResponse(
        success=True,
        data=normalized.to_wire(),
        message="Response normalized",
        timestamp=utc_timestamp()
    )


@router.post("/graph/explore", response_model=APIResponse)
async def explore_graph(request: ExploreRequest):
    """
    Filter a graph and lay out its visible part.

    Returns:
        Visible nodes with positions and colors, visible edges, badges and legend
    """
    explorer = GraphExplorer(request.graph, layout_engine=layout_engine)
    positioned = explorer.positioned_view(request.filter_state, seed=request.seed,
                                          iterations=request.iterations)

    data = positioned.to_wire()
    data["legend"] = [entry.to_wire() for entry in explorer.legend(positioned.view)]
    return APIResponse(
        success=True,
        data=data,
        message=f"{len(positioned.nodes)} of {len(request.graph.nodes)} nodes visible",
        timestamp=utc_timestamp()
    )


@router.post("/graph/layout", response_model=APIResponse)
async def layout_graph(request: LayoutRequest):
    """
    Lay out nodes and edges without filtering.

    Returns:
        Positions per node id, canvas dimensions and positioned nodes
    """
    result = layout_engine.layout(request.nodes, request.edges,
                                  iterations=request.iterations, rng=request.seed)
    palette = TypeColorPalette(collect_types(request.nodes))

    data = result.to_wire()
    data["nodes"] = [node.to_wire() for node in position_nodes(request.nodes, result, palette)]
    return APIResponse(
        success=True,
        data=data,
        message=f"Laid out {len(result.positions)} nodes",
        timestamp=utc_timestamp()
    )


@router.post("/graph/full", response_model=APIResponse)
async def full_graph(request: FullGraphRequest):
    """
    Convert full-graph records of a tenant into a canonical graph.

    Returns:
        The canonical graph
    """
    graph = build_full_graph(request.tenant, request.nodes, request.edges, request.url_to_id)
    return APIResponse(
        success=True,
        data=graph.to_wire(),
        message=f"Built graph with {len(graph.nodes)} nodes and {len(graph.edges)} edges",
        timestamp=utc_timestamp()
    )


@router.post("/graph/statistics", response_model=APIResponse)
async def graph_statistics(request: StatisticsRequest):
    """
    Summarize a graph.

    Returns:
        Connectivity statistics, legend, ontology and taxonomy
    """
    explorer = GraphExplorer(request.graph, layout_engine=layout_engine)
    return APIResponse(
        success=True,
        data={
            "statistics": explorer.statistics().to_wire(),
            "legend": [entry.to_wire() for entry in explorer.legend()],
            "ontology": explorer.ontology().to_wire(),
            "taxonomy": [group.to_wire() for group in explorer.taxonomy(request.taxonomy_limit)],
        },
        message="Statistics computed",
        timestamp=utc_timestamp()
    )
