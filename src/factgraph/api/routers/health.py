"""
Health check endpoints.
"""

from fastapi import APIRouter

from ...shared import get_metrics, get_settings
from ..models import HealthResponse, utc_timestamp

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns:
        System health status
    """
    settings = get_settings()
    services = {
        "fact_parser": "ready",
        "layout_engine": "ready",
        "metrics": "collecting" if settings.enable_metrics else "disabled",
    }

    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        services=services,
        timestamp=utc_timestamp()
    )


@router.get("/health/detailed")
async def detailed_health_check():
    """
    Detailed health check with metrics.

    Returns:
        Health status plus every recorded metric
    """
    health = await health_check()
    return {
        "health": health.to_wire(),
        "metrics": get_metrics().get_all_metrics(),
        "timestamp": utc_timestamp()
    }
