"""
FastAPI application factory for the FactGraph API.

Exposes parsing, normalization, layout and exploration over HTTP with
request timing, metrics and uniform error envelopes.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..shared import FactGraphError, get_logger, get_metrics, get_settings, setup_logging
from .models import APIResponse, ErrorResponse, utc_timestamp
from .routers import graph, health

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger = get_logger(__name__)

    # Startup
    setup_logging()
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} API {settings.app_version}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name} API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="""
        Knowledge graph extraction and layout:
        - Facts: parse fact blocks out of answer text
        - Responses: normalize structured and legacy backend payloads
        - Graph: filter, lay out and summarize knowledge graphs
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if settings.enable_metrics:
            get_metrics().record_api_request(
                endpoint=request.url.path,
                method=request.method,
                duration_seconds=process_time,
                status_code=response.status_code
            )

        return response

    @app.exception_handler(FactGraphError)
    async def factgraph_exception_handler(request: Request, exc: FactGraphError):
        get_logger(__name__).warning(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc}")
        error_response = ErrorResponse(
            error=type(exc).__name__,
            message=str(exc),
            timestamp=utc_timestamp()
        )
        return JSONResponse(status_code=422, content=error_response.to_wire())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        error_response = ErrorResponse(
            error="HTTPException",
            message=str(exc.detail),
            timestamp=utc_timestamp()
        )
        return JSONResponse(status_code=exc.status_code, content=error_response.to_wire())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        get_logger(__name__).error(f"Unhandled exception in {request.method} {request.url}: {exc}")
        error_response = ErrorResponse(
            error=type(exc).__name__,
            message=str(exc),
            timestamp=utc_timestamp()
        )
        return JSONResponse(status_code=500, content=error_response.to_wire())

    app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(graph.router, prefix=API_PREFIX, tags=["Graph"])

    @app.get("/", response_model=APIResponse)
    async def root():
        """Root endpoint with API information."""
        return APIResponse(
            success=True,
            data={
                "name": f"{settings.app_name} API",
                "version": settings.app_version,
                "docs": "/docs",
                "health": f"{API_PREFIX}/health",
            },
            message=f"{settings.app_name} API is running",
            timestamp=utc_timestamp()
        )

    return app
