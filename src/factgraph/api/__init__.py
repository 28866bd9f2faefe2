"""
FactGraph API.

Provides REST access to fact parsing, response normalization and graph
exploration with uniform error handling and monitoring.
"""

from .app import create_app
from .models import APIResponse, ErrorResponse, HealthResponse

__all__ = [
    "create_app",
    "APIResponse",
    "ErrorResponse",
    "HealthResponse",
]
