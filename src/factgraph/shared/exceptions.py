"""
Common exceptions for FactGraph.
"""


class FactGraphError(Exception):
    """Base exception for all FactGraph errors."""
    pass


class ValidationError(FactGraphError):
    """Raised when a backend payload or graph input fails validation."""
    pass


class LayoutError(FactGraphError):
    """Raised when layout parameters are invalid."""
    pass
