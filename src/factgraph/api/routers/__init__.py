"""
API routers for FactGraph.
"""
