"""
FastAPI integration module.

Provides helpers for resolving store values in FastAPI endpoints.
"""

from .integration import StoreMiddleware, create_request_dependency, create_store_dependency

__all__ = [
    "create_store_dependency",
    "create_request_dependency",
    "StoreMiddleware",
]
