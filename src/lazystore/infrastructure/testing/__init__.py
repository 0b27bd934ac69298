"""
Testing utilities module.

Provides helpers for testing applications wired with lazystore.
"""

from .utilities import MockScope, create_mock_store

__all__ = [
    "create_mock_store",
    "MockScope",
]
