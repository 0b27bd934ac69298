"""
Application layer - Store construction, resolution and teardown.

This layer orchestrates the domain objects.
It depends only on the Domain layer.
"""

from .container import Store, StoreDefinition, define_store
from .disposal import dispose, dispose_all
from .lifetime_manager import LifetimeManager

__all__ = [
    "Store",
    "StoreDefinition",
    "define_store",
    "LifetimeManager",
    "dispose",
    "dispose_all",
]
