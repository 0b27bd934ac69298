"""
lazystore: Lightweight name-based dependency injection with lazy, scoped stores.

Public API exports for the lazystore package.
"""

# Application exports
from lazystore.application.container import Store, StoreDefinition, define_store

# Domain exports
from lazystore.domain.enums import Lifetime
from lazystore.domain.exceptions import (
    DisposalError,
    DuplicateBindingError,
    StoreError,
    SyncDisposeOfAsyncResourceError,
    UnknownBindingError,
)
from lazystore.domain.interfaces import AsyncDisposable, Disposable

__version__ = "0.1.0"

__all__ = [
    # Stores
    "define_store",
    "Store",
    "StoreDefinition",
    # Enums
    "Lifetime",
    # Capabilities
    "Disposable",
    "AsyncDisposable",
    # Exceptions
    "StoreError",
    "DuplicateBindingError",
    "UnknownBindingError",
    "SyncDisposeOfAsyncResourceError",
    "DisposalError",
]
