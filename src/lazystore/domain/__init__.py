"""
Domain layer - Core models, capabilities and errors.

This layer contains the fundamental rules and value objects of a store.
It has no dependencies on other layers.
"""

from .enums import Lifetime
from .exceptions import (
    DisposalError,
    DuplicateBindingError,
    StoreError,
    SyncDisposeOfAsyncResourceError,
    UnknownBindingError,
)
from .interfaces import AsyncDisposable, Disposable, ILifetimeManager, IStore, IStoreDefinition
from .models import Binding, ResolvedValue

# Rebuild Pydantic models to resolve forward references
Binding.model_rebuild()

__all__ = [
    # Enums
    "Lifetime",
    # Exceptions
    "StoreError",
    "DuplicateBindingError",
    "UnknownBindingError",
    "SyncDisposeOfAsyncResourceError",
    "DisposalError",
    # Interfaces
    "IStore",
    "IStoreDefinition",
    "ILifetimeManager",
    "Disposable",
    "AsyncDisposable",
    # Models
    "Binding",
    "ResolvedValue",
]
