from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Protocol, Tuple, runtime_checkable

from lazystore.domain.models import Binding


@runtime_checkable
class Disposable(Protocol):
    """Capability of a value that can be torn down synchronously."""

    def close(self) -> None: ...


@runtime_checkable
class AsyncDisposable(Protocol):
    """Capability of a value that can be torn down asynchronously."""

    def aclose(self) -> Awaitable[None]: ...


class IStore(ABC):
    """Abstract interface for a finalized store that resolves names to values."""

    @abstractmethod
    def has(self, name: str) -> bool:
        """Check whether ``name`` is bound locally or in any ancestor store.

        Args:
            name: The binding name.
        """

    @abstractmethod
    def get(self, name: str) -> Any:
        """Resolve ``name`` to its value, constructing it on first use.

        Args:
            name: The binding name.
        """

    @abstractmethod
    def create_child(self) -> "IStoreDefinition":
        """Create an empty definition whose stores inherit from this store."""

    @abstractmethod
    def close(self) -> None:
        """Synchronously dispose every value this store constructed."""

    @abstractmethod
    async def aclose(self) -> None:
        """Asynchronously dispose every value this store constructed."""


class IStoreDefinition(ABC):
    """Abstract interface for the immutable builder that produces stores."""

    @abstractmethod
    def add(self, name: str, factory: Callable[[IStore], Any]) -> "IStoreDefinition":
        """Return a new definition with a singleton binding for ``name``."""

    @abstractmethod
    def add_transient(self, name: str, factory: Callable[[IStore], Any]) -> "IStoreDefinition":
        """Return a new definition with a transient binding for ``name``."""

    @abstractmethod
    def override(self, name: str, factory: Callable[[IStore], Any]) -> "IStoreDefinition":
        """Return a new definition where an existing binding uses ``factory``."""

    @abstractmethod
    def finalize(self) -> IStore:
        """Freeze the definition into a new store."""


class ILifetimeManager(ABC):
    """Abstract interface for the per-store memo table."""

    @abstractmethod
    def get_or_create(self, binding: Binding, factory: Callable[[], Any]) -> Any:
        """Get the memoized value for ``binding`` or create one according to its lifetime.

        Args:
            binding: The binding being resolved.
            factory: A callable that invokes the binding's factory.
        """

    @abstractmethod
    def constructed(self) -> List[Tuple[str, Any]]:
        """List ``(name, value)`` for every settled value, most recent first."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Forget every memoized value."""

    @abstractmethod
    def discard(self, name: str) -> None:
        """Forget the memoized value for ``name``, if any."""
