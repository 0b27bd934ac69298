import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from lazystore.application.disposal import dispose, dispose_all
from lazystore.application.lifetime_manager import LifetimeManager
from lazystore.domain import (
    Binding,
    DuplicateBindingError,
    ILifetimeManager,
    IStore,
    IStoreDefinition,
    Lifetime,
    UnknownBindingError,
)

logger = logging.getLogger(__name__)

Factory = Callable[["Store"], Any]


class Store(IStore):
    """Finalized container that lazily constructs and memoizes values.

    A store owns the values it constructed. Names it does not bind itself are
    resolved by its parent, which keeps ownership of whatever it constructs.

    Attributes:
        _bindings: Read-only mapping of binding names to bindings.
        _parent: Store that resolves names not bound locally.
        _lifetime_manager: Memo table for this store's singleton values.
    """

    def __init__(self, bindings: Mapping[str, Binding], parent: Optional["Store"] = None) -> None:
        """Initialize the store. Use ``StoreDefinition.finalize()`` instead of calling this directly.

        Args:
            bindings: The frozen bindings of the definition.
            parent: Optional parent store.
        """
        self._bindings = bindings
        self._parent = parent
        self._lifetime_manager: ILifetimeManager = LifetimeManager()

    @property
    def parent(self) -> Optional["Store"]:
        return self._parent

    def has(self, name: str) -> bool:
        """Check whether ``name`` is bound locally or in any ancestor store.

        Args:
            name: The binding name.

        Returns:
            True if ``get(name)`` would find a binding.
        """
        if name in self._bindings:
            return True
        return self._parent is not None and self._parent.has(name)

    def find_binding(self, name: str) -> Optional[Binding]:
        """Return the binding ``get(name)`` would use, or None."""
        binding = self._bindings.get(name)
        if binding is None and self._parent is not None:
            return self._parent.find_binding(name)
        return binding

    def get(self, name: str) -> Any:
        """Resolve ``name`` to its value, constructing it on first use.

        Local bindings take precedence over the parent chain. The factory
        receives the store that owns the binding, so it can resolve its own
        dependencies through it.

        Args:
            name: The binding name.

        Returns:
            The value, or for asynchronous factories an awaitable. Every caller
            gets its own handle on one shared construction, so cancelling one
            handle leaves the construction running for the others.

        Raises:
            UnknownBindingError: If no store in the chain binds ``name``.
            RuntimeError: If an asynchronous singleton is resolved outside a running
                event loop.
            Exception: Whatever the factory raises, unwrapped.

        Example:
            >>> store = define_store().add("config", lambda s: {"debug": True}).finalize()
            >>> store.get("config")
            {'debug': True}
        """
        binding = self._bindings.get(name)
        if binding is None:
            if self._parent is not None and self._parent.has(name):
                return self._parent.get(name)
            raise UnknownBindingError(name)

        return self._lifetime_manager.get_or_create(binding, lambda: binding.factory(self))

    def create_child(self) -> "StoreDefinition":
        """Create an empty definition whose stores resolve missing names through this store.

        Finalizing the child definition once per operation gives each operation
        its own memo table on top of the shared parent.

        Returns:
            New empty definition parented to this store.

        Example:
            >>> request_scope = app_store.create_child().add("ctx", lambda s: RequestContext())
            >>> with request_scope.finalize() as request_store:
            ...     request_store.get("ctx")
        """
        return StoreDefinition(parent=self)

    def close(self) -> None:
        """Synchronously dispose every value this store constructed.

        Values are closed most recently constructed first. Values of the parent
        store are never touched.

        Raises:
            SyncDisposeOfAsyncResourceError: If a value only supports ``aclose()``.
                Values closed before it are forgotten, the rest stay memoized.
        """
        for name, value in self._lifetime_manager.constructed():
            dispose(name, value)
            self._lifetime_manager.discard(name)
        self._lifetime_manager.clear_cache()

    async def aclose(self) -> None:
        """Asynchronously dispose every value this store constructed.

        Raises:
            DisposalError: If several teardowns failed.
        """
        try:
            await dispose_all(self._lifetime_manager.constructed())
        finally:
            self._lifetime_manager.clear_cache()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.close()
        return False

    async def __aenter__(self) -> "Store":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> bool:
        await self.aclose()
        return False


class StoreDefinition(IStoreDefinition):
    """Immutable builder of stores.

    Every registration returns a new definition, so one definition can be
    extended along independent branches.

    Attributes:
        _bindings: Read-only mapping of binding names to bindings.
        _parent: Store that finalized stores will inherit from.
    """

    def __init__(self, bindings: Optional[Mapping[str, Binding]] = None, parent: Optional[Store] = None) -> None:
        """Initialize the definition. Use ``define_store()`` or ``Store.create_child()`` instead.

        Args:
            bindings: Bindings to copy into the definition.
            parent: Optional parent store.
        """
        self._bindings: Mapping[str, Binding] = MappingProxyType(dict(bindings or {}))
        self._parent = parent

    @property
    def bindings(self) -> Mapping[str, Binding]:
        return self._bindings

    @property
    def parent(self) -> Optional[Store]:
        return self._parent

    def has(self, name: str) -> bool:
        """Check whether ``name`` is bound in this definition or its parent chain."""
        if name in self._bindings:
            return True
        return self._parent is not None and self._parent.has(name)

    def _extend(self, binding: Binding) -> "StoreDefinition":
        logger.debug("Registered %s service %s", binding.lifetime, binding.name)
        return StoreDefinition({**self._bindings, binding.name: binding}, self._parent)

    def _register(self, name: str, factory: Factory, lifetime: Lifetime) -> "StoreDefinition":
        """Internal registration method with validation.

        Raises:
            DuplicateBindingError: If the name is already bound here or in the parent chain.
        """
        if self.has(name):
            raise DuplicateBindingError(name)
        return self._extend(Binding(name=name, factory=factory, lifetime=lifetime))

    def add(self, name: str, factory: Factory) -> "StoreDefinition":
        """Return a new definition with a singleton binding.

        The factory is not invoked until the name is first resolved.

        Args:
            name: The binding name.
            factory: Function receiving the store and returning the value.

        Raises:
            DuplicateBindingError: If the name is already bound here or in the parent chain.

        Example:
            >>> definition = define_store().add("db", lambda s: Database(s.get("config")))
        """
        return self._register(name, factory, Lifetime.SINGLETON)

    def add_transient(self, name: str, factory: Factory) -> "StoreDefinition":
        """Return a new definition with a binding constructed anew on every lookup.

        Args:
            name: The binding name.
            factory: Function receiving the store and returning the value.

        Raises:
            DuplicateBindingError: If the name is already bound here or in the parent chain.
        """
        return self._register(name, factory, Lifetime.TRANSIENT)

    def override(self, name: str, factory: Factory) -> "StoreDefinition":
        """Return a new definition where an existing binding uses another factory.

        The binding keeps its lifetime. Overriding a name inherited from the
        parent store shadows it in stores finalized from this definition only.
        Useful for replacing services with test doubles.

        Args:
            name: The binding name.
            factory: Replacement factory.

        Raises:
            UnknownBindingError: If the name is bound neither here nor in the parent chain.

        Example:
            >>> test_definition = definition.override("mailer", lambda s: FakeMailer())
        """
        existing = self._bindings.get(name)
        if existing is None and self._parent is not None:
            existing = self._parent.find_binding(name)
        if existing is None:
            raise UnknownBindingError(name)
        return self._extend(existing.with_factory(factory))

    def finalize(self) -> Store:
        """Freeze the definition into a new store. No factory runs.

        Each call returns an independent store with its own memo table.
        """
        return Store(self._bindings, self._parent)


def define_store() -> StoreDefinition:
    """Create an empty definition without a parent store."""
    return StoreDefinition()
