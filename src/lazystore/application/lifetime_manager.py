import asyncio
import functools
import inspect
import logging
from typing import Any, Callable, Dict, List, Tuple

from lazystore.domain import Binding, ILifetimeManager, ResolvedValue

logger = logging.getLogger(__name__)


def _completed_future(value: Any) -> "asyncio.Future[Any]":
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    return future


class LifetimeManager(ILifetimeManager):
    """Memo table of a single store.

    Singleton values are cached by binding name, transient values are handed
    out without being recorded. Awaitable results are wrapped in a task that
    every caller shares until it settles. Each caller receives its own
    shielded handle on that task, so abandoning one handle leaves the
    construction running for the others.

    Asynchronous bindings must be resolved inside a running event loop: the
    shared task and the completed futures handed out after it settles are
    created on the running loop.

    Attributes:
        _memo: Memo entries keyed by binding name, in construction order. An entry
            is either the raw value, a pending future or a ``ResolvedValue``.
    """

    def __init__(self) -> None:
        """Initialize the lifetime manager with an empty memo table."""
        self._memo: Dict[str, Any] = {}

    def get_or_create(self, binding: Binding, factory: Callable[[], Any]) -> Any:
        """Get the memoized value or create a new one based on the binding's lifetime.

        Args:
            binding: The binding being resolved.
            factory: Function invoking the binding's factory with the owning store.

        Returns:
            - Singleton: the cached value. For asynchronous factories, a shielded
              handle on the shared task while it is pending, or a fresh completed
              future once it has settled.
            - Transient: whatever the factory returns, never cached.

        Raises:
            RuntimeError: If an asynchronous singleton is resolved without a running
                event loop.

        Example:
            >>> binding = Binding(name="db", factory=lambda s: Database())
            >>> db = manager.get_or_create(binding, lambda: binding.factory(store))
        """
        name = binding.name

        if name in self._memo:
            entry = self._memo[name]
            if isinstance(entry, ResolvedValue):
                return _completed_future(entry.value)
            if isinstance(entry, asyncio.Future):
                return asyncio.shield(entry)
            return entry

        value = factory()

        if binding.is_transient:
            logger.debug("Constructed transient %s", name)
            return value

        if inspect.isawaitable(value):
            # Coroutines can be awaited once, a future can be shared by every caller
            value = asyncio.ensure_future(value, loop=asyncio.get_running_loop())
            value.add_done_callback(functools.partial(self._settle, name))

        # Recorded before the future settles so racing lookups reuse it
        self._memo[name] = value
        logger.debug("Constructed singleton %s", name)
        if isinstance(value, asyncio.Future):
            # Cancelling one caller's handle must not cancel the shared construction
            return asyncio.shield(value)
        return value

    def _settle(self, name: str, future: "asyncio.Future[Any]") -> None:
        """Replace a settled future with its value, or evict it on failure."""
        if self._memo.get(name) is not future:
            return

        if future.cancelled() or future.exception() is not None:
            del self._memo[name]
            logger.warning("Asynchronous construction of %s failed, it will be retried on next lookup", name)
            return

        self._memo[name] = ResolvedValue(value=future.result())

    def constructed(self) -> List[Tuple[str, Any]]:
        """List the values this manager constructed, most recent first.

        Futures that are still pending or ended in failure are left out.

        Returns:
            ``(name, value)`` pairs ready for disposal.
        """
        values = []
        for name, entry in reversed(list(self._memo.items())):
            if isinstance(entry, ResolvedValue):
                values.append((name, entry.value))
            elif isinstance(entry, asyncio.Future):
                if entry.done() and not entry.cancelled() and entry.exception() is None:
                    values.append((name, entry.result()))
            else:
                values.append((name, entry))
        return values

    def discard(self, name: str) -> None:
        self._memo.pop(name, None)

    def clear_cache(self) -> None:
        """Forget every memoized value.

        Pending futures keep running but no longer update the table.
        """
        self._memo.clear()
