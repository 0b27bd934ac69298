"""Application layer - Teardown of constructed values."""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Iterable, List, Tuple

from lazystore.domain import AsyncDisposable, Disposable, DisposalError, SyncDisposeOfAsyncResourceError

logger = logging.getLogger(__name__)


def dispose(name: str, value: Any) -> None:
    """Synchronously tear down a single value.

    Args:
        name: The binding the value was constructed for.
        value: The constructed value.

    Raises:
        SyncDisposeOfAsyncResourceError: If the value can only be closed asynchronously,
            including a ``close()`` that is a coroutine function or returns an awaitable.
    """
    if isinstance(value, Disposable):
        if inspect.iscoroutinefunction(value.close):
            raise SyncDisposeOfAsyncResourceError(name)
        logger.debug("Closing %s", name)
        result = value.close()
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise SyncDisposeOfAsyncResourceError(name)
    elif isinstance(value, AsyncDisposable):
        raise SyncDisposeOfAsyncResourceError(name)


async def dispose_all(values: Iterable[Tuple[str, Any]]) -> None:
    """Asynchronously tear down every value, preferring ``aclose()`` over ``close()``.

    All ``aclose()`` calls, and ``close()`` calls returning an awaitable, are
    started first and awaited together. Every teardown is attempted before any
    failure is reported.

    Args:
        values: ``(name, value)`` pairs to dispose.

    Raises:
        DisposalError: If more than one teardown failed.
        Exception: The failure itself, if exactly one teardown failed.
    """
    pending: List[Awaitable[Any]] = []
    errors: List[BaseException] = []

    for name, value in values:
        try:
            if isinstance(value, AsyncDisposable):
                logger.debug("Closing %s asynchronously", name)
                result = value.aclose()
                if inspect.isawaitable(result):
                    pending.append(result)
            elif isinstance(value, Disposable):
                logger.debug("Closing %s", name)
                result = value.close()
                if inspect.isawaitable(result):
                    pending.append(result)
        except Exception as e:
            errors.append(e)

    results = await asyncio.gather(*pending, return_exceptions=True)
    errors.extend(result for result in results if isinstance(result, BaseException))

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise DisposalError(errors)
