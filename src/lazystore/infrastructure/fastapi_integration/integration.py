import inspect
import logging
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from lazystore.application import StoreDefinition
from lazystore.domain import IStore

logger = logging.getLogger(__name__)


async def _resolve(store: IStore, name: str) -> Any:
    value = store.get(name)
    if inspect.isawaitable(value):
        value = await value
    return value


def create_store_dependency(store: IStore, name: str) -> Callable[[], Awaitable[Any]]:
    """Create a FastAPI Depends() callable that resolves a name from a store.

    Values produced by asynchronous factories are awaited before they reach
    the endpoint. Lifetime follows the binding (singleton or transient).

    Args:
        store: The store to resolve from.
        name: The binding name to resolve when the dependency is called.

    Returns:
        A coroutine function that FastAPI can use with Depends().

    Example:
        >>> store = define_store().add("users", lambda s: UserRepository()).finalize()
        >>>
        >>> get_users = create_store_dependency(store, "users")
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_users)):
        ...     return await repo.get_all()
    """

    async def dependency() -> Any:
        """Resolve the binding from the store."""
        return await _resolve(store, name)

    return dependency


def create_request_dependency(name: str) -> Callable[[Request], Awaitable[Any]]:
    """Create a FastAPI dependency that resolves from the request's store.

    Requires the StoreMiddleware to be installed.

    Args:
        name: The binding name to resolve from the request store.

    Returns:
        A coroutine function that resolves from the request store.

    Example:
        >>> app.add_middleware(StoreMiddleware, definition=request_definition)
        >>>
        >>> get_request_context = create_request_dependency("request_context")
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    async def request_dependency(request: Request) -> Any:
        """Resolve from the request's store."""
        store = getattr(request.state, "store", None)
        if store is None:
            raise RuntimeError("Request does not have a store. Did you forget to add StoreMiddleware?")
        return await _resolve(store, name)

    return request_dependency


class StoreMiddleware(BaseHTTPMiddleware):
    """Middleware that finalizes a request store for each request.

    The definition is usually a child of the application store, so request
    stores share application singletons while owning their request-scoped
    values. The request store is available as `request.state.store` and is
    disposed asynchronously once the request has been handled.

    Attributes:
        definition: The definition finalized once per request.

    Example:
        >>> app_store = define_store().add("db", lambda s: Database()).finalize()
        >>> request_definition = app_store.create_child().add(
        ...     "unit_of_work", lambda s: UnitOfWork(s.get("db"))
        ... )
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(StoreMiddleware, definition=request_definition)
    """

    def __init__(self, app: FastAPI, definition: StoreDefinition):
        """Initialize the middleware with the per-request definition.

        Args:
            app: The FastAPI/Starlette application.
            definition: The definition to finalize for every request.
        """
        super().__init__(app)
        self.definition = definition

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a request store, execute the endpoint and dispose the store.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        store = self.definition.finalize()
        request.state.store = store

        try:
            response = await call_next(request)
            return response
        finally:
            logger.debug("Disposing request store for %s", request.url.path)
            await store.aclose()
