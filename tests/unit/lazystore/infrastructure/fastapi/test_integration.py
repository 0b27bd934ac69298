"""Unit tests for FastAPI integration."""

import asyncio
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from starlette.datastructures import State
from starlette.responses import Response

from lazystore.application.container import Store, define_store
from lazystore.domain.exceptions import UnknownBindingError
from lazystore.infrastructure.fastapi_integration.integration import (
    StoreMiddleware,
    create_request_dependency,
    create_store_dependency,
)


def make_request():
    request = Mock(spec=Request)
    request.state = State()
    return request


class Tracker:
    def __init__(self):
        self.closed = 0

    async def aclose(self):
        self.closed += 1


class TestCreateStoreDependency:
    """Test cases for create_store_dependency function."""

    def test_creates_dependency_function(self):
        """Test that create_store_dependency returns a callable."""
        store = define_store().add("service", lambda s: object()).finalize()

        assert callable(create_store_dependency(store, "service"))

    @pytest.mark.asyncio
    async def test_dependency_function_resolves_from_store(self):
        """Test that the dependency function resolves from the store."""
        store = define_store().add("service", lambda s: {"value": "test"}).finalize()

        dependency_func = create_store_dependency(store, "service")

        assert await dependency_func() == {"value": "test"}

    @pytest.mark.asyncio
    async def test_dependency_function_returns_singleton_instance(self):
        """Test that singleton bindings return the same instance."""
        store = define_store().add("service", lambda s: object()).finalize()
        dependency_func = create_store_dependency(store, "service")

        assert await dependency_func() is await dependency_func()

    @pytest.mark.asyncio
    async def test_dependency_function_returns_new_transient_instances(self):
        """Test that transient bindings return different instances."""
        store = define_store().add_transient("service", lambda s: object()).finalize()
        dependency_func = create_store_dependency(store, "service")

        assert await dependency_func() is not await dependency_func()

    @pytest.mark.asyncio
    async def test_dependency_function_awaits_async_factories(self):
        """Test that values of async factories are awaited."""

        async def build(store):
            await asyncio.sleep(0)
            return "connected"

        store = define_store().add("db", build).finalize()
        dependency_func = create_store_dependency(store, "db")

        assert await dependency_func() == "connected"
        assert await dependency_func() == "connected"

    @pytest.mark.asyncio
    async def test_dependency_function_propagates_unknown_binding(self):
        """Test that resolving an unbound name raises UnknownBindingError."""
        dependency_func = create_store_dependency(define_store().finalize(), "missing")

        with pytest.raises(UnknownBindingError):
            await dependency_func()


class TestCreateRequestDependency:
    """Test cases for create_request_dependency function."""

    @pytest.mark.asyncio
    async def test_resolves_from_request_store(self):
        """Test that the dependency resolves from request.state.store."""
        request = make_request()
        request.state.store = define_store().add("ctx", lambda s: {"id": 1}).finalize()

        dependency_func = create_request_dependency("ctx")

        assert await dependency_func(request) == {"id": 1}

    @pytest.mark.asyncio
    async def test_missing_store_raises(self):
        """Test that a request without a store raises RuntimeError."""
        dependency_func = create_request_dependency("ctx")

        with pytest.raises(RuntimeError, match="Did you forget to add StoreMiddleware"):
            await dependency_func(make_request())


class TestStoreMiddleware:
    """Test cases for StoreMiddleware."""

    def test_middleware_initialization(self):
        """Test that middleware initializes correctly."""
        app = FastAPI()
        definition = define_store()

        middleware = StoreMiddleware(app, definition)

        assert middleware.definition is definition
        assert middleware.app is app

    @pytest.mark.asyncio
    async def test_middleware_creates_request_store(self):
        """Test that middleware exposes a request store during the request."""
        app_store = define_store().add("config", lambda s: "shared").finalize()
        middleware = StoreMiddleware(FastAPI(), app_store.create_child())
        request = make_request()

        async def mock_call_next(req):
            assert isinstance(req.state.store, Store)
            assert req.state.store.parent is app_store
            assert req.state.store.get("config") == "shared"
            return Response("OK", status_code=200)

        response = await middleware.dispatch(request, mock_call_next)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_each_request_gets_own_store(self):
        """Test that request-scoped values are not shared between requests."""
        definition = define_store().add("ctx", lambda s: object())
        middleware = StoreMiddleware(FastAPI(), definition)
        seen = []

        async def mock_call_next(req):
            seen.append(req.state.store.get("ctx"))
            return Response("OK")

        await middleware.dispatch(make_request(), mock_call_next)
        await middleware.dispatch(make_request(), mock_call_next)

        assert seen[0] is not seen[1]

    @pytest.mark.asyncio
    async def test_middleware_disposes_after_request(self):
        """Test that the request store is disposed asynchronously after the request."""
        tracker = Tracker()
        middleware = StoreMiddleware(FastAPI(), define_store().add("tracker", lambda s: tracker))

        async def mock_call_next(req):
            req.state.store.get("tracker")
            return Response("OK")

        await middleware.dispatch(make_request(), mock_call_next)

        assert tracker.closed == 1

    @pytest.mark.asyncio
    async def test_middleware_disposes_on_exception(self):
        """Test that the request store is disposed even when the endpoint fails."""
        tracker = Tracker()
        middleware = StoreMiddleware(FastAPI(), define_store().add("tracker", lambda s: tracker))

        async def mock_call_next(req):
            req.state.store.get("tracker")
            raise ValueError("Test error")

        with pytest.raises(ValueError):
            await middleware.dispatch(make_request(), mock_call_next)

        assert tracker.closed == 1

    @pytest.mark.asyncio
    async def test_middleware_leaves_parent_values(self):
        """Test that disposing the request store leaves application values alone."""
        shared = Tracker()
        app_store = define_store().add("shared", lambda s: shared).finalize()
        middleware = StoreMiddleware(FastAPI(), app_store.create_child())

        async def mock_call_next(req):
            req.state.store.get("shared")
            return Response("OK")

        await middleware.dispatch(make_request(), mock_call_next)

        assert shared.closed == 0

    @pytest.mark.asyncio
    async def test_middleware_passes_response_through(self):
        """Test that middleware passes response through unchanged."""
        middleware = StoreMiddleware(FastAPI(), define_store())
        expected_response = Response("Custom Response", status_code=201)

        async def mock_call_next(req):
            return expected_response

        response = await middleware.dispatch(make_request(), mock_call_next)

        assert response is expected_response
        assert response.status_code == 201
