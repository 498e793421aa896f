"""
Unit Tests for core.http_client module.

Tests the shared client lifecycle and its FastAPI app-state binding.
"""

import httpx
import pytest
from fastapi import FastAPI

from core.http_client import (
    HttpClientManager,
    create_http_client_context,
    create_standalone_http_client,
    get_http_client_from_app,
)


def _ok_transport() -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(200, json={"path": request.url.path}))


class TestHttpClientManager:
    """Tests for HttpClientManager."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        manager = HttpClientManager(timeout=5.0, transport=_ok_transport())

        client = await manager.start()

        assert manager.is_running is True
        assert manager.client is client
        await manager.stop()
        assert manager.is_running is False

    @pytest.mark.asyncio
    async def test_start_twice_raises(self):
        manager = HttpClientManager(transport=_ok_transport())
        await manager.start()

        with pytest.raises(RuntimeError):
            await manager.start()

        await manager.stop()

    def test_client_before_start_raises(self):
        with pytest.raises(RuntimeError):
            HttpClientManager().client


class TestAppBinding:
    """Tests for the lifespan helpers."""

    @pytest.mark.asyncio
    async def test_context_publishes_and_removes_client(self):
        app = FastAPI()

        async with create_http_client_context(app, transport=_ok_transport()) as manager:
            client = get_http_client_from_app(app)
            assert client is manager.client
            response = await client.get("https://backend.test/auth/v1/health")
            assert response.json() == {"path": "/auth/v1/health"}

        assert not hasattr(app.state, "http_client")
        with pytest.raises(RuntimeError):
            get_http_client_from_app(app)

    @pytest.mark.asyncio
    async def test_standalone_client_is_closed_on_exit(self):
        async with create_standalone_http_client(transport=_ok_transport()) as client:
            assert client.is_closed is False

        assert client.is_closed is True
