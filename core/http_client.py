"""
HTTP Client Lifecycle Management.

One `httpx.AsyncClient` is shared by every request to the managed backend.
Its lifecycle is bound to the application lifespan; scripts create their own
short-lived client instead.

Usage:
    # In main.py lifespan:
    async with create_http_client_context(app, timeout=config.get("backend.timeout")):
        yield

    # In FastAPI routes (via dependency injection):
    async def handler(http_client: HttpClientDep): ...

    # In scripts:
    async with create_standalone_http_client() as client:
        backend = BackendService(http_client=client)
        await backend.table("employees").select("*").execute()

Both factories accept an optional `transport`, which tests use to plug an
`httpx.MockTransport` in place of the network.
"""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, Optional

import httpx

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


class HttpClientManager:
    """
    Manages the lifecycle of the shared httpx.AsyncClient.

    Args:
        timeout: Default timeout for requests in seconds.
        max_connections: Maximum number of concurrent connections.
        max_keepalive_connections: Maximum keep-alive connections.
        transport: Optional transport override (tests).
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_connections: int = 100,
        max_keepalive_connections: int = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> httpx.AsyncClient:
        """
        Create and start the HTTP client.

        Raises:
            RuntimeError: If client is already started.
        """
        if self._client is not None:
            raise RuntimeError("HTTP client already started")

        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            limits=self._limits,
            transport=self._transport,
        )
        logger.info(
            f"HTTP client started (timeout={self._timeout}s, "
            f"max_connections={self._limits.max_connections})"
        )
        return self._client

    async def stop(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP client closed")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "HTTP client not started. Ensure lifespan context is properly configured."
            )
        return self._client

    @property
    def is_running(self) -> bool:
        return self._client is not None and not self._client.is_closed


@asynccontextmanager
async def create_http_client_context(
    app: "FastAPI",
    timeout: float = 30.0,
    max_connections: int = 100,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncGenerator[HttpClientManager, None]:
    """
    Bind the shared client to a FastAPI lifespan and publish it on `app.state`.

    Yields:
        HttpClientManager instance.
    """
    manager = HttpClientManager(
        timeout=timeout,
        max_connections=max_connections,
        transport=transport,
    )

    try:
        client = await manager.start()
        app.state.http_client = client
        app.state.http_client_manager = manager
        yield manager
    finally:
        await manager.stop()
        if hasattr(app.state, "http_client"):
            delattr(app.state, "http_client")
        if hasattr(app.state, "http_client_manager"):
            delattr(app.state, "http_client_manager")


@asynccontextmanager
async def create_standalone_http_client(
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Short-lived client for code running outside the web app."""
    client = httpx.AsyncClient(timeout=timeout, transport=transport)
    logger.debug(f"Standalone HTTP client created (timeout={timeout}s)")

    try:
        yield client
    finally:
        await client.aclose()
        logger.debug("Standalone HTTP client closed")


def get_http_client_from_app(app: "FastAPI") -> httpx.AsyncClient:
    """
    Get HTTP client from FastAPI app state.

    Raises:
        RuntimeError: If HTTP client is not configured.
    """
    if not hasattr(app.state, "http_client"):
        raise RuntimeError(
            "HTTP client not available. Ensure lifespan context is properly configured."
        )
    return app.state.http_client
