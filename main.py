"""
HR Portal - Entry Point.

ASGI application for uvicorn execution.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000 --reload

Or run directly:
    python main.py
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

import httpx
import uvicorn
from fastapi import FastAPI

from core.app_context import AppContext
from core.http_client import create_http_client_context
from core.logging_config import parse_log_level, setup_logging
from core.registry import ModuleLoader, ModuleRegistry
from core.server import create_base_app, register_fallback_route
from core.session import SessionStore

# Module directory path
MODULES_DIR = "modules"


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------


def create_app_context() -> AppContext:
    """Create and configure the AppContext."""
    return AppContext()


def create_registry(context: AppContext) -> ModuleRegistry:
    """Create and configure the ModuleRegistry with loaded modules."""
    registry = ModuleRegistry()
    registry.set_context(context)

    # Load modules from /modules directory
    modules_path = Path(__file__).parent / MODULES_DIR
    loader = ModuleLoader(registry)
    count = loader.load_from_directory(str(modules_path))
    context.log_event(f"Loaded {count} module(s) from {MODULES_DIR}/", "LOADER")

    return registry


def create_fastapi_app(
    context: AppContext,
    registry: ModuleRegistry,
    session_store: Optional[SessionStore] = None,
) -> FastAPI:
    """Create the FastAPI application with all routers configured."""
    app = create_base_app(
        context,
        registry,
        template_dirs=registry.get_template_dirs(),
        session_store=session_store,
    )

    registry.mount_routers(app)

    # Catch-all must come last
    register_fallback_route(app)

    return app


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Handles startup and shutdown events.
    Manages the shared HTTP client used by every backend gateway.
    """
    logger = logging.getLogger(__name__)
    context: AppContext = app.state.context
    registry: Optional[ModuleRegistry] = app.state.registry

    # Startup
    logger.info("Starting HR Portal...")

    async with create_http_client_context(
        app,
        timeout=context.config.get("backend.timeout", 30.0),
        max_connections=100,
        transport=getattr(app.state, "http_transport", None),
    ):
        logger.info("HTTP client initialized (stored in app.state for DI)")

        # Call async_startup on all modules (event loop is now running)
        if registry:
            await registry.async_startup_all()
            logger.info("Module async startup completed")

        context.set_server_status(True, context.config.get("server.port", 8000))
        context.log_event("Application started successfully", "SUCCESS")

        yield

        # Shutdown
        logger.info("Shutting down HR Portal...")

        if registry:
            registry.shutdown_all()

        context.set_server_status(False, context.config.get("server.port", 8000))
        logger.info("Cleanup complete")


def create_app(
    context: Optional[AppContext] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    session_store: Optional[SessionStore] = None,
) -> FastAPI:
    """
    Build a complete application (modules loaded, lifespan attached).

    Args:
        context: Application context (loaded from .env by default).
        transport: HTTP transport for the shared client (tests pass a mock).
        session_store: Browser session store (a new one by default).
    """
    context = context or create_app_context()
    registry = create_registry(context)

    app = create_fastapi_app(context, registry, session_store=session_store)
    app.state.http_transport = transport
    app.router.lifespan_context = lifespan
    return app


# -----------------------------------------------------------------------------
# Module-level Application Instance
# -----------------------------------------------------------------------------

# Create core components
_context = create_app_context()

# Setup logging before any module loads
setup_logging(parse_log_level(_context.config.get("app.log_level", "INFO")))

# Export for uvicorn
app = create_app(_context)


# -----------------------------------------------------------------------------
# Direct Execution
# -----------------------------------------------------------------------------


def main() -> None:
    """Run the application directly with uvicorn."""
    host = _context.config.get("server.host", "127.0.0.1")
    port = _context.config.get("server.port", 8000)
    debug = _context.config.get("app.debug", False)

    uvicorn_config = {
        "host": host,
        "port": port,
        "reload": debug,
        "log_level": "warning",  # Suppress uvicorn info logs
        "access_log": False,     # Disable uvicorn access logs
    }

    # If reload is enabled, exclude logs and cache directories
    if debug:
        uvicorn_config["reload_excludes"] = [
            "logs/*",
            "**/__pycache__/*",
            "**/*.pyc",
            ".venv/*",
            "*.log",
        ]

    uvicorn.run("main:app", **uvicorn_config)


if __name__ == "__main__":
    main()
