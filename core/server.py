"""
FastAPI Application Factory.

Creates and configures the FastAPI application with middleware (CORS,
security headers, browser session cookie) and the core routes.
"""

from typing import TYPE_CHECKING, Iterable
from pathlib import Path
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from core.app_context import AppContext
from core.session import LOGIN_PATH, SessionStore
from core.templating import create_templates

if TYPE_CHECKING:
    from core.registry import ModuleRegistry

_logger = logging.getLogger(__name__)

# Requests to these paths never open a browser session
SESSIONLESS_PATHS = frozenset({"/health", "/favicon.ico"})


def create_base_app(
    context: AppContext,
    registry: "ModuleRegistry | None" = None,
    title: str = "HR Portal",
    description: str = "Leave requests, balances and HR approvals",
    version: str = "1.0.0",
    template_dirs: Iterable[Path] = (),
    session_store: SessionStore | None = None,
) -> FastAPI:
    """
    Create and configure the base FastAPI application.

    Args:
        context: Application context for logging and configuration.
        registry: Optional module registry.
        title: API title for OpenAPI documentation.
        description: API description for OpenAPI documentation.
        version: API version string.
        template_dirs: Extra template directories (module templates).
        session_store: Store for browser sessions (a new one by default).

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(title=title, description=description, version=version)

    # Store references in app state for access in route handlers
    app.state.context = context
    app.state.registry = registry
    app.state.session_store = session_store or SessionStore()
    app.state.templates = create_templates(template_dirs)

    config = context.config
    base_url = config.get("server.base_url", "")
    is_debug = config.get("app.debug", False)

    allowed_origins: list[str] = []

    if base_url:
        allowed_origins.append(base_url)

    # In debug mode, also allow localhost for development
    if is_debug:
        allowed_origins.extend([
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        ])

    if not allowed_origins:
        _logger.warning(
            "BASE_URL not configured and not in debug mode. "
            "CORS will reject all cross-origin requests."
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    cookie_name = config.get("session.cookie_name", "hr_session")
    cookie_secure = config.get("session.cookie_secure", False)

    # Bind every browser to a server-side session
    @app.middleware("http")
    async def bind_browser_session(request: Request, call_next):
        if request.url.path in SESSIONLESS_PATHS:
            return await call_next(request)

        store: SessionStore = request.app.state.session_store
        incoming = request.cookies.get(cookie_name)
        key, _, _ = store.open(incoming)
        request.state.session_key = key

        response = await call_next(request)

        # Handlers may move the session to a new key (sign-in)
        key = request.state.session_key
        if key in store:
            if key != incoming:
                response.set_cookie(
                    cookie_name,
                    key,
                    httponly=True,
                    samesite="lax",
                    secure=cookie_secure,
                )
        elif incoming:
            response.delete_cookie(cookie_name, httponly=True, samesite="lax", secure=cookie_secure)
        return response

    # Add security headers middleware
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        # Pages show per-user data
        response.headers.setdefault("Cache-Control", "no-store")
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    _register_core_routes(app)

    return app


def _register_core_routes(app: FastAPI) -> None:
    """Register core routes (login/logout pages, health check)."""
    from core.api.auth import router as auth_router

    app.include_router(auth_router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": app.title}


def register_fallback_route(app: FastAPI) -> None:
    """
    Redirect every unknown GET path to the login page.

    Must be registered after all other routers; routes match in order.
    """

    @app.get("/{path:path}", include_in_schema=False)
    async def fallback(path: str) -> RedirectResponse:
        _logger.debug(f"Unknown path /{path}; redirecting to {LOGIN_PATH}")
        return RedirectResponse(url=LOGIN_PATH, status_code=307)


def set_registry(app: FastAPI, registry: "ModuleRegistry") -> None:
    """
    Set the module registry on the app.

    Args:
        app: FastAPI application instance.
        registry: Module registry instance.
    """
    app.state.registry = registry
