"""
FastAPI Dependencies - Dependency Injection for API Routers.

Provides `Annotated[Service, Depends(get_service)]` patterns for
clean dependency injection in FastAPI route handlers.

Usage:
    from core.dependencies import SessionDep, UserBackendDep, require_roles

    @router.get("/leave-requests", dependencies=[Depends(require_roles(Role.HR_ADMIN))])
    async def list_requests(session: SessionDep, backend: UserBackendDep):
        ...

Every request that needs the session goes through `get_auth_controller`,
which resolves a brand-new browser session (INITIAL_SESSION) or refreshes an
expired access token (TOKEN_REFRESHED / SIGNED_OUT) before the handler runs.
"""

from collections.abc import AsyncGenerator
from typing import Annotated, Callable

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.templating import Jinja2Templates

from core.app_context import ConfigLoader
from core.backend import BackendService
from core.http_client import get_http_client_from_app
from core.services.auth import AuthController
from core.session import (
    LOGIN_PATH,
    GuardOutcome,
    Role,
    SessionState,
    SessionStore,
    authorize,
)


# =============================================================================
# Configuration Dependencies
# =============================================================================

def get_config(request: Request) -> ConfigLoader:
    """FastAPI dependency for the application configuration."""
    return request.app.state.context.config


ConfigDep = Annotated[ConfigLoader, Depends(get_config)]


# =============================================================================
# HTTP Client / Backend Dependencies
# =============================================================================

def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    FastAPI dependency for the shared HTTP client.

    The client's lifecycle is managed by the application lifespan.
    """
    return get_http_client_from_app(request.app)


HttpClientDep = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def get_backend(config: ConfigDep, http_client: HttpClientDep) -> BackendService:
    """
    FastAPI dependency for the anonymous backend gateway.

    A new (cheap) gateway is built per request around the shared client so
    auth listeners never leak between requests.
    """
    return BackendService(
        http_client=http_client,
        url=config.get("backend.url", ""),
        api_key=config.get("backend.anon_key", ""),
        timeout=config.get("backend.timeout", 30.0),
    )


BackendServiceDep = Annotated[BackendService, Depends(get_backend)]


# =============================================================================
# Session Dependencies
# =============================================================================

def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]


def get_session_key(request: Request) -> str:
    key = getattr(request.state, "session_key", None)
    if not key:
        raise RuntimeError(
            "No session key on request. Ensure the session middleware is installed "
            "(core.server.create_base_app)."
        )
    return key


async def get_auth_controller(
    backend: BackendServiceDep,
    store: SessionStoreDep,
    session_key: Annotated[str, Depends(get_session_key)],
) -> AsyncGenerator[AuthController, None]:
    """
    FastAPI dependency for the browser's Auth Controller.

    Yields:
        AuthController whose state is resolved (never loading).
    """
    controller = AuthController(backend, store, session_key)
    try:
        if controller.state.loading:
            await controller.initialize()
        else:
            await controller.refresh_if_expired()
        yield controller
    finally:
        controller.close()


AuthControllerDep = Annotated[AuthController, Depends(get_auth_controller)]


def get_session(controller: AuthControllerDep) -> SessionState:
    """Current session snapshot (read-only)."""
    return controller.state


SessionDep = Annotated[SessionState, Depends(get_session)]


def get_user_backend(controller: AuthControllerDep) -> BackendService:
    """Gateway authorised with the signed-in user's access token."""
    return controller.gateway_for_session()


UserBackendDep = Annotated[BackendService, Depends(get_user_backend)]


def require_roles(*roles: Role) -> Callable[[SessionState], SessionState]:
    """
    Create a dependency that enforces the route guard on JSON endpoints.

    Raises:
        HTTPException 401: not signed in.
        HTTPException 403: signed in with a role outside `roles`.
        HTTPException 503: session still loading.
    """
    required = frozenset(roles) if roles else None

    def _check(session: SessionDep) -> SessionState:
        decision = authorize(session, required)
        if decision.outcome is GuardOutcome.RENDER:
            return session
        if decision.outcome is GuardOutcome.PLACEHOLDER:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail={"error": "loading", "message": "Session is still loading."},
            )
        if decision.target == LOGIN_PATH:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"error": "unauthenticated", "message": "Please log in."},
            )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "forbidden", "message": "You are not authorized to view this page."},
        )

    return _check


# =============================================================================
# Templates
# =============================================================================

def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


TemplatesDep = Annotated[Jinja2Templates, Depends(get_templates)]
