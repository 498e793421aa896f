"""
Core Authentication Router.

Login page and the sign-in / sign-up / sign-out form posts shared by every
module. Successful posts redirect (303) to the role's landing page, which
re-reads the session on arrival.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Form, Request, status
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from core.backend import Err
from core.dependencies import AuthControllerDep, SessionDep, TemplatesDep
from core.services.auth import REGISTRATION_PENDING_MESSAGE
from core.session import (
    LOGIN_PATH,
    UNAUTHORIZED_PATH,
    SessionState,
    dashboard_path_for,
    home_target,
)
from core.templating import guard_response, page_context, redirect

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Authentication"])

LOGIN_SUCCESS_MESSAGE = "Login successful!"
LOGOUT_SUCCESS_MESSAGE = "Logged out successfully!"
LOGOUT_FAILED_MESSAGE = "Failed to log out."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def _render_login(
    request: Request,
    templates: Jinja2Templates,
    session: SessionState,
    *,
    error: str | None = None,
    email: str = "",
    mode: str = "login",
    status_code: int = status.HTTP_200_OK,
) -> Response:
    return templates.TemplateResponse(
        request,
        "login.html",
        page_context(request, session, error=error, email=email, mode=mode),
        status_code=status_code,
    )


# =============================================================================
# Pages
# =============================================================================

@router.get(LOGIN_PATH, response_class=HTMLResponse)
async def home(request: Request, session: SessionDep, templates: TemplatesDep) -> Response:
    """Login page for anonymous browsers; signed-in users go to their dashboard."""
    decision = home_target(session)
    response = guard_response(request, decision, session)
    if response is not None:
        return response
    return _render_login(request, templates, session, mode=request.query_params.get("mode", "login"))


@router.get(UNAUTHORIZED_PATH, response_class=HTMLResponse)
async def unauthorized(request: Request, session: SessionDep, templates: TemplatesDep) -> Response:
    return templates.TemplateResponse(
        request,
        "unauthorized.html",
        page_context(request, session),
        status_code=status.HTTP_403_FORBIDDEN,
    )


# =============================================================================
# Form posts
# =============================================================================

@router.post("/auth/login", response_class=HTMLResponse)
async def login(
    request: Request,
    controller: AuthControllerDep,
    templates: TemplatesDep,
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
) -> Response:
    email = email.strip()
    result = await controller.sign_in(email, password)

    if isinstance(result, Err):
        return _render_login(
            request,
            templates,
            controller.state,
            error=result.message or UNEXPECTED_ERROR_MESSAGE,
            email=email,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    session = result.value
    request.state.session_key = controller.session_key
    request.app.state.session_store.flash(controller.session_key, LOGIN_SUCCESS_MESSAGE)
    return redirect(dashboard_path_for(session.role))


@router.post("/auth/signup", response_class=HTMLResponse)
async def signup(
    request: Request,
    controller: AuthControllerDep,
    templates: TemplatesDep,
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
) -> Response:
    email = email.strip()
    result = await controller.sign_up(email, password)

    if isinstance(result, Err):
        return _render_login(
            request,
            templates,
            controller.state,
            error=result.message or UNEXPECTED_ERROR_MESSAGE,
            email=email,
            mode="signup",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    session = result.value
    request.state.session_key = controller.session_key
    request.app.state.session_store.flash(controller.session_key, REGISTRATION_PENDING_MESSAGE)
    if session.is_authenticated:
        return redirect(dashboard_path_for(session.role))
    return redirect(LOGIN_PATH)


@router.post("/auth/logout")
async def logout(request: Request, controller: AuthControllerDep) -> Response:
    result = await controller.sign_out()
    store = request.app.state.session_store
    if isinstance(result, Err):
        store.flash(controller.session_key, result.message or LOGOUT_FAILED_MESSAGE, is_error=True)
    else:
        store.flash(controller.session_key, LOGOUT_SUCCESS_MESSAGE)
    return redirect(LOGIN_PATH)


# =============================================================================
# JSON
# =============================================================================

@router.get("/auth/session")
async def session_info(session: SessionDep) -> dict:
    """Public view of the current session (never includes tokens)."""
    return session.to_dict()
