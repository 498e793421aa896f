"""
Server-rendered pages.

One Jinja2Templates environment searches the framework templates (layout,
login, unauthorized) plus every directory contributed by a module, so module
templates can extend "base.html".
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from fastapi import Request, status
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from jinja2 import ChoiceLoader, FileSystemLoader

from core.session import GuardDecision, GuardOutcome, SessionState

logger = logging.getLogger(__name__)

CORE_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def create_templates(extra_dirs: Iterable[Path] = ()) -> Jinja2Templates:
    """Build the template environment (module dirs take precedence over core)."""
    search_path = [str(d) for d in extra_dirs] + [str(CORE_TEMPLATES_DIR)]
    templates = Jinja2Templates(directory=str(CORE_TEMPLATES_DIR))
    templates.env.loader = ChoiceLoader([FileSystemLoader(path) for path in search_path])
    logger.debug(f"Template search path: {search_path}")
    return templates


def redirect(target: str) -> RedirectResponse:
    """POST-redirect-GET style redirect."""
    return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)


def page_context(request: Request, session: SessionState, **extra: Any) -> dict[str, Any]:
    """
    Common template variables: the session and any queued flash messages.

    Flash messages are consumed here, so each one is shown exactly once.
    """
    store = request.app.state.session_store
    key = getattr(request.state, "session_key", None)
    context = {
        "session": session,
        "identity": session.identity,
        "role": session.role.value if session.role else None,
        "flashes": store.pop_flashes(key),
        "app_title": request.app.title,
    }
    context.update(extra)
    return context


def guard_response(
    request: Request,
    decision: GuardDecision,
    session: SessionState,
) -> Optional[Response]:
    """
    Turn a non-RENDER guard decision into a response.

    Returns:
        A redirect or the loading placeholder, or None when the page may render.
    """
    if decision.outcome is GuardOutcome.RENDER:
        return None
    if decision.outcome is GuardOutcome.REDIRECT:
        return redirect(decision.target)

    templates: Jinja2Templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "loading.html",
        page_context(request, session),
    )
