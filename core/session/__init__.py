"""Browser session state, storage and route guard."""

from core.session.guard import (
    EMPLOYEE_DASHBOARD_PATH,
    HR_ADMIN_DASHBOARD_PATH,
    LOGIN_PATH,
    ROUTE_ROLES,
    UNAUTHORIZED_PATH,
    GuardDecision,
    GuardOutcome,
    authorize,
    dashboard_path_for,
    home_target,
)
from core.session.models import DEFAULT_ROLE, Role, SessionState, SessionStatus
from core.session.store import FlashMessage, SessionStore

__all__ = [
    "Role",
    "DEFAULT_ROLE",
    "SessionState",
    "SessionStatus",
    "SessionStore",
    "FlashMessage",
    "GuardDecision",
    "GuardOutcome",
    "authorize",
    "home_target",
    "dashboard_path_for",
    "ROUTE_ROLES",
    "LOGIN_PATH",
    "UNAUTHORIZED_PATH",
    "EMPLOYEE_DASHBOARD_PATH",
    "HR_ADMIN_DASHBOARD_PATH",
]
