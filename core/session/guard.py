"""
Route Guard.

Pure authorization decisions for page navigation. Evaluated on every
request; never touches the network or the session store.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Optional

from core.session.models import Role, SessionState

LOGIN_PATH = "/"
UNAUTHORIZED_PATH = "/unauthorized"
EMPLOYEE_DASHBOARD_PATH = "/employee-dashboard"
HR_ADMIN_DASHBOARD_PATH = "/hr-admin-dashboard"


class GuardOutcome(str, Enum):
    RENDER = "render"
    PLACEHOLDER = "placeholder"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    target: Optional[str] = None

    @classmethod
    def render(cls) -> "GuardDecision":
        return cls(GuardOutcome.RENDER)

    @classmethod
    def placeholder(cls) -> "GuardDecision":
        return cls(GuardOutcome.PLACEHOLDER)

    @classmethod
    def redirect(cls, target: str) -> "GuardDecision":
        return cls(GuardOutcome.REDIRECT, target)


# Roles allowed on each protected page; pages not listed only need a session.
ROUTE_ROLES = MappingProxyType({
    EMPLOYEE_DASHBOARD_PATH: frozenset({Role.EMPLOYEE, Role.HR_ADMIN}),
    HR_ADMIN_DASHBOARD_PATH: frozenset({Role.HR_ADMIN}),
})


def authorize(
    session: SessionState,
    required_roles: Optional[Iterable[Role]] = None,
) -> GuardDecision:
    """
    Decide what a navigation to a protected page should do.

    Args:
        session: Current session snapshot.
        required_roles: Roles allowed on the page; None means any signed-in user.

    Returns:
        PLACEHOLDER while loading, REDIRECT to login when anonymous, REDIRECT
        to /unauthorized when the role is outside `required_roles`, else RENDER.
    """
    if session.loading:
        return GuardDecision.placeholder()
    if not session.is_authenticated:
        return GuardDecision.redirect(LOGIN_PATH)
    if required_roles is not None and session.role not in frozenset(required_roles):
        return GuardDecision.redirect(UNAUTHORIZED_PATH)
    return GuardDecision.render()


def dashboard_path_for(role: Role) -> str:
    """Landing page for a role."""
    if role is Role.HR_ADMIN:
        return HR_ADMIN_DASHBOARD_PATH
    if role is Role.EMPLOYEE:
        return EMPLOYEE_DASHBOARD_PATH
    if role is Role.UNKNOWN:
        return UNAUTHORIZED_PATH
    raise ValueError(f"Unhandled role: {role!r}")


def home_target(session: SessionState) -> GuardDecision:
    """Decision for `/`: the login page, or a redirect to the role's dashboard."""
    if session.loading:
        return GuardDecision.placeholder()
    if not session.is_authenticated:
        return GuardDecision.render()
    return GuardDecision.redirect(dashboard_path_for(session.role))
