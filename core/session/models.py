"""
Session state models.

`SessionState` is the immutable snapshot of who a browser is. The Auth
Controller builds a new value on every auth event and stores it; nothing
else writes to the store, and nothing mutates a stored value.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.backend.auth_client import AuthSession, Identity

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Authorization role stored on the employee record."""

    EMPLOYEE = "employee"
    HR_ADMIN = "hr_admin"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Role":
        """
        Map a stored role value to a Role.

        Missing values mean the record predates roles and get the default;
        anything unrecognised becomes UNKNOWN so callers must handle it.
        """
        if raw is None or raw == "":
            return DEFAULT_ROLE
        for role in (cls.EMPLOYEE, cls.HR_ADMIN):
            if raw == role.value:
                return role
        logger.warning(f"Unrecognised role value {raw!r}; treating as unknown")
        return cls.UNKNOWN


DEFAULT_ROLE = Role.EMPLOYEE


class SessionStatus(str, Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionState:
    """
    Per-browser session snapshot.

    Attributes:
        loading: True until the first auth resolution completes.
        auth: Provider tokens and identity, None when anonymous.
        role: Resolved role; always set once authenticated and not loading.
        employee: The employee record found or provisioned for the identity.
    """

    loading: bool = True
    auth: Optional[AuthSession] = None
    role: Optional[Role] = None
    employee: Optional[dict[str, Any]] = None

    def __post_init__(self) -> None:
        if self.auth is not None and not self.loading and self.role is None:
            raise ValueError("An authenticated session must carry a role")

    @property
    def identity(self) -> Optional[Identity]:
        return self.auth.identity if self.auth else None

    @property
    def is_authenticated(self) -> bool:
        return self.auth is not None

    @property
    def status(self) -> SessionStatus:
        if self.loading:
            return SessionStatus.LOADING
        if self.auth is None:
            return SessionStatus.ANONYMOUS
        return SessionStatus.AUTHENTICATED

    @classmethod
    def initial(cls) -> "SessionState":
        return cls(loading=True)

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls(loading=False)

    @classmethod
    def authenticated(
        cls,
        auth: AuthSession,
        role: Role,
        employee: Optional[dict[str, Any]] = None,
    ) -> "SessionState":
        return cls(loading=False, auth=auth, role=role, employee=employee)

    def to_dict(self) -> dict[str, Any]:
        """Public view of the session (no tokens)."""
        identity = self.identity
        return {
            "status": self.status.value,
            "loading": self.loading,
            "user": {"id": identity.id, "email": identity.email} if identity else None,
            "role": self.role.value if self.role else None,
        }
