"""
Backend Auth Client.

Thin client for the managed backend's auth endpoints (GoTrue). Besides the
plain request/response calls it keeps a listener list and notifies every
subscriber of auth-state changes, mirroring the provider SDK's
`onAuthStateChange` contract:

    INITIAL_SESSION   - session restored (or absent) when a browser session starts
    SIGNED_IN         - password sign-in or sign-up that returned a session
    SIGNED_OUT        - sign-out, or a refresh that failed
    TOKEN_REFRESHED   - access token exchanged for a new one

Listeners are awaited in subscription order inside the call that raised the
event, so state derived from an event is in place when the call returns.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from core.backend.result import Err, ErrorKind, Ok, Result

if TYPE_CHECKING:
    from core.backend.service import BackendService

logger = logging.getLogger(__name__)

# Tokens this close to expiry are treated as expired
EXPIRY_LEEWAY_SECONDS = 10.0


class AuthEvent(str, Enum):
    """Auth-state change notifications."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Identity:
    """Opaque user record owned by the auth provider."""

    id: str
    email: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Optional["Identity"]:
        user_id = payload.get("id")
        if not user_id:
            return None
        return cls(id=str(user_id), email=payload.get("email") or "")


@dataclass(frozen=True)
class AuthSession:
    """Tokens issued by the auth provider for one signed-in identity."""

    access_token: str
    refresh_token: str
    expires_at: float
    identity: Identity

    def is_expired(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current >= self.expires_at - EXPIRY_LEEWAY_SECONDS

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Optional["AuthSession"]:
        """Parse a token response; returns None when it carries no session."""
        access_token = payload.get("access_token")
        identity = Identity.from_payload(payload.get("user") or {})
        if not access_token or identity is None:
            return None

        expires_at = payload.get("expires_at")
        if expires_at is None:
            expires_at = time.time() + float(payload.get("expires_in") or 3600)

        return cls(
            access_token=access_token,
            refresh_token=payload.get("refresh_token") or "",
            expires_at=float(expires_at),
            identity=identity,
        )


@dataclass(frozen=True)
class SignUpResult:
    """
    Outcome of a registration.

    `session` is None when the provider requires email confirmation first.
    """

    identity: Identity | None
    session: AuthSession | None


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], Awaitable[None]]


class Subscription:
    """Handle returned by `on_auth_state_change`; call `unsubscribe()` when done."""

    def __init__(self, listeners: list[AuthListener], listener: AuthListener) -> None:
        self._listeners = listeners
        self._listener = listener

    def unsubscribe(self) -> None:
        if self._listener in self._listeners:
            self._listeners.remove(self._listener)


class BackendAuthClient:
    """
    Auth API client bound to one BackendService.

    Args:
        service: The gateway used to send requests.
    """

    def __init__(self, service: "BackendService") -> None:
        self._service = service
        self._listeners: list[AuthListener] = []

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self._listeners, listener)

    async def _notify(self, event: AuthEvent, session: AuthSession | None) -> None:
        logger.debug(f"Auth event {event} ({len(self._listeners)} listener(s))")
        for listener in list(self._listeners):
            try:
                await listener(event, session)
            except Exception as e:
                logger.exception(f"Auth listener failed while handling {event}: {e}")

    # =========================================================================
    # Provider calls
    # =========================================================================

    async def initialize(self, session: AuthSession | None = None) -> None:
        """Announce the session a browser starts with (None when anonymous)."""
        await self._notify(AuthEvent.INITIAL_SESSION, session)

    async def sign_in_with_password(self, email: str, password: str) -> Result[AuthSession]:
        result = await self._service.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            error_kind=ErrorKind.AUTH,
        )
        if isinstance(result, Err):
            return result

        session = AuthSession.from_payload(result.value or {})
        if session is None:
            return Err(ErrorKind.AUTH, "Sign-in response did not include a session.")

        await self._notify(AuthEvent.SIGNED_IN, session)
        return Ok(session)

    async def sign_up(self, email: str, password: str) -> Result[SignUpResult]:
        result = await self._service.request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password},
            error_kind=ErrorKind.AUTH,
        )
        if isinstance(result, Err):
            return result

        payload = result.value or {}
        session = AuthSession.from_payload(payload)
        if session is not None:
            await self._notify(AuthEvent.SIGNED_IN, session)
            return Ok(SignUpResult(identity=session.identity, session=session))

        # Confirmation pending: the provider returns the user object alone,
        # either at the top level or under "user".
        identity = Identity.from_payload(payload.get("user") or payload)
        return Ok(SignUpResult(identity=identity, session=None))

    async def sign_out(self, session: AuthSession | None) -> Result[None]:
        """Revoke the session remotely. SIGNED_OUT is emitted only on success."""
        if session is None:
            await self._notify(AuthEvent.SIGNED_OUT, None)
            return Ok(None)

        result = await self._service.request(
            "POST",
            "/auth/v1/logout",
            headers={"Authorization": f"Bearer {session.access_token}"},
            error_kind=ErrorKind.AUTH,
        )
        if isinstance(result, Err):
            return result

        await self._notify(AuthEvent.SIGNED_OUT, None)
        return Ok(None)

    async def refresh_session(self, session: AuthSession) -> Result[AuthSession]:
        result = await self._service.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": session.refresh_token},
            error_kind=ErrorKind.AUTH,
        )
        refreshed = None if isinstance(result, Err) else AuthSession.from_payload(result.value or {})

        if refreshed is None:
            logger.warning("Token refresh failed; treating session as signed out")
            await self._notify(AuthEvent.SIGNED_OUT, None)
            if isinstance(result, Err):
                return result
            return Err(ErrorKind.AUTH, "Refresh response did not include a session.")

        await self._notify(AuthEvent.TOKEN_REFRESHED, refreshed)
        return Ok(refreshed)

    async def get_user(self, access_token: str) -> Result[Identity]:
        result = await self._service.request(
            "GET",
            "/auth/v1/user",
            headers={"Authorization": f"Bearer {access_token}"},
            error_kind=ErrorKind.AUTH,
        )
        if isinstance(result, Err):
            return result

        identity = Identity.from_payload(result.value or {})
        if identity is None:
            return Err(ErrorKind.AUTH, "User response did not include an id.")
        return Ok(identity)
