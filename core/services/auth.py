"""
Core Authentication Controller.

Owns the browser's `SessionState`. It listens to the gateway's auth-state
events and, for every event carrying a session, resolves the identity's role
from the `employees` table, provisioning a record on first sign-in.

Role Resolution:
    1. Select the employee row whose user_id is the identity id
    2. Found: role comes from the row (missing role -> employee)
    3. Not found (PGRST116): insert a default employee row, ignoring a
       concurrent duplicate, then re-read it
    4. Any other failure: fall back to the employee role

The controller is created per request around the request's gateway and
session key; `close()` detaches it from the gateway's listener list. A
successful sign-in moves the session to a new key (`session_key` reports it).
"""

import logging
from datetime import date
from typing import Any, Optional

from core.backend import (
    AuthEvent,
    AuthSession,
    BackendService,
    Err,
    Identity,
    Ok,
    Result,
)
from core.session.models import DEFAULT_ROLE, Role, SessionState
from core.session.store import SessionStore

logger = logging.getLogger(__name__)

EMPLOYEES_TABLE = "employees"

REGISTRATION_PENDING_MESSAGE = (
    "Registration successful! Please check your email to confirm your account and then log in."
)
RECORD_CREATED_MESSAGE = "Employee record created successfully!"


def _capitalize_first(part: str) -> str:
    return part[:1].upper() + part[1:]


def derive_names(email: str) -> tuple[str, str]:
    """
    Derive display names from an email's local part.

    "jane.doe@corp.com" -> ("Jane", "Doe"); "admin@corp.com" -> ("Admin", "User").
    Only the first letter is upper-cased; the rest is kept as typed.
    """
    parts = email.split("@")[0].split(".")
    first = parts[0] if parts else ""
    last = parts[1] if len(parts) > 1 else ""
    return (
        _capitalize_first(first) if first else "New",
        _capitalize_first(last) if last else "User",
    )


def new_employee_row(identity: Identity, today: Optional[date] = None) -> dict[str, Any]:
    first_name, last_name = derive_names(identity.email)
    return {
        "user_id": identity.id,
        "email": identity.email,
        "firstName": first_name,
        "lastName": last_name,
        "hireDate": (today or date.today()).isoformat(),
        "status": "Active",
        "role": Role.EMPLOYEE.value,
    }


class AuthController:
    """
    Session owner for one browser.

    Args:
        gateway: Backend gateway for this request (anonymous key).
        store: Session store shared across requests.
        session_key: The browser's session key.
    """

    def __init__(self, gateway: BackendService, store: SessionStore, session_key: str) -> None:
        self._gateway = gateway
        self._store = store
        self._key = session_key
        self._state: Optional[SessionState] = None
        self._subscription = gateway.auth.on_auth_state_change(self._handle_auth_event)

    @property
    def session_key(self) -> str:
        return self._key

    @property
    def state(self) -> SessionState:
        return self._state or self._store.get(self._key) or SessionState.initial()

    def _commit(self, state: SessionState) -> None:
        self._state = state
        self._store.replace(self._key, state)

    def _rotate_key(self) -> None:
        # A fresh key on every sign-in; a key planted before login is dropped
        self._key = self._store.rotate(self._key)

    async def _handle_auth_event(self, event: AuthEvent, auth: Optional[AuthSession]) -> None:
        logger.info(f"Auth event {event} (session={'yes' if auth else 'no'})")
        if auth is None:
            self._commit(SessionState.anonymous())
            return

        role, employee = await self.resolve_role(auth)
        self._commit(SessionState.authenticated(auth, role, employee))

    # =========================================================================
    # Role resolution
    # =========================================================================

    async def resolve_role(self, auth: AuthSession) -> tuple[Role, Optional[dict[str, Any]]]:
        """Find (or provision) the identity's employee record and read its role."""
        identity = auth.identity
        scoped = self._gateway.with_access_token(auth.access_token)

        result = await (
            scoped.table(EMPLOYEES_TABLE)
            .select("*")
            .eq("user_id", identity.id)
            .single()
            .execute()
        )

        if isinstance(result, Ok):
            record = result.value or {}
            logger.debug(f"Employee record found for {identity.id}")
            return Role.parse(record.get("role")), record

        if not result.is_not_found:
            logger.error(f"Error ensuring employee record: {result.message}")
            self._store.flash(self._key, f"Error: {result.message}", is_error=True)
            return DEFAULT_ROLE, None

        logger.info(f"No employee record for {identity.id}; creating one")
        provisioned = await self.ensure_employee_record(identity, gateway=scoped)
        if isinstance(provisioned, Err):
            self._store.flash(
                self._key, f"Error creating employee record: {provisioned.message}", is_error=True
            )
            return DEFAULT_ROLE, None

        self._store.flash(self._key, RECORD_CREATED_MESSAGE)
        record = provisioned.value
        return Role.parse(record.get("role")), record

    async def ensure_employee_record(
        self,
        identity: Identity,
        gateway: Optional[BackendService] = None,
        today: Optional[date] = None,
    ) -> Result[dict[str, Any]]:
        """
        Create the default employee record for an identity if none exists.

        The insert ignores duplicates on user_id, so two concurrent first
        sign-ins leave one row. When the row already existed nothing is
        returned by the insert and the stored row is read back.
        """
        gateway = gateway or self._gateway
        row = new_employee_row(identity, today)

        inserted = await (
            gateway.table(EMPLOYEES_TABLE)
            .upsert(row, on_conflict="user_id", ignore_duplicates=True)
            .execute()
        )
        if isinstance(inserted, Err):
            logger.error(f"Error creating employee record: {inserted.message}")
            return inserted

        rows = inserted.value or []
        if rows:
            logger.info(f"New employee record created for {identity.id}")
            return Ok(rows[0])

        return await (
            gateway.table(EMPLOYEES_TABLE)
            .select("*")
            .eq("user_id", identity.id)
            .single()
            .execute()
        )

    # =========================================================================
    # Session operations
    # =========================================================================

    async def initialize(self, auth: Optional[AuthSession] = None) -> SessionState:
        """Resolve a loading session (INITIAL_SESSION)."""
        await self._gateway.auth.initialize(auth if auth is not None else self.state.auth)
        return self.state

    async def sign_in(self, email: str, password: str) -> Result[SessionState]:
        result = await self._gateway.auth.sign_in_with_password(email, password)
        if isinstance(result, Err):
            logger.warning(f"Login error: {result.message}")
            return result
        self._rotate_key()
        return Ok(self.state)

    async def sign_up(self, email: str, password: str) -> Result[SessionState]:
        """
        Register a new account.

        When the provider returns no session (email confirmation pending) the
        employee record is still provisioned and the browser stays anonymous.
        """
        result = await self._gateway.auth.sign_up(email, password)
        if isinstance(result, Err):
            logger.warning(f"Registration error: {result.message}")
            return result

        signup = result.value
        if signup.session is None:
            if signup.identity is not None:
                provisioned = await self.ensure_employee_record(signup.identity)
                if isinstance(provisioned, Err):
                    self._store.flash(
                        self._key,
                        f"Error creating employee record: {provisioned.message}",
                        is_error=True,
                    )
            self._commit(SessionState.anonymous())
        else:
            self._rotate_key()

        return Ok(self.state)

    async def sign_out(self) -> Result[None]:
        """
        Revoke the session remotely and clear it locally.

        Local state is cleared even when the remote call fails; the failure
        is still returned to the caller.
        """
        result = await self._gateway.auth.sign_out(self.state.auth)
        if isinstance(result, Err):
            logger.warning(f"Logout error: {result.message}")
        self._commit(SessionState.anonymous())
        return result

    async def refresh_if_expired(self, now: Optional[float] = None) -> SessionState:
        """Exchange the refresh token when the access token has expired."""
        auth = self.state.auth
        if auth is not None and auth.is_expired(now):
            logger.info(f"Access token expired for {auth.identity.id}; refreshing")
            await self._gateway.auth.refresh_session(auth)
        return self.state

    def gateway_for_session(self) -> BackendService:
        """Gateway carrying the signed-in user's token (anon key otherwise)."""
        auth = self.state.auth
        return self._gateway.with_access_token(auth.access_token if auth else None)

    def close(self) -> None:
        self._subscription.unsubscribe()
