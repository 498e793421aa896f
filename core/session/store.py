"""
In-memory session store.

Maps opaque browser session keys (carried in a cookie) to `SessionState`
values. Values are replaced wholesale; a sign-in moves the session to a new
key. State lives for the process lifetime only; a restart signs every browser
out.

The store also queues one-time flash messages per browser, shown on the
next rendered page (e.g. "Leave request submitted successfully!").
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from core.session.models import SessionState, SessionStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlashMessage:
    text: str
    is_error: bool = False


class SessionStore:
    """
    Process-local map of session key -> SessionState.

    Only browsers with something to remember (a signed-in or loading state,
    or a pending flash message) occupy an entry. Anonymous states are not
    kept: an unknown key simply reads as a fresh session again.
    """

    def __init__(self) -> None:
        self._states: dict[str, SessionState] = {}
        self._flashes: dict[str, list[FlashMessage]] = {}

    def __len__(self) -> int:
        return len(self._states.keys() | self._flashes.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._states or key in self._flashes

    @staticmethod
    def new_key() -> str:
        return secrets.token_urlsafe(32)

    def get(self, key: Optional[str]) -> Optional[SessionState]:
        if not key:
            return None
        return self._states.get(key)

    def open(self, key: Optional[str]) -> tuple[str, SessionState, bool]:
        """
        Look up a session without storing anything.

        Returns:
            (key, state, created). A new key is issued when the given one is
            missing or unknown, so stale cookies cannot pick their own key.
            The new key is only kept once state or a flash is written to it.
        """
        if key and key in self:
            return key, self._states.get(key) or SessionState.initial(), False
        return self.new_key(), SessionState.initial(), True

    def replace(self, key: str, state: SessionState) -> None:
        if state.status is SessionStatus.ANONYMOUS:
            self._states.pop(key, None)
            return
        self._states[key] = state

    def rotate(self, key: str) -> str:
        """Move a session (state and flashes) to a freshly issued key."""
        new_key = self.new_key()
        if key in self._states:
            self._states[new_key] = self._states.pop(key)
        if key in self._flashes:
            self._flashes[new_key] = self._flashes.pop(key)
        logger.debug("Rotated browser session key")
        return new_key

    def discard(self, key: str) -> None:
        self._states.pop(key, None)
        self._flashes.pop(key, None)

    # =========================================================================
    # Flash messages
    # =========================================================================

    def flash(self, key: str, message: str, is_error: bool = False) -> None:
        """Queue a one-time message shown on the browser's next page."""
        self._flashes.setdefault(key, []).append(FlashMessage(message, is_error))

    def pop_flashes(self, key: Optional[str]) -> list[FlashMessage]:
        if not key:
            return []
        return self._flashes.pop(key, [])
