"""Session-flag gate protecting the admin endpoints."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

from .errors import InvalidCredentials, SessionError, Unauthorized
from .security import AdminCredentials
from .sessions import ANONYMOUS, SessionManager, SessionState

logger = logging.getLogger("seminar.auth")

SESSION_COOKIE_NAME = "seminar_session"
# Key inside the signed cookie payload holding the server-side session id.
SESSION_ID_KEY = "session_id"


def session_id_from_request(request: Request) -> Optional[str]:
    """Return the session id carried by the request's signed cookie, if any."""

    session_id = request.session.get(SESSION_ID_KEY)
    return session_id if isinstance(session_id, str) else None


class AuthGate:
    """Two-state machine: anonymous until a successful login, then authenticated."""

    def __init__(self, credentials: AdminCredentials, sessions: SessionManager) -> None:
        self._credentials = credentials
        self._sessions = sessions
        if not credentials.configured:
            logger.warning(
                "No admin password configured; dashboard logins will be rejected."
            )

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    def login(self, session_id: Optional[str], username: str, password: str) -> str:
        """Authenticate and return the id of a fresh admin session."""

        if not self._credentials.verify(username, password):
            logger.warning("Failed admin login attempt for %r", username)
            raise InvalidCredentials()

        if session_id:
            self._sessions.destroy(session_id)
        new_session_id = self._sessions.create(
            SessionState(is_authenticated=True, username=username)
        )
        logger.info("Admin %s signed in", username)
        return new_session_id

    def logout(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        try:
            self._sessions.destroy(session_id)
        except Exception as exc:
            raise SessionError(f"Failed to destroy session: {exc}") from exc

    def status(self, session_id: Optional[str]) -> SessionState:
        return self._sessions.resolve(session_id) or ANONYMOUS

    def is_authenticated(self, session_id: Optional[str]) -> bool:
        return self.status(session_id).is_authenticated


class RequireAuth:
    """FastAPI dependency that rejects requests without an admin session."""

    def __init__(self, gate: AuthGate) -> None:
        self._gate = gate

    async def __call__(self, request: Request) -> SessionState:
        state = self._gate.status(session_id_from_request(request))
        if not state.is_authenticated:
            raise Unauthorized()
        return state


__all__ = [
    "AuthGate",
    "RequireAuth",
    "SESSION_COOKIE_NAME",
    "SESSION_ID_KEY",
    "session_id_from_request",
]
