"""Server-side session handling for the admin dashboard.

Only the random session id leaves the server; it is carried in the signed
cookie managed by Starlette's ``SessionMiddleware``.
"""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional


@dataclass(frozen=True)
class SessionState:
    """What the server knows about one browser session."""

    is_authenticated: bool = False
    username: Optional[str] = None


ANONYMOUS = SessionState()


@dataclass
class _SessionRecord:
    state: SessionState
    expires_at: datetime


class SessionManager:
    """Create, look up, and revoke server-side session records.

    Session records expire a fixed ``ttl`` after creation; they are not
    extended on access.
    """

    def __init__(self, *, ttl: timedelta = timedelta(hours=24)) -> None:
        self._ttl = ttl
        self._sessions: Dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def cookie_max_age(self) -> int:
        return int(self._ttl.total_seconds())

    def create(self, state: SessionState) -> str:
        session_id = secrets.token_urlsafe(32)
        record = _SessionRecord(state=state, expires_at=self._now() + self._ttl)
        with self._lock:
            self._purge_expired_locked()
            self._sessions[session_id] = record
        return session_id

    def resolve(self, session_id: object) -> Optional[SessionState]:
        if not isinstance(session_id, str) or not session_id:
            return None
        now = self._now()
        with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            if record.expires_at <= now:
                self._sessions.pop(session_id, None)
                return None
            return record.state

    def destroy(self, session_id: object) -> None:
        if not isinstance(session_id, str) or not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        with self._lock:
            return self._purge_expired_locked()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired_locked(self) -> int:
        now = self._now()
        expired = [key for key, record in self._sessions.items() if record.expires_at <= now]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


__all__ = ["ANONYMOUS", "SessionManager", "SessionState"]
