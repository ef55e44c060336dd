"""
Process-local session store.
"""

from __future__ import annotations

import threading

from app.config import DEFAULT_SESSION_TTL_SECONDS
from app.domain.sheet_ingestion import ValidationSession
from app.sessions.base import Clock, ExpiryPolicy, utcnow
from app.sessions.errors import SessionExpiredError, SessionNotFoundError


class InMemorySessionStore:
    """
    Dictionary-backed store; sessions do not survive a restart and are not
    shared between worker processes.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._policy = ExpiryPolicy(ttl_seconds=ttl_seconds, clock=clock)
        self._sessions: dict[str, ValidationSession] = {}
        self._lock = threading.Lock()

    def put(self, session: ValidationSession) -> str:
        stored = self._policy.stamp(session)
        with self._lock:
            self._sessions[stored.session_id] = stored
        return stored.session_id

    def get_and_check(self, session_id: str) -> ValidationSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if self._policy.is_expired(session.created_at):
                del self._sessions[session_id]
                raise SessionExpiredError(session_id)
            return session

    def claim(self, session_id: str) -> ValidationSession:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        if self._policy.is_expired(session.created_at):
            raise SessionExpiredError(session_id)
        return session

    def restore(self, session: ValidationSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        with self._lock:
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if self._policy.is_expired(session.created_at)
            ]
            for session_id in expired:
                del self._sessions[session_id]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
