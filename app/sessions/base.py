"""
Session store interface and helpers shared by every backend.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from app.config import DEFAULT_SESSION_TTL_SECONDS
from app.domain.sheet_ingestion import ValidationSession

Clock = Callable[[], datetime]


class SessionStore(Protocol):
    """
    Time-boxed keyed store for validated batches.

    get_and_check raises SessionNotFoundError for unknown ids and
    SessionExpiredError (after deleting the entry) once the TTL has passed.
    claim does the same checks but also removes the session atomically, so
    only one caller can ever hold it; restore puts a claimed session back.
    """

    def put(self, session: ValidationSession) -> str:
        ...

    def get_and_check(self, session_id: str) -> ValidationSession:
        ...

    def claim(self, session_id: str) -> ValidationSession:
        ...

    def restore(self, session: ValidationSession) -> None:
        ...

    def delete(self, session_id: str) -> None:
        ...

    def purge_expired(self) -> int:
        ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return uuid.uuid4().hex


def as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class ExpiryPolicy:
    """
    TTL bookkeeping shared by the store backends.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self.ttl = timedelta(seconds=max(1, ttl_seconds))
        self.clock = clock

    def now(self) -> datetime:
        return as_aware(self.clock())

    def is_expired(self, created_at: datetime | None) -> bool:
        if created_at is None:
            return True
        return self.now() - as_aware(created_at) > self.ttl

    def cutoff(self) -> datetime:
        return self.now() - self.ttl

    def stamp(self, session: ValidationSession) -> ValidationSession:
        """
        Assign a fresh id and creation time to a session about to be stored.
        """

        return replace(session, session_id=new_session_id(), created_at=self.now())


def session_to_payload(session: ValidationSession) -> dict[str, Any]:
    created_at = session.created_at.isoformat() if session.created_at is not None else None
    return {
        "session_id": session.session_id,
        "table_name": session.table_name,
        "column_names": list(session.column_names),
        "rows": list(session.rows),
        "created_at": created_at,
    }


def session_from_payload(payload: dict[str, Any]) -> ValidationSession:
    raw_created_at = payload.get("created_at")
    created_at = as_aware(datetime.fromisoformat(raw_created_at)) if raw_created_at else None
    return ValidationSession(
        session_id=str(payload["session_id"]),
        table_name=str(payload["table_name"]),
        column_names=list(payload.get("column_names") or []),
        rows=list(payload.get("rows") or []),
        created_at=created_at,
    )
