"""
Database-backed session store using the `validation_sessions` table.
"""

from __future__ import annotations

import json
from collections.abc import Callable

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import DEFAULT_SESSION_TTL_SECONDS
from app.domain.sheet_ingestion import ValidationSession
from app.sessions.base import Clock, ExpiryPolicy, as_aware, utcnow
from app.sessions.errors import SessionExpiredError, SessionNotFoundError, SessionStoreError
from db.models.validation_session import ValidationSessionRecord

SessionFactory = Callable[[], Session]


class DatabaseSessionStore:
    """
    Session store shared by every API worker connected to the same database.

    Each operation opens and closes its own ORM session so the store can be
    reused across requests.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._policy = ExpiryPolicy(ttl_seconds=ttl_seconds, clock=clock)

    def put(self, session: ValidationSession) -> str:
        stored = self._policy.stamp(session)
        self._save(stored)
        return stored.session_id

    def _save(self, session: ValidationSession) -> None:
        record = ValidationSessionRecord(
            id=session.session_id,
            table_name=session.table_name,
            column_names_json=json.dumps(list(session.column_names)),
            rows_json=json.dumps(list(session.rows)),
            row_count=len(session.rows),
            created_at=session.created_at,
        )
        db = self._session_factory()
        try:
            db.add(record)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise SessionStoreError("Failed to persist validation session.") from exc
        finally:
            db.close()

    def get_and_check(self, session_id: str) -> ValidationSession:
        db = self._session_factory()
        try:
            record = db.get(ValidationSessionRecord, session_id)
            if record is None:
                raise SessionNotFoundError(session_id)
            if self._policy.is_expired(record.created_at):
                db.delete(record)
                db.commit()
                raise SessionExpiredError(session_id)
            return ValidationSession(
                session_id=record.id,
                table_name=record.table_name,
                column_names=json.loads(record.column_names_json),
                rows=json.loads(record.rows_json),
                created_at=as_aware(record.created_at),
            )
        except SQLAlchemyError as exc:
            db.rollback()
            raise SessionStoreError("Failed to load validation session.") from exc
        finally:
            db.close()

    def claim(self, session_id: str) -> ValidationSession:
        """
        Delete the row and read it back in one statement; a concurrent claim
        of the same id deletes nothing and gets SessionNotFoundError.
        """

        db = self._session_factory()
        try:
            row = db.execute(
                delete(ValidationSessionRecord)
                .where(ValidationSessionRecord.id == session_id)
                .returning(
                    ValidationSessionRecord.table_name,
                    ValidationSessionRecord.column_names_json,
                    ValidationSessionRecord.rows_json,
                    ValidationSessionRecord.created_at,
                )
            ).one_or_none()
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise SessionStoreError("Failed to claim validation session.") from exc
        finally:
            db.close()

        if row is None:
            raise SessionNotFoundError(session_id)
        if self._policy.is_expired(row.created_at):
            raise SessionExpiredError(session_id)
        return ValidationSession(
            session_id=session_id,
            table_name=row.table_name,
            column_names=json.loads(row.column_names_json),
            rows=json.loads(row.rows_json),
            created_at=as_aware(row.created_at),
        )

    def restore(self, session: ValidationSession) -> None:
        self._save(session)

    def delete(self, session_id: str) -> None:
        db = self._session_factory()
        try:
            db.execute(delete(ValidationSessionRecord).where(ValidationSessionRecord.id == session_id))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise SessionStoreError("Failed to delete validation session.") from exc
        finally:
            db.close()

    def purge_expired(self) -> int:
        db = self._session_factory()
        try:
            result = db.execute(
                delete(ValidationSessionRecord).where(
                    ValidationSessionRecord.created_at < self._policy.cutoff()
                )
            )
            db.commit()
            return int(result.rowcount or 0)
        except SQLAlchemyError as exc:
            db.rollback()
            raise SessionStoreError("Failed to purge expired validation sessions.") from exc
        finally:
            db.close()
