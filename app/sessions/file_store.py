"""
Filesystem session store: one JSON document per session.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from pathlib import Path

from app.config import DEFAULT_SESSION_TTL_SECONDS
from app.domain.sheet_ingestion import ValidationSession
from app.sessions.base import (
    Clock,
    ExpiryPolicy,
    session_from_payload,
    session_to_payload,
    utcnow,
)
from app.sessions.errors import SessionExpiredError, SessionNotFoundError, SessionStoreError

logger = logging.getLogger(__name__)

_SESSION_ID_PATTERN = re.compile(r"[0-9a-f]{32}")


class FileSessionStore:
    """
    Stores each session as `<root_dir>/<session_id>.json`.

    Writes go through a temporary file and an atomic rename so a reader never
    sees a partially written session.
    """

    def __init__(
        self,
        root_dir: str | Path = "data/sessions",
        *,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._root_dir = Path(root_dir)
        self._policy = ExpiryPolicy(ttl_seconds=ttl_seconds, clock=clock)

    def _path_for(self, session_id: str) -> Path | None:
        if not _SESSION_ID_PATTERN.fullmatch(session_id or ""):
            return None
        return self._root_dir / f"{session_id}.json"

    def put(self, session: ValidationSession) -> str:
        stored = self._policy.stamp(session)
        self._write(stored)
        return stored.session_id

    def _write(self, session: ValidationSession) -> None:
        target = self._path_for(session.session_id)
        if target is None:
            raise SessionStoreError("Session id is not valid.")

        self._root_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_suffix(".json.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(session_to_payload(session), handle)
            tmp_path.replace(target)
        except (OSError, TypeError, ValueError) as exc:
            raise SessionStoreError("Failed to write validation session to storage.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

    def _load(self, path: Path) -> ValidationSession | None:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return session_from_payload(json.load(handle))
        except FileNotFoundError:
            return None
        except (OSError, KeyError, ValueError) as exc:
            raise SessionStoreError(f"Failed to read validation session '{path.stem}'.") from exc

    def get_and_check(self, session_id: str) -> ValidationSession:
        path = self._path_for(session_id)
        session = self._load(path) if path is not None else None
        if session is None:
            raise SessionNotFoundError(session_id)
        if self._policy.is_expired(session.created_at):
            self.delete(session_id)
            raise SessionExpiredError(session_id)
        return session

    def claim(self, session_id: str) -> ValidationSession:
        """
        Move the session file aside with one rename; a concurrent claim of the
        same id finds nothing to rename and gets SessionNotFoundError.
        """

        path = self._path_for(session_id)
        if path is None:
            raise SessionNotFoundError(session_id)

        claimed_path = path.with_name(f"{session_id}.{uuid.uuid4().hex}.claimed")
        try:
            path.rename(claimed_path)
        except FileNotFoundError:
            raise SessionNotFoundError(session_id) from None
        except OSError as exc:
            raise SessionStoreError("Failed to claim validation session.") from exc

        try:
            session = self._load(claimed_path)
        finally:
            claimed_path.unlink(missing_ok=True)
        if session is None:
            raise SessionNotFoundError(session_id)
        if self._policy.is_expired(session.created_at):
            raise SessionExpiredError(session_id)
        return session

    def restore(self, session: ValidationSession) -> None:
        self._write(session)

    def delete(self, session_id: str) -> None:
        path = self._path_for(session_id)
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise SessionStoreError("Failed to delete validation session from storage.") from exc

    def purge_expired(self) -> int:
        if not self._root_dir.exists():
            return 0

        purged = 0
        for path in self._root_dir.glob("*.json"):
            try:
                session = self._load(path)
            except SessionStoreError:
                logger.warning("Removing unreadable session file %s", path.name)
                session = None
            if session is not None and not self._policy.is_expired(session.created_at):
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Failed to remove session file %s", path.name, exc_info=True)
                continue
            purged += 1
        return purged
