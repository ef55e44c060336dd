"""
Session store selection from runtime settings.
"""

from __future__ import annotations

from functools import lru_cache

from app.config import SheetIngestionSettings, get_sheet_ingestion_settings
from app.sessions.base import SessionStore
from app.sessions.database_store import DatabaseSessionStore
from app.sessions.file_store import FileSessionStore
from app.sessions.memory_store import InMemorySessionStore


def build_session_store(settings: SheetIngestionSettings) -> SessionStore:
    backend = settings.session_store_backend
    if backend == "memory":
        return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
    if backend == "file":
        return FileSessionStore(
            settings.session_store_dir,
            ttl_seconds=settings.session_ttl_seconds,
        )
    if backend == "database":
        from db.session import SessionLocal

        return DatabaseSessionStore(SessionLocal, ttl_seconds=settings.session_ttl_seconds)
    raise RuntimeError(f"Unsupported session store backend '{backend}'.")


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """
    Return the process-wide session store configured by SESSION_STORE_BACKEND.
    """

    return build_session_store(get_sheet_ingestion_settings())
