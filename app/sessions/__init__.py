from app.sessions.base import SessionStore
from app.sessions.database_store import DatabaseSessionStore
from app.sessions.errors import SessionExpiredError, SessionNotFoundError, SessionStoreError
from app.sessions.factory import build_session_store, get_session_store
from app.sessions.file_store import FileSessionStore
from app.sessions.memory_store import InMemorySessionStore

__all__ = [
    "DatabaseSessionStore",
    "FileSessionStore",
    "InMemorySessionStore",
    "SessionExpiredError",
    "SessionNotFoundError",
    "SessionStore",
    "SessionStoreError",
    "build_session_store",
    "get_session_store",
]
