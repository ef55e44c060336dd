"""
Session store exceptions.
"""

from __future__ import annotations


class SessionStoreError(Exception):
    """Base exception for validation session persistence failures."""


class SessionNotFoundError(SessionStoreError):
    """Raised when a session id is unknown or was already consumed."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session not found.")
        self.session_id = session_id


class SessionExpiredError(SessionStoreError):
    """Raised when a session outlived its TTL; the session is deleted."""

    def __init__(self, session_id: str) -> None:
        super().__init__("Session expired. Please validate the file again.")
        self.session_id = session_id
