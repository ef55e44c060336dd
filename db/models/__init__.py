"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.validation_session import ValidationSessionRecord

__all__ = [
    "ValidationSessionRecord",
]
