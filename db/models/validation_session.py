"""
db/models/validation_session.py

Staged batch of validated sheet rows awaiting confirmation.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class ValidationSessionRecord(Base):
    __tablename__ = "validation_sessions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    table_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Destination table derived from the uploaded file name",
    )
    column_names_json: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Ordered sanitized column names as a JSON array",
    )
    rows_json: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Validated rows as a JSON array of objects",
    )
    row_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_validation_sessions_created_at", "created_at"),
    )
