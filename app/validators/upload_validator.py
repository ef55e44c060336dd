"""
Validation helpers for uploaded spreadsheet payloads.
"""

from __future__ import annotations

from pathlib import Path

import db.models  # noqa: F401  registers the bookkeeping tables on Base.metadata
from app.mappers.column_mapper import table_name_from_file_name
from app.parsing.sheet_reader import SUPPORTED_EXTENSIONS
from db.base import Base

ALLOWED_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroenabled.12",
    "application/octet-stream",
    "application/zip",
}

# Tables owned by the service itself; uploads must never write into them.
RESERVED_TABLE_NAMES = frozenset(Base.metadata.tables) | {"alembic_version"}


class UploadValidationError(ValueError):
    """Raised when an uploaded file is rejected before decoding."""


def validate_sheet_file_name(file_name: str | None) -> str:
    """
    Check the extension and that a table name can be derived; return the name.
    """

    if not file_name or not file_name.strip():
        raise UploadValidationError("file name is required.")

    extension = Path(file_name).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UploadValidationError(
            f"Unsupported file type '{extension}'. Allowed: {sorted(SUPPORTED_EXTENSIONS)}."
        )

    table_name = table_name_from_file_name(file_name)
    if not table_name.strip("_"):
        raise UploadValidationError("A table name cannot be derived from the file name.")
    if table_name.lower() in RESERVED_TABLE_NAMES:
        raise UploadValidationError(f"Table name '{table_name}' is reserved.")
    return file_name.strip()


def validate_sheet_upload(
    *,
    file_name: str | None,
    content: bytes,
    content_type: str | None = None,
    max_bytes: int,
) -> str:
    """
    Validate an uploaded spreadsheet before decoding; return the file name.
    """

    name = validate_sheet_file_name(file_name)

    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type and media_type not in ALLOWED_CONTENT_TYPES:
        raise UploadValidationError(f"Unsupported content_type '{content_type}'.")

    if not content:
        raise UploadValidationError("Uploaded file content is empty.")

    if len(content) > max_bytes:
        raise UploadValidationError("Uploaded file exceeds configured size limit.")
    return name
