"""
app/schemas package marker.
"""

from app.schemas.sheet_ingestion import (
    ErrorResponse,
    ImmediateUploadResponse,
    InsertRequest,
    InsertResponse,
    InvalidRecordResponse,
    ValidationResponse,
)

__all__ = [
    "ErrorResponse",
    "ImmediateUploadResponse",
    "InsertRequest",
    "InsertResponse",
    "InvalidRecordResponse",
    "ValidationResponse",
]
