"""
app/domain package marker.
"""

from app.domain.sheet_ingestion import (
    ColumnDescriptor,
    DecodedSheet,
    IngestionSummary,
    InsertSummary,
    InvalidRecord,
    Row,
    RowPartition,
    SheetRecord,
    ValidationSession,
    ValidationSummary,
)

__all__ = [
    "ColumnDescriptor",
    "DecodedSheet",
    "IngestionSummary",
    "InsertSummary",
    "InvalidRecord",
    "Row",
    "RowPartition",
    "SheetRecord",
    "ValidationSession",
    "ValidationSummary",
]
