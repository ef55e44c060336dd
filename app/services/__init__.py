"""
app/services package marker.
"""

from app.services.sheet_ingestion_service import (
    EmptyBatchError,
    EmptySheetError,
    SheetIngestionService,
    get_sheet_ingestion_service,
)

__all__ = [
    "EmptyBatchError",
    "EmptySheetError",
    "SheetIngestionService",
    "get_sheet_ingestion_service",
]
