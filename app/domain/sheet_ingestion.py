"""
app/domain/sheet_ingestion.py

Domain models used by the spreadsheet validation and insertion flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

Row = dict[str, Any]


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    One sheet column with its destination name and target type.
    """

    original_name: str
    sanitized_name: str
    target_type: str


@dataclass(frozen=True)
class SheetRecord:
    """
    One decoded data row keyed by original header.

    row_number is the 1-based position in the sheet counting the header row.
    """

    row_number: int
    values: dict[str, Any]


@dataclass(frozen=True)
class DecodedSheet:
    """
    First worksheet of an uploaded file, split into headers and data rows.
    """

    headers: tuple[str, ...]
    records: list[SheetRecord] = field(default_factory=list)
    sheet_name: str | None = None


@dataclass(frozen=True)
class InvalidRecord:
    """
    A source row rejected during validation, with its raw data preserved.
    """

    row_number: int
    original_data: dict[str, Any]
    error_message: str
    column: str | None = None


@dataclass(frozen=True)
class RowPartition:
    """
    Valid rows and rejected records produced from one sheet.
    """

    valid_rows: list[Row] = field(default_factory=list)
    invalid_records: list[InvalidRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.valid_rows) + len(self.invalid_records)


@dataclass(frozen=True)
class ValidationSession:
    """
    Validated batch staged between the validate and insert phases.

    session_id and created_at are assigned by the session store on put.
    """

    table_name: str
    column_names: list[str]
    rows: list[Row]
    session_id: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True)
class ValidationSummary:
    """
    Result of the validate phase.
    """

    table: str
    column_map: dict[str, str]
    session_id: str
    total: int
    valid_count: int
    invalid_count: int
    invalid_records: list[InvalidRecord] = field(default_factory=list)

    @property
    def all_valid(self) -> bool:
        return self.invalid_count == 0


@dataclass(frozen=True)
class InsertSummary:
    """
    Result of the insert phase.
    """

    table: str
    inserted_count: int


@dataclass(frozen=True)
class IngestionSummary:
    """
    Result of single-phase validate-and-insert.
    """

    table: str
    column_map: dict[str, str]
    inserted_count: int
    failed_count: int
    invalid_records: list[InvalidRecord] = field(default_factory=list)
