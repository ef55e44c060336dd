"""
app/schemas/sheet_ingestion.py

Request and response schemas for spreadsheet ingestion endpoints.

Fields are serialized in camelCase to match the browser client.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class InvalidRecordResponse(CamelModel):
    """
    One rejected source row with its raw data.
    """

    row: int = Field(..., ge=1)
    data: dict[str, Any] = Field(default_factory=dict)
    error: str
    column: str | None = None


class ValidationResponse(CamelModel):
    message: str
    table: str
    column_map: dict[str, str] = Field(default_factory=dict)
    session_id: str
    total: int = Field(..., ge=0)
    valid: int = Field(..., ge=0)
    invalid: int = Field(..., ge=0)
    all_valid: bool
    invalid_records: list[InvalidRecordResponse] = Field(default_factory=list)


class InsertRequest(CamelModel):
    session_id: str | None = None


class InsertResponse(CamelModel):
    message: str
    table: str
    inserted: int = Field(..., ge=0)


class ImmediateUploadResponse(CamelModel):
    message: str
    table: str
    column_map: dict[str, str] = Field(default_factory=dict)
    inserted: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    invalid_records: list[InvalidRecordResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """
    Shape of `detail` in error responses.
    """

    message: str
    error: str | None = None
