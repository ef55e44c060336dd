"""
app/api/routers/sheet_ingestion.py

Spreadsheet validation and insertion HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_sheet_upload
from app.domain.sheet_ingestion import InvalidRecord
from app.parsing.sheet_reader import SheetFormatError
from app.repositories.destination_table_repository import TablePersistenceError
from app.schemas.sheet_ingestion import (
    ErrorResponse,
    ImmediateUploadResponse,
    InsertRequest,
    InsertResponse,
    InvalidRecordResponse,
    ValidationResponse,
)
from app.services.sheet_ingestion_service import (
    EmptyBatchError,
    EmptySheetError,
    SheetIngestionService,
    get_sheet_ingestion_service,
)
from app.sessions.errors import SessionExpiredError, SessionNotFoundError, SessionStoreError
from app.validators.upload_validator import UploadValidationError
from db.session import get_db

router = APIRouter(prefix="/api", tags=["sheet-ingestion"])


def _error(status_code: int, message: str, exc: Exception | None = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(message=message, error=str(exc) if exc is not None else None).model_dump(),
    )


def _invalid_records(records: list[InvalidRecord]) -> list[InvalidRecordResponse]:
    return [
        InvalidRecordResponse(
            row=record.row_number,
            data=record.original_data,
            error=record.error_message,
            column=record.column,
        )
        for record in records
    ]


@router.post("/validate", response_model=ValidationResponse)
def validate_sheet(
    file: UploadFile = Depends(get_sheet_upload),
    db: Session = Depends(get_db),
    ingestion_service: SheetIngestionService = Depends(get_sheet_ingestion_service),
) -> ValidationResponse:
    """
    Validate every row of a sheet and stage the valid ones for insertion.
    """

    try:
        summary = ingestion_service.validate_sheet(upload_file=file, db=db)
    except EmptySheetError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "Excel is empty", exc) from exc
    except (UploadValidationError, SheetFormatError) as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "Invalid spreadsheet upload.", exc) from exc
    except TablePersistenceError as exc:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error while validating Excel", exc) from exc
    except SessionStoreError as exc:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Unable to stage validated rows.", exc) from exc
    finally:
        file.file.close()

    if summary.all_valid:
        message = "All records are valid."
    else:
        message = f"Found {summary.invalid_count} invalid records."
    return ValidationResponse(
        message=message,
        table=summary.table,
        column_map=summary.column_map,
        session_id=summary.session_id,
        total=summary.total,
        valid=summary.valid_count,
        invalid=summary.invalid_count,
        all_valid=summary.all_valid,
        invalid_records=_invalid_records(summary.invalid_records),
    )


@router.post("/insert", response_model=InsertResponse)
def insert_session(
    payload: InsertRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    ingestion_service: SheetIngestionService = Depends(get_sheet_ingestion_service),
) -> InsertResponse:
    """
    Insert a previously validated batch; the session is consumed on success.
    """

    session_id = payload.session_id if payload is not None else None
    if not session_id:
        raise _error(status.HTTP_400_BAD_REQUEST, "Session ID is required")

    try:
        summary = ingestion_service.insert_session(session_id=session_id, db=db)
    except SessionNotFoundError as exc:
        raise _error(status.HTTP_404_NOT_FOUND, "Session not found", exc) from exc
    except SessionExpiredError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "Session expired", exc) from exc
    except EmptyBatchError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "No valid rows to insert", exc) from exc
    except TablePersistenceError as exc:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error while inserting data", exc) from exc
    except SessionStoreError as exc:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Unable to load session.", exc) from exc

    return InsertResponse(
        message=f"Successfully inserted {summary.inserted_count} records",
        table=summary.table,
        inserted=summary.inserted_count,
    )


@router.post("/upload", response_model=ImmediateUploadResponse)
def upload_sheet(
    file: UploadFile = Depends(get_sheet_upload),
    db: Session = Depends(get_db),
    ingestion_service: SheetIngestionService = Depends(get_sheet_ingestion_service),
) -> ImmediateUploadResponse:
    """
    Validate a sheet and insert its valid rows in one request.
    """

    try:
        summary = ingestion_service.ingest_sheet(upload_file=file, db=db)
    except EmptySheetError as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "Excel is empty", exc) from exc
    except (UploadValidationError, SheetFormatError) as exc:
        raise _error(status.HTTP_400_BAD_REQUEST, "Invalid spreadsheet upload.", exc) from exc
    except TablePersistenceError as exc:
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error while uploading Excel", exc) from exc
    finally:
        file.file.close()

    return ImmediateUploadResponse(
        message="Excel processed",
        table=summary.table,
        column_map=summary.column_map,
        inserted=summary.inserted_count,
        failed=summary.failed_count,
        invalid_records=_invalid_records(summary.invalid_records),
    )
