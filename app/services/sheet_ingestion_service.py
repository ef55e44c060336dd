"""
app/services/sheet_ingestion_service.py

Service layer for the two-phase spreadsheet ingestion workflow.

    validate:  decode -> describe columns -> ensure table -> partition rows
               -> stage the valid rows in a session
    insert:    claim the session -> bulk insert in one transaction
               (the session is restored if the insert fails)
    upload:    validate and insert the valid rows immediately, no session
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from fastapi import UploadFile
from sqlalchemy.orm import Session

from app.config import get_sheet_ingestion_settings
from app.domain.sheet_ingestion import (
    ColumnDescriptor,
    IngestionSummary,
    InsertSummary,
    RowPartition,
    ValidationSession,
    ValidationSummary,
)
from app.logging_utils import log_event
from app.mappers.column_mapper import build_column_descriptors, column_map, table_name_from_file_name
from app.mappers.column_types import ColumnTypeRegistry, get_column_type_registry
from app.parsing.sheet_reader import read_sheet
from app.repositories.destination_table_repository import DestinationTableRepository, TablePersistenceError
from app.sessions.base import SessionStore
from app.sessions.errors import SessionStoreError
from app.sessions.factory import get_session_store
from app.validators.sheet_row_validator import SheetRowValidator
from app.validators.upload_validator import validate_sheet_upload
from app.validators.value_normalizer import ValueNormalizer

logger = logging.getLogger(__name__)


class EmptySheetError(ValueError):
    """
    Raised when the first worksheet has no data rows.
    """


class EmptyBatchError(ValueError):
    """
    Raised when a session holds no valid rows to insert.
    """


@dataclass(frozen=True)
class _PreparedSheet:
    table_name: str
    columns: list[ColumnDescriptor]
    partition: RowPartition


class SheetIngestionService:
    """
    Coordinates decoding, validation, session staging and persistence.
    """

    def __init__(
        self,
        *,
        session_store: SessionStore,
        registry: ColumnTypeRegistry,
        validator: SheetRowValidator | None = None,
        max_upload_bytes: int,
    ) -> None:
        self._session_store = session_store
        self._registry = registry
        self._validator = validator or SheetRowValidator()
        self._max_upload_bytes = max(1, max_upload_bytes)

    def validate_sheet(self, *, upload_file: UploadFile, db: Session) -> ValidationSummary:
        """
        Validate every row of an uploaded sheet and stage the valid ones.

        The destination table is created during validation, so it exists even
        when the batch is never inserted.
        """

        self._purge_expired_sessions()
        prepared = self._prepare(upload_file=upload_file, db=db)
        partition = prepared.partition

        session_id = self._session_store.put(
            ValidationSession(
                table_name=prepared.table_name,
                column_names=[column.sanitized_name for column in prepared.columns],
                rows=partition.valid_rows,
            )
        )
        log_event(
            logger,
            logging.INFO,
            "sheet_validated",
            table=prepared.table_name,
            session_id=session_id,
            total=partition.total,
            valid=len(partition.valid_rows),
            invalid=len(partition.invalid_records),
        )
        return ValidationSummary(
            table=prepared.table_name,
            column_map=column_map(prepared.columns),
            session_id=session_id,
            total=partition.total,
            valid_count=len(partition.valid_rows),
            invalid_count=len(partition.invalid_records),
            invalid_records=partition.invalid_records,
        )

    def insert_session(self, *, session_id: str, db: Session) -> InsertSummary:
        """
        Insert a staged batch and consume its session.

        The session is claimed before the insert, so two concurrent requests
        for the same id cannot both load the batch.

        Raises:
            SessionNotFoundError: unknown, already consumed or in-flight id.
            SessionExpiredError: the session outlived its TTL and was deleted.
            EmptyBatchError: the session holds no rows.
            TablePersistenceError: the insert failed; the session is restored.
        """

        session = self._session_store.claim(session_id)
        if not session.rows:
            self._session_store.restore(session)
            raise EmptyBatchError("No valid rows to insert.")

        repository = DestinationTableRepository(db, registry=self._registry)
        try:
            inserted = repository.insert_rows(session.table_name, session.column_names, session.rows)
        except TablePersistenceError:
            self._session_store.restore(session)
            raise

        log_event(
            logger,
            logging.INFO,
            "session_inserted",
            table=session.table_name,
            session_id=session_id,
            inserted=inserted,
        )
        return InsertSummary(table=session.table_name, inserted_count=inserted)

    def ingest_sheet(self, *, upload_file: UploadFile, db: Session) -> IngestionSummary:
        """
        Validate a sheet and insert its valid rows without staging a session.
        """

        prepared = self._prepare(upload_file=upload_file, db=db)
        partition = prepared.partition

        repository = DestinationTableRepository(db, registry=self._registry)
        inserted = repository.insert_rows(
            prepared.table_name,
            [column.sanitized_name for column in prepared.columns],
            partition.valid_rows,
        )
        log_event(
            logger,
            logging.INFO,
            "sheet_ingested",
            table=prepared.table_name,
            inserted=inserted,
            failed=len(partition.invalid_records),
        )
        return IngestionSummary(
            table=prepared.table_name,
            column_map=column_map(prepared.columns),
            inserted_count=inserted,
            failed_count=len(partition.invalid_records),
            invalid_records=partition.invalid_records,
        )

    def _prepare(self, *, upload_file: UploadFile, db: Session) -> _PreparedSheet:
        raw_file = upload_file.file
        raw_file.seek(0)
        content = raw_file.read()

        file_name = validate_sheet_upload(
            file_name=upload_file.filename,
            content=content,
            content_type=upload_file.content_type,
            max_bytes=self._max_upload_bytes,
        )
        sheet = read_sheet(file_name=file_name, content=content)
        if not sheet.records:
            raise EmptySheetError("Uploaded sheet contains no data rows.")

        table_name = table_name_from_file_name(file_name)
        columns = build_column_descriptors(sheet.headers, self._registry)

        repository = DestinationTableRepository(db, registry=self._registry)
        repository.ensure_table(table_name, [column.sanitized_name for column in columns])

        partition = self._validator.partition(records=sheet.records, columns=columns)
        return _PreparedSheet(table_name=table_name, columns=columns, partition=partition)

    def _purge_expired_sessions(self) -> None:
        try:
            purged = self._session_store.purge_expired()
        except SessionStoreError:
            logger.warning("Expired session purge failed", exc_info=True)
            return
        if purged:
            log_event(logger, logging.INFO, "sessions_purged", purged=purged)


@lru_cache(maxsize=1)
def get_sheet_ingestion_service() -> SheetIngestionService:
    """
    Build a cached service instance for dependency injection.
    """

    settings = get_sheet_ingestion_settings()
    return SheetIngestionService(
        session_store=get_session_store(),
        registry=get_column_type_registry(),
        validator=SheetRowValidator(
            normalizer=ValueNormalizer(strict_numeric=settings.strict_numeric),
            log_validation_errors=settings.log_validation_errors,
        ),
        max_upload_bytes=settings.upload_max_bytes,
    )
