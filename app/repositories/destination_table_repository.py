"""
app/repositories/destination_table_repository.py

DB persistence for dynamically named destination tables.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Column, MetaData, Table, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.schema import CreateTable

from app.domain.sheet_ingestion import Row
from app.mappers.column_types import ColumnType, ColumnTypeRegistry
from app.validators.value_normalizer import cell_text, is_not_a_number

logger = logging.getLogger(__name__)


class TablePersistenceError(RuntimeError):
    """
    Raised when a destination table cannot be created or written.
    """


class DestinationTableRepository:
    """
    Creates destination tables on demand and bulk-inserts validated rows.

    Tables are built from the column type registry at runtime and are never
    altered or dropped once they exist.
    """

    def __init__(self, session: Session, *, registry: ColumnTypeRegistry) -> None:
        self._session = session
        self._registry = registry

    def build_table(self, table_name: str, column_names: Sequence[str]) -> Table:
        metadata = MetaData()
        columns = [
            Column(name, self._registry.sql_type_of(name), nullable=True)
            for name in column_names
        ]
        return Table(table_name, metadata, *columns)

    def ensure_table(self, table_name: str, column_names: Sequence[str]) -> Table:
        """
        Issue `CREATE TABLE IF NOT EXISTS` for the destination table.
        """

        table = self.build_table(table_name, column_names)
        try:
            self._session.execute(CreateTable(table, if_not_exists=True))
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise TablePersistenceError(f"Failed to create table '{table_name}'.") from exc
        return table

    def insert_rows(
        self,
        table_name: str,
        column_names: Sequence[str],
        rows: Sequence[Row],
    ) -> int:
        """
        Insert every row in one statement and one transaction.

        Either all rows are committed or none are.
        """

        if not rows:
            return 0

        table = self.build_table(table_name, column_names)
        column_types = {name: self._registry.type_of(name) for name in column_names}
        payloads: list[dict[str, Any]] = [
            {
                name: _bind_value(row.get(name), column_types[name])
                for name in column_names
            }
            for row in rows
        ]
        try:
            self._session.execute(insert(table), payloads)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error("Bulk insert into %s failed: %s", table_name, exc)
            raise TablePersistenceError(f"Failed to insert rows into '{table_name}'.") from exc
        return len(payloads)


def _bind_value(value: Any, column_type: str) -> Any:
    if value is None or is_not_a_number(value):
        return None

    if column_type == ColumnType.TIMESTAMP:
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).strip())
        except ValueError:
            return value
    if column_type == ColumnType.UUID:
        return str(value)
    if column_type == ColumnType.TEXT and not isinstance(value, str):
        return cell_text(value)
    return value
