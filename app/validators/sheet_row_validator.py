"""
app/validators/sheet_row_validator.py

Row-level validation for decoded sheet records.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from app.domain.sheet_ingestion import ColumnDescriptor, InvalidRecord, Row, RowPartition, SheetRecord
from app.validators.value_normalizer import InvalidValueError, ValueNormalizer

logger = logging.getLogger(__name__)


class SheetRowValidator:
    """
    Normalizes every cell of a record; the first failing cell rejects the row.
    """

    def __init__(
        self,
        *,
        normalizer: ValueNormalizer | None = None,
        log_validation_errors: bool = True,
    ) -> None:
        self._normalizer = normalizer or ValueNormalizer()
        self._log_validation_errors = log_validation_errors

    def validate_row(
        self,
        *,
        record: SheetRecord,
        columns: Sequence[ColumnDescriptor],
    ) -> tuple[Row | None, InvalidRecord | None]:
        """
        Validate one record against all column descriptors.

        Returns either a fully normalized row or the rejected record, never both.
        """

        row: Row = {}
        for column in columns:
            raw_value = record.values.get(column.original_name)
            try:
                row[column.sanitized_name] = self._normalizer.normalize(raw_value, column.target_type)
            except InvalidValueError as exc:
                return None, InvalidRecord(
                    row_number=record.row_number,
                    original_data=dict(record.values),
                    error_message=str(exc),
                    column=column.original_name,
                )
        return row, None

    def partition(
        self,
        *,
        records: Iterable[SheetRecord],
        columns: Sequence[ColumnDescriptor],
    ) -> RowPartition:
        """
        Validate records independently and split them into valid and invalid.
        """

        partition = RowPartition()
        for record in records:
            row, invalid = self.validate_row(record=record, columns=columns)
            if invalid is not None:
                self._record_error(invalid)
                partition.invalid_records.append(invalid)
                continue
            partition.valid_rows.append(row)
        return partition

    def _record_error(self, invalid: InvalidRecord) -> None:
        if not self._log_validation_errors:
            return
        logger.warning(
            "Sheet validation error row=%s column=%s message=%s data=%r",
            invalid.row_number,
            invalid.column,
            invalid.error_message,
            invalid.original_data,
        )
