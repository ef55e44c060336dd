from __future__ import annotations

import logging
import math

import pytest

from app.domain.sheet_ingestion import SheetRecord
from app.mappers.column_mapper import build_column_descriptors
from app.mappers.column_types import ColumnTypeRegistry
from app.validators.sheet_row_validator import SheetRowValidator
from app.validators.value_normalizer import ValueNormalizer

VALID_UUID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.fixture()
def columns():
    return build_column_descriptors(["Owner ID", "Name", "Age", "Created At"], ColumnTypeRegistry())


@pytest.fixture()
def validator() -> SheetRowValidator:
    return SheetRowValidator(log_validation_errors=False)


class TestValidateRow:
    def test_valid_row_has_every_sanitized_key(self, validator, columns):
        record = SheetRecord(
            row_number=2,
            values={"Owner ID": VALID_UUID, "Name": "Alice", "Age": "30", "Created At": 44197},
        )

        row, invalid = validator.validate_row(record=record, columns=columns)

        assert invalid is None
        assert row == {
            "owner_id": VALID_UUID,
            "name": "Alice",
            "age": 30,
            "created_at": "2021-01-01 00:00:00",
        }

    def test_missing_cells_are_null(self, validator, columns):
        record = SheetRecord(row_number=3, values={"Name": "Bob"})

        row, invalid = validator.validate_row(record=record, columns=columns)

        assert invalid is None
        assert set(row) == {"owner_id", "name", "age", "created_at"}
        assert row["owner_id"] is None
        assert row["age"] is None

    def test_first_failing_cell_rejects_row_with_raw_data(self, validator, columns):
        raw = {"Owner ID": "not-a-uuid", "Name": "Carol", "Age": "41", "Created At": None}
        record = SheetRecord(row_number=7, values=raw)

        row, invalid = validator.validate_row(record=record, columns=columns)

        assert row is None
        assert invalid.row_number == 7
        assert invalid.original_data == raw
        assert invalid.error_message == "Invalid UUID: not-a-uuid"
        assert invalid.column == "Owner ID"

    def test_permissive_numeric_keeps_row_with_nan(self, validator, columns):
        record = SheetRecord(row_number=2, values={"Name": "Dan", "Age": "unknown"})

        row, invalid = validator.validate_row(record=record, columns=columns)

        assert invalid is None
        assert math.isnan(row["age"])

    def test_strict_numeric_rejects_row(self, columns):
        strict = SheetRowValidator(
            normalizer=ValueNormalizer(strict_numeric=True),
            log_validation_errors=False,
        )
        record = SheetRecord(row_number=2, values={"Name": "Dan", "Age": "unknown"})

        row, invalid = strict.validate_row(record=record, columns=columns)

        assert row is None
        assert invalid.error_message == "Invalid INTEGER: unknown"
        assert invalid.column == "Age"


class TestPartition:
    def test_rows_are_validated_independently(self, validator, columns):
        records = [
            SheetRecord(row_number=2, values={"Owner ID": VALID_UUID, "Name": "Alice"}),
            SheetRecord(row_number=3, values={"Owner ID": "bad", "Name": "Bob"}),
            SheetRecord(row_number=5, values={"Owner ID": None, "Name": "Carol"}),
        ]

        partition = validator.partition(records=records, columns=columns)

        assert partition.total == 3
        assert [row["name"] for row in partition.valid_rows] == ["Alice", "Carol"]
        assert [record.row_number for record in partition.invalid_records] == [3]

    def test_rejections_are_logged_when_enabled(self, columns, caplog):
        noisy = SheetRowValidator(log_validation_errors=True)
        records = [SheetRecord(row_number=4, values={"Owner ID": "bad"})]

        with caplog.at_level(logging.WARNING, logger="app.validators.sheet_row_validator"):
            noisy.partition(records=records, columns=columns)

        assert "row=4" in caplog.text
        assert "Invalid UUID: bad" in caplog.text

    def test_rejections_are_silent_when_disabled(self, validator, columns, caplog):
        records = [SheetRecord(row_number=4, values={"Owner ID": "bad"})]

        with caplog.at_level(logging.WARNING, logger="app.validators.sheet_row_validator"):
            validator.partition(records=records, columns=columns)

        assert caplog.text == ""
