"""
tests/test_value_normalizer.py

Pytest unit tests for cell-level value coercion.

Pure Python; no database and no I/O.
"""

from __future__ import annotations

import math

import pytest

from app.mappers.column_types import ALL_COLUMN_TYPES, ColumnType
from app.validators.value_normalizer import (
    InvalidValueError,
    ValueNormalizer,
    cell_text,
    serial_to_timestamp,
)

VALID_UUID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.fixture()
def normalizer() -> ValueNormalizer:
    return ValueNormalizer()


@pytest.fixture()
def strict_normalizer() -> ValueNormalizer:
    return ValueNormalizer(strict_numeric=True)


# ---------------------------------------------------------------------------
# Null markers
# ---------------------------------------------------------------------------


class TestNullMarkers:
    @pytest.mark.parametrize("raw", [None, "", "NULL"])
    @pytest.mark.parametrize("column_type", sorted(ALL_COLUMN_TYPES))
    def test_null_markers_are_null_for_every_type(self, normalizer, raw, column_type):
        assert normalizer.normalize(raw, column_type) is None

    @pytest.mark.parametrize("raw", [None, "", "NULL"])
    @pytest.mark.parametrize("column_type", sorted(ALL_COLUMN_TYPES))
    def test_null_markers_are_null_in_strict_mode(self, raw, column_type):
        assert ValueNormalizer(strict_numeric=True).normalize(raw, column_type) is None

    def test_lowercase_null_is_plain_text(self, normalizer):
        assert normalizer.normalize("null", ColumnType.TEXT) == "null"


# ---------------------------------------------------------------------------
# TIMESTAMP
# ---------------------------------------------------------------------------


class TestTimestamp:
    def test_whole_day_serial(self, normalizer):
        assert normalizer.normalize(44197, ColumnType.TIMESTAMP) == "2021-01-01 00:00:00"

    def test_fractional_serial_keeps_time_of_day(self, normalizer):
        assert normalizer.normalize(44197.5, ColumnType.TIMESTAMP) == "2021-01-01 12:00:00"

    def test_epoch_serial(self):
        assert serial_to_timestamp(25569) == "1970-01-01 00:00:00"

    def test_rounding_to_full_day_rolls_over(self):
        assert serial_to_timestamp(25569.99999999) == "1970-01-02 00:00:00"

    def test_quarter_day_fraction(self):
        assert serial_to_timestamp(44197.75) == "2021-01-01 18:00:00"

    def test_numeric_string_is_treated_as_serial(self, normalizer):
        assert normalizer.normalize("44197", ColumnType.TIMESTAMP) == "2021-01-01 00:00:00"

    def test_non_numeric_value_passes_through(self, normalizer):
        assert normalizer.normalize("2024-01-15", ColumnType.TIMESTAMP) == "2024-01-15"

    def test_out_of_range_serial_is_rejected(self, normalizer):
        with pytest.raises(InvalidValueError, match="Invalid TIMESTAMP"):
            normalizer.normalize(1e10, ColumnType.TIMESTAMP)


# ---------------------------------------------------------------------------
# BOOLEAN
# ---------------------------------------------------------------------------


class TestBoolean:
    @pytest.mark.parametrize("raw", ["true", "TRUE", " Yes ", "1", 1, 1.0, True])
    def test_truthy_values(self, normalizer, raw):
        assert normalizer.normalize(raw, ColumnType.BOOLEAN) is True

    @pytest.mark.parametrize("raw", ["false", "No", "0", 0, False])
    def test_falsy_values(self, normalizer, raw):
        assert normalizer.normalize(raw, ColumnType.BOOLEAN) is False

    @pytest.mark.parametrize("raw", ["maybe", "2", "y"])
    def test_unrecognised_values_are_null(self, normalizer, raw):
        assert normalizer.normalize(raw, ColumnType.BOOLEAN) is None


# ---------------------------------------------------------------------------
# INTEGER and FLOAT family
# ---------------------------------------------------------------------------


class TestNumeric:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("30", 30), ("30abc", 30), (30.9, 30), (" -7", -7), ("3.9", 3), (12, 12)],
    )
    def test_integer_prefix_parse(self, normalizer, raw, expected):
        assert normalizer.normalize(raw, ColumnType.INTEGER) == expected

    def test_non_numeric_integer_is_nan(self, normalizer):
        assert math.isnan(normalizer.normalize("abc", ColumnType.INTEGER))

    @pytest.mark.parametrize(
        "column_type",
        [ColumnType.FLOAT, ColumnType.DOUBLE_PRECISION, ColumnType.DECIMAL, ColumnType.NUMERIC],
    )
    def test_float_family_prefix_parse(self, normalizer, column_type):
        assert normalizer.normalize("3.5kg", column_type) == 3.5

    def test_float_from_int(self, normalizer):
        value = normalizer.normalize(2, ColumnType.FLOAT)
        assert value == 2.0
        assert isinstance(value, float)

    def test_non_numeric_float_is_nan(self, normalizer):
        assert math.isnan(normalizer.normalize("abc", ColumnType.NUMERIC))

    def test_strict_integer_raises(self, strict_normalizer):
        with pytest.raises(InvalidValueError, match="Invalid INTEGER: abc"):
            strict_normalizer.normalize("abc", ColumnType.INTEGER)

    def test_strict_float_raises(self, strict_normalizer):
        with pytest.raises(InvalidValueError, match="Invalid FLOAT: abc"):
            strict_normalizer.normalize("abc", ColumnType.DOUBLE_PRECISION)

    def test_strict_mode_still_accepts_numbers(self, strict_normalizer):
        assert strict_normalizer.normalize("42", ColumnType.INTEGER) == 42


# ---------------------------------------------------------------------------
# UUID and passthrough
# ---------------------------------------------------------------------------


class TestUuid:
    def test_canonical_uuid_passes(self, normalizer):
        assert normalizer.normalize(VALID_UUID, ColumnType.UUID) == VALID_UUID

    def test_uppercase_uuid_passes(self, normalizer):
        assert normalizer.normalize(VALID_UUID.upper(), ColumnType.UUID) == VALID_UUID.upper()

    @pytest.mark.parametrize(
        "raw",
        [
            "not-a-uuid",
            "123e4567-e89b-62d3-a456-426614174000",
            "123e4567-e89b-12d3-c456-426614174000",
            "123e4567e89b12d3a456426614174000",
            f"{VALID_UUID}0",
        ],
    )
    def test_invalid_uuid_raises(self, normalizer, raw):
        with pytest.raises(InvalidValueError) as excinfo:
            normalizer.normalize(raw, ColumnType.UUID)
        assert str(excinfo.value) == f"Invalid UUID: {raw}"


def test_text_passes_through_unchanged(normalizer):
    assert normalizer.normalize(5, ColumnType.TEXT) == 5
    assert normalizer.normalize("Alice", ColumnType.TEXT) == "Alice"


def test_cell_text_drops_integral_fraction():
    assert cell_text(30.0) == "30"
    assert cell_text(30.5) == "30.5"
    assert cell_text(True) == "true"
