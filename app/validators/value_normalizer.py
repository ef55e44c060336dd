"""
app/validators/value_normalizer.py

Cell-level coercion of raw spreadsheet values into typed column values.

Rules, in priority order:
    1. "", "NULL" and missing values are null for every type.
    2. TIMESTAMP: spreadsheet serial (days since 1899-12-30) to
       "YYYY-MM-DD HH:MM:SS". Non-numeric values pass through unchanged.
    3. BOOLEAN: true/1/yes and false/0/no (case-insensitive); anything else null.
    4. INTEGER: lenient base-10 prefix parse; non-numeric yields NaN.
    5. FLOAT family: lenient float prefix parse; non-numeric yields NaN.
    6. UUID: canonical 8-4-4-4-12 form, version 1-5, RFC 4122 variant.
    7. Anything else passes through unchanged.

With strict_numeric enabled, rules 4 and 5 raise instead of yielding NaN.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from typing import Any

from app.mappers.column_types import FLOAT_FAMILY, ColumnType

NOT_A_NUMBER = math.nan

# Serial value of 1970-01-01 in the 1900 date system.
EXCEL_UNIX_EPOCH_SERIAL = 25569
SECONDS_PER_DAY = 86400

_UNIX_EPOCH = datetime(1970, 1, 1)
_NULL_MARKERS = frozenset({"", "NULL"})
_TRUE_VALUES = frozenset({"true", "1", "yes"})
_FALSE_VALUES = frozenset({"false", "0", "no"})

_UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}"
)
_NUMBER = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_NUMERIC_TEXT_PATTERN = re.compile(rf"\s*{_NUMBER}\s*")
_INTEGER_PREFIX_PATTERN = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX_PATTERN = re.compile(rf"\s*({_NUMBER})")


class InvalidValueError(ValueError):
    """
    Raised when a raw cell value cannot be coerced to its column type.
    """

    def __init__(self, message: str, *, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


def cell_text(value: Any) -> str:
    """
    Render a cell the way a spreadsheet displays it (`30.0` -> `"30"`).
    """

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_null_marker(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value in _NULL_MARKERS)


def is_not_a_number(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def serial_to_timestamp(serial: float) -> str:
    """
    Convert a spreadsheet date serial into a naive "YYYY-MM-DD HH:MM:SS".

    The fractional day is rounded half-up to whole seconds; a value that
    rounds to a full day rolls over to midnight of the next date.
    """

    whole_days = math.floor(serial)
    day_start = _UNIX_EPOCH + timedelta(days=whole_days - EXCEL_UNIX_EPOCH_SERIAL)
    seconds = math.floor(SECONDS_PER_DAY * (serial - whole_days) + 0.5)
    moment = day_start + timedelta(seconds=seconds)
    return moment.isoformat(sep=" ", timespec="seconds")


class ValueNormalizer:
    """
    Converts one raw cell value to one typed value for a target column type.
    """

    def __init__(self, *, strict_numeric: bool = False) -> None:
        self._strict_numeric = strict_numeric

    def normalize(self, value: Any, column_type: str) -> Any:
        if is_null_marker(value):
            return None

        if column_type == ColumnType.TIMESTAMP:
            return self._to_timestamp(value)
        if column_type == ColumnType.BOOLEAN:
            return self._to_boolean(value)
        if column_type == ColumnType.INTEGER:
            return self._to_integer(value)
        if column_type in FLOAT_FAMILY:
            return self._to_float(value)
        if column_type == ColumnType.UUID:
            return self._to_uuid(value)
        return value

    def _to_timestamp(self, value: Any) -> Any:
        serial = self._as_serial(value)
        if serial is None:
            return value
        try:
            return serial_to_timestamp(serial)
        except (OverflowError, ValueError) as exc:
            raise InvalidValueError(f"Invalid TIMESTAMP: {value}", value=value) from exc

    @staticmethod
    def _as_serial(value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str) and _NUMERIC_TEXT_PATTERN.fullmatch(value):
            return float(value)
        return None

    @staticmethod
    def _to_boolean(value: Any) -> bool | None:
        text = cell_text(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        return None

    def _to_integer(self, value: Any) -> int | float:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float):
            if math.isfinite(value):
                return int(value)
            return self._not_a_number(value, ColumnType.INTEGER)

        match = _INTEGER_PREFIX_PATTERN.match(cell_text(value))
        if match is None:
            return self._not_a_number(value, ColumnType.INTEGER)
        return int(match.group(1))

    def _to_float(self, value: Any) -> float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)

        match = _FLOAT_PREFIX_PATTERN.match(cell_text(value))
        if match is None:
            return self._not_a_number(value, ColumnType.FLOAT)
        return float(match.group(1))

    @staticmethod
    def _to_uuid(value: Any) -> Any:
        if not _UUID_PATTERN.fullmatch(cell_text(value)):
            raise InvalidValueError(f"Invalid UUID: {value}", value=value)
        return value

    def _not_a_number(self, value: Any, column_type: str) -> float:
        if self._strict_numeric:
            raise InvalidValueError(f"Invalid {column_type}: {value}", value=value)
        return NOT_A_NUMBER
