"""
app/parsing/sheet_reader.py

Decode the first worksheet of an uploaded file into header-keyed records.

xlsx and xlsm workbooks are read with openpyxl, legacy xls workbooks with
xlrd.

Workbook cells keep their native scalar types. Date and time cells are
converted back to spreadsheet serial numbers so every downstream consumer
sees the same representation regardless of how the cell was formatted.
CSV cells are always strings.
"""

from __future__ import annotations

import csv
import io
import struct
import zipfile
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.datetime import to_excel
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from app.domain.sheet_ingestion import DecodedSheet, SheetRecord

WORKBOOK_EXTENSIONS = frozenset({".xlsx", ".xlsm"})
LEGACY_WORKBOOK_EXTENSIONS = frozenset({".xls"})
CSV_EXTENSIONS = frozenset({".csv"})
SUPPORTED_EXTENSIONS = WORKBOOK_EXTENSIONS | LEGACY_WORKBOOK_EXTENSIONS | CSV_EXTENSIONS

EMPTY_HEADER = "__EMPTY"

# Days between the 1900 and 1904 date systems.
_DATE_1904_OFFSET = 1462


class SheetFormatError(ValueError):
    """
    Raised when an uploaded file cannot be decoded as a spreadsheet.
    """


def read_sheet(*, file_name: str, content: bytes) -> DecodedSheet:
    """
    Decode `content` according to the extension of `file_name`.
    """

    extension = Path(file_name).suffix.lower()
    if extension in CSV_EXTENSIONS:
        sheet_name, rows = None, _read_csv_rows(content)
    elif extension in WORKBOOK_EXTENSIONS:
        sheet_name, rows = _read_workbook_rows(content)
    elif extension in LEGACY_WORKBOOK_EXTENSIONS:
        sheet_name, rows = _read_legacy_workbook_rows(content)
    else:
        allowed = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        raise SheetFormatError(f"Unsupported file type '{extension}'. Allowed: {allowed}.")
    return _build_sheet(rows, sheet_name=sheet_name)


def _read_workbook_rows(content: bytes) -> tuple[str, list[tuple[Any, ...]]]:
    try:
        workbook = load_workbook(filename=io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise SheetFormatError("Uploaded workbook could not be read.") from exc

    try:
        if not workbook.worksheets:
            raise SheetFormatError("Uploaded workbook has no worksheets.")
        sheet = workbook.worksheets[0]
        rows = [
            tuple(_cell_value(cell) for cell in row)
            for row in sheet.iter_rows(values_only=True)
        ]
        return sheet.title, rows
    finally:
        workbook.close()


def _read_legacy_workbook_rows(content: bytes) -> tuple[str, list[tuple[Any, ...]]]:
    try:
        book = xlrd.open_workbook(file_contents=content)
    except (xlrd.XLRDError, CompDocError, struct.error, ValueError) as exc:
        raise SheetFormatError("Uploaded workbook could not be read.") from exc

    try:
        if book.nsheets == 0:
            raise SheetFormatError("Uploaded workbook has no worksheets.")
        sheet = book.sheet_by_index(0)
        rows = [
            tuple(_legacy_cell_value(cell, book.datemode) for cell in sheet.row(index))
            for index in range(sheet.nrows)
        ]
        return sheet.name, rows
    finally:
        book.release_resources()


def _read_csv_rows(content: bytes) -> list[tuple[Any, ...]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise SheetFormatError("CSV must be UTF-8 encoded.") from exc

    try:
        return [tuple(row) for row in csv.reader(io.StringIO(text, newline=""))]
    except csv.Error as exc:
        raise SheetFormatError(f"Invalid CSV format: {exc}") from exc


def _cell_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time, timedelta)):
        return to_excel(value)
    return value


def _legacy_cell_value(cell: Any, datemode: int) -> Any:
    """
    Map an xlrd cell onto the scalars openpyxl yields for the same content.

    Date cells are already serials; 1904-based workbooks are shifted onto the
    1900 calendar.
    """

    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        return cell.value + _DATE_1904_OFFSET if datemode == 1 else cell.value
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#ERR!")
    if cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
        return int(cell.value)
    return cell.value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _build_sheet(
    rows: Sequence[tuple[Any, ...]],
    *,
    sheet_name: str | None,
) -> DecodedSheet:
    if not rows:
        return DecodedSheet(headers=(), records=[], sheet_name=sheet_name)

    header_row = rows[0]
    data_rows = rows[1:]
    width = _used_width(header_row, data_rows)
    header_cells = list(header_row[:width]) + [None] * max(0, width - len(header_row))
    headers = _unique_headers(header_cells)

    records: list[SheetRecord] = []
    for row_number, values in enumerate(data_rows, start=2):
        cells = list(values[:width]) + [None] * max(0, width - len(values))
        if all(_is_blank(cell) for cell in cells):
            continue
        records.append(
            SheetRecord(
                row_number=row_number,
                values={header: cell for header, cell in zip(headers, cells)},
            )
        )
    return DecodedSheet(headers=tuple(headers), records=records, sheet_name=sheet_name)


def _used_width(header_row: tuple[Any, ...], data_rows: Sequence[tuple[Any, ...]]) -> int:
    """
    Number of leading columns that carry a header or at least one value.
    """

    width = 0
    for index, header in enumerate(header_row):
        if not _is_blank(header):
            width = index + 1
    for values in data_rows:
        for index in range(len(values) - 1, width - 1, -1):
            if not _is_blank(values[index]):
                width = index + 1
                break
    return width


def _unique_headers(header_cells: Sequence[Any]) -> list[str]:
    """
    Stringify header cells; blanks become `__EMPTY` and repeats get `_1`, `_2`.
    """

    seen: set[str] = set()
    headers: list[str] = []
    for cell in header_cells:
        base = EMPTY_HEADER if _is_blank(cell) else _header_text(cell)
        candidate = base
        suffix = 1
        while candidate in seen:
            candidate = f"{base}_{suffix}"
            suffix += 1
        seen.add(candidate)
        headers.append(candidate)
    return headers


def _header_text(cell: Any) -> str:
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell)
