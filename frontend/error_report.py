"""
frontend/error_report.py

Builds the downloadable invalid-records workbook.
"""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

INVALID_RECORDS_SHEET = "Invalid Records"


def build_invalid_records_frame(
    invalid_records: Sequence[Mapping[str, Any]],
    headers: Sequence[str] | None = None,
) -> pd.DataFrame:
    """
    One row per rejected record: `Row`, the original columns, then `Error`.

    When headers are not given they are taken from the records in first-seen order.
    """

    if headers is None:
        ordered: dict[str, None] = {}
        for record in invalid_records:
            for key in (record.get("data") or {}):
                ordered.setdefault(str(key), None)
        headers = list(ordered)

    rows: list[dict[str, Any]] = []
    for record in invalid_records:
        data = record.get("data") or {}
        row: dict[str, Any] = {"Row": record.get("row")}
        for header in headers:
            row[header] = data.get(header)
        row["Error"] = record.get("error")
        rows.append(row)
    return pd.DataFrame(rows, columns=["Row", *headers, "Error"])


def invalid_records_to_xlsx(
    invalid_records: Sequence[Mapping[str, Any]],
    headers: Sequence[str] | None = None,
) -> bytes:
    frame = build_invalid_records_frame(invalid_records, headers)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=INVALID_RECORDS_SHEET, index=False)
    return buffer.getvalue()
