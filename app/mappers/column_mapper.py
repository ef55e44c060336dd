"""
app/mappers/column_mapper.py

Header and file name sanitization into SQL identifiers.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from app.domain.sheet_ingestion import ColumnDescriptor
from app.mappers.column_types import ColumnTypeRegistry

_IDENTIFIER_PATTERN = re.compile(r"[^a-z0-9_]")


def sanitize_identifier(name: str) -> str:
    """
    Lower-case a name and replace every character outside [a-z0-9_] with `_`.
    """

    return _IDENTIFIER_PATTERN.sub("_", str(name).lower())


def table_name_from_file_name(file_name: str) -> str:
    """
    Derive the destination table name from an uploaded file's base name.
    """

    return sanitize_identifier(Path(file_name).stem)


def build_column_descriptors(
    headers: Sequence[str],
    registry: ColumnTypeRegistry,
) -> list[ColumnDescriptor]:
    """
    Build one descriptor per header, in sheet order.

    Headers that sanitize to an already used name get a numeric suffix
    (`first_name`, `first_name_1`, ...), so no two columns share a name.
    """

    seen: set[str] = set()
    descriptors: list[ColumnDescriptor] = []
    for header in headers:
        base = sanitize_identifier(header)
        candidate = base
        suffix = 1
        while candidate in seen:
            candidate = f"{base}_{suffix}"
            suffix += 1
        seen.add(candidate)
        descriptors.append(
            ColumnDescriptor(
                original_name=header,
                sanitized_name=candidate,
                target_type=registry.type_of(candidate),
            )
        )
    return descriptors


def column_map(columns: Sequence[ColumnDescriptor]) -> dict[str, str]:
    return {column.original_name: column.sanitized_name for column in columns}
