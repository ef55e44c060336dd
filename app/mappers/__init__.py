"""
app/mappers package marker.
"""

from app.mappers.column_mapper import (
    build_column_descriptors,
    column_map,
    sanitize_identifier,
    table_name_from_file_name,
)
from app.mappers.column_types import (
    ColumnType,
    ColumnTypeConfigError,
    ColumnTypeRegistry,
    get_column_type_registry,
)

__all__ = [
    "ColumnType",
    "ColumnTypeConfigError",
    "ColumnTypeRegistry",
    "build_column_descriptors",
    "column_map",
    "get_column_type_registry",
    "sanitize_identifier",
    "table_name_from_file_name",
]
