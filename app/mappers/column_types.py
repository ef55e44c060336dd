"""
app/mappers/column_types.py

Static lookup from sanitized column name to destination column type.

The built-in map is extended (and overridden) by an operator-controlled JSON
file, `config/column_types.json` by default. Types are never inferred from
sheet data.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from functools import lru_cache
from pathlib import Path

from sqlalchemy import Boolean, DateTime, Double, Float, Integer, Numeric, Text, Uuid
from sqlalchemy.types import TypeEngine

from app.config import get_sheet_ingestion_settings

logger = logging.getLogger(__name__)


class ColumnType:
    TEXT = "TEXT"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    DOUBLE_PRECISION = "DOUBLE PRECISION"
    DECIMAL = "DECIMAL"
    NUMERIC = "NUMERIC"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"
    UUID = "UUID"


FLOAT_FAMILY = frozenset(
    {
        ColumnType.FLOAT,
        ColumnType.DOUBLE_PRECISION,
        ColumnType.DECIMAL,
        ColumnType.NUMERIC,
    }
)

_SQL_TYPE_FACTORIES: dict[str, Callable[[], TypeEngine]] = {
    ColumnType.TEXT: Text,
    ColumnType.INTEGER: Integer,
    ColumnType.FLOAT: Float,
    ColumnType.DOUBLE_PRECISION: Double,
    ColumnType.DECIMAL: Numeric,
    ColumnType.NUMERIC: Numeric,
    ColumnType.BOOLEAN: Boolean,
    ColumnType.TIMESTAMP: DateTime,
    ColumnType.UUID: lambda: Uuid(as_uuid=False),
}

ALL_COLUMN_TYPES = frozenset(_SQL_TYPE_FACTORIES)

DEFAULT_COLUMN_TYPES: dict[str, str] = {
    "id": ColumnType.UUID,
    "property_id": ColumnType.UUID,
    "owner_id": ColumnType.UUID,
    "age": ColumnType.INTEGER,
    "bedrooms": ColumnType.INTEGER,
    "bathrooms": ColumnType.INTEGER,
    "year_built": ColumnType.INTEGER,
    "price": ColumnType.NUMERIC,
    "area_sqft": ColumnType.DOUBLE_PRECISION,
    "latitude": ColumnType.DOUBLE_PRECISION,
    "longitude": ColumnType.DOUBLE_PRECISION,
    "is_active": ColumnType.BOOLEAN,
    "is_furnished": ColumnType.BOOLEAN,
    "created_at": ColumnType.TIMESTAMP,
    "updated_at": ColumnType.TIMESTAMP,
    "listed_at": ColumnType.TIMESTAMP,
}


class ColumnTypeConfigError(ValueError):
    """
    Raised when the column type mapping contains an unknown type name.
    """


def normalize_type_name(raw: str) -> str:
    """
    Canonicalize a type name (`double  precision` -> `DOUBLE PRECISION`).
    """

    normalized = " ".join(str(raw).split()).upper()
    if normalized not in ALL_COLUMN_TYPES:
        allowed = ", ".join(sorted(ALL_COLUMN_TYPES))
        raise ColumnTypeConfigError(f"Unknown column type '{raw}'. Allowed: {allowed}.")
    return normalized


def sql_type_for(column_type: str) -> TypeEngine:
    """
    Return a fresh SQLAlchemy type instance for a column type name.
    """

    factory = _SQL_TYPE_FACTORIES.get(column_type, Text)
    return factory()


class ColumnTypeRegistry:
    """
    Total, side-effect free lookup of column types. Unknown names are TEXT.
    """

    def __init__(self, mapping: Mapping[str, str] | None = None) -> None:
        types = dict(DEFAULT_COLUMN_TYPES)
        for column_name, type_name in (mapping or {}).items():
            types[str(column_name).strip().lower()] = normalize_type_name(type_name)
        self._types = types

    def type_of(self, column_name: str) -> str:
        return self._types.get(column_name, ColumnType.TEXT)

    def sql_type_of(self, column_name: str) -> TypeEngine:
        return sql_type_for(self.type_of(column_name))

    def as_dict(self) -> dict[str, str]:
        return dict(self._types)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "ColumnTypeRegistry":
        """
        Build a registry from the defaults plus a JSON object file.

        A missing file yields the defaults only.
        """

        config_path = Path(path)
        if not config_path.exists():
            logger.info("Column type file %s not found; using built-in types only", config_path)
            return cls()

        with config_path.open("r", encoding="utf-8") as fp:
            loaded = json.load(fp)
        if not isinstance(loaded, dict):
            raise ColumnTypeConfigError(
                f"Column type file {config_path} must contain a JSON object."
            )
        return cls(loaded)


@lru_cache(maxsize=1)
def get_column_type_registry() -> ColumnTypeRegistry:
    """
    Build and cache the registry from the configured JSON file.
    """

    settings = get_sheet_ingestion_settings()
    registry = ColumnTypeRegistry.from_json_file(settings.column_types_path)
    logger.info("Loaded %d column type mappings", len(registry.as_dict()))
    return registry
