"""
app/repositories package marker.
"""

from app.repositories.destination_table_repository import (
    DestinationTableRepository,
    TablePersistenceError,
)

__all__ = [
    "DestinationTableRepository",
    "TablePersistenceError",
]
