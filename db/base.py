"""
db/base.py

Declarative base for the service's own bookkeeping tables.

Destination tables created from uploaded sheets are built at runtime with
SQLAlchemy Core and are not registered here.
"""

from typing import Any

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    All ORM models must inherit from this class.
    """

    type_annotation_map: dict[type, Any] = {}
