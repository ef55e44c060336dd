"""
app/api/routers package marker.
"""

from app.api.routers.sheet_ingestion import router as sheet_ingestion_router

__all__ = [
    "sheet_ingestion_router",
]
