"""
app/parsing package marker.
"""

from app.parsing.sheet_reader import SUPPORTED_EXTENSIONS, SheetFormatError, read_sheet

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "SheetFormatError",
    "read_sheet",
]
