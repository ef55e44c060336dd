"""
app/validators package marker.
"""

from app.validators.sheet_row_validator import SheetRowValidator
from app.validators.upload_validator import UploadValidationError, validate_sheet_upload
from app.validators.value_normalizer import InvalidValueError, ValueNormalizer

__all__ = [
    "InvalidValueError",
    "SheetRowValidator",
    "UploadValidationError",
    "ValueNormalizer",
    "validate_sheet_upload",
]
