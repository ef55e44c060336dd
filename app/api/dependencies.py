"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

from app.validators.upload_validator import UploadValidationError, validate_sheet_file_name


def get_sheet_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Reject uploads whose file name is not a supported spreadsheet.
    """

    try:
        validate_sheet_file_name(file.filename)
    except UploadValidationError as exc:
        file.file.close()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Unsupported file.", "error": str(exc)},
        ) from exc
    return file
