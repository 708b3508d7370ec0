"""
File Upload Utility - validate opportunity document uploads.

Supported formats:
- PDF (.pdf)
- Word (.doc, .docx)
- Excel (.xls, .xlsx)
- Images (.jpg, .png, .gif)
- Plain Text (.txt)

Max file size: settings.max_upload_mb (default 50MB)
"""

import re
from typing import Tuple
from fastapi import UploadFile, HTTPException

from eduopps.core.config import get_settings

ALLOWED_MIME_TYPES = {
    "application/pdf": "PDF",
    "application/msword": "Word Document",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "Word Document",
    "application/vnd.ms-excel": "Excel Spreadsheet",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "Excel Spreadsheet",
    "image/jpeg": "JPEG Image",
    "image/png": "PNG Image",
    "image/gif": "GIF Image",
    "text/plain": "Plain Text",
}


def sanitize_filename(filename: str) -> str:
    """Keep letters, digits, dot, dash and underscore; everything else becomes '_'."""
    return re.sub(r'[^a-zA-Z0-9._-]', '_', filename)


async def read_validated_upload(file: UploadFile) -> Tuple[bytes, str, str]:
    """
    Read and validate an uploaded document.

    Args:
        file: FastAPI UploadFile

    Returns:
        Tuple of (content, filename, mime_type)

    Raises:
        HTTPException on validation errors
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    mime_type = (file.content_type or "").split(";")[0].strip().lower()
    if mime_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Allowed: PDF, Word, Excel, images and plain text"
        )

    content = await file.read()

    max_bytes = get_settings().max_upload_bytes
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {get_settings().max_upload_mb}MB"
        )

    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    return content, file.filename, mime_type


def get_supported_formats() -> dict:
    """Get info about supported file formats."""
    return {
        "supported_formats": [
            {"mime_type": mime, "name": name} for mime, name in ALLOWED_MIME_TYPES.items()
        ],
        "max_size_mb": get_settings().max_upload_mb
    }
