"""
Document Service - opportunity attachments.

Metadata lives in the `documents` table; bytes live in the configured
file store (services/file_storage.py). When the store is unavailable an
upload is still recorded in metadata-only mode (object_name is NULL),
and such documents cannot be downloaded.
"""

import time
from datetime import timedelta
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy import delete, insert, or_, select

from eduopps.core.auth import create_download_token
from eduopps.core.config import get_settings
from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import documents
from eduopps.services.file_storage import StorageError, get_file_storage

STORAGE_MODE_STORED = "stored"
STORAGE_MODE_METADATA = "metadata"

# Names that mark a document as an application form
FORM_KEYWORDS = ("application", "form")


def add_document(
    opportunity_id: int,
    name: str,
    filename: str,
    content: bytes,
    mime_type: str,
    uploaded_by_id: int
) -> Tuple[dict, str]:
    """
    Store the file and record it.

    Returns:
        (document row, storage mode)
    """
    try:
        object_name = get_file_storage().save(opportunity_id, filename, content, mime_type)
        file_path = object_name
        storage_mode = STORAGE_MODE_STORED
    except StorageError as e:
        logger.warning(f"File storage unavailable, recording metadata only for '{filename}': {e}")
        object_name = None
        file_path = f"fallback_{int(time.time() * 1000)}_{filename}"
        storage_mode = STORAGE_MODE_METADATA

    with get_db_session() as db:
        result = db.execute(insert(documents).values(
            opportunity_id=opportunity_id,
            name=name or filename,
            file_path=file_path,
            file_type=mime_type,
            file_size=len(content),
            object_name=object_name,
            uploaded_by_id=uploaded_by_id,
        ))
        document_id = result.inserted_primary_key[0]

    logger.info(f"Document {document_id} uploaded to opportunity {opportunity_id} ({storage_mode})")
    return get_document_by_id(document_id), storage_mode


def get_document_by_id(document_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(documents).where(documents.c.id == document_id)).fetchone()
    return row_to_dict(row)


def get_documents_by_opportunity(opportunity_id: int) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(
            select(documents)
            .where(documents.c.opportunity_id == opportunity_id)
            .order_by(documents.c.name, documents.c.id)
        ).fetchall()
    return [row_to_dict(r) for r in rows]


def get_form_documents(opportunity_id: int) -> List[dict]:
    """Documents whose names suggest they are application forms."""
    conditions = [documents.c.name.ilike(f"%{keyword}%") for keyword in FORM_KEYWORDS]
    with get_db_session() as db:
        rows = db.execute(
            select(documents)
            .where(documents.c.opportunity_id == opportunity_id, or_(*conditions))
            .order_by(documents.c.name, documents.c.id)
        ).fetchall()
    return [row_to_dict(r) for r in rows]


def build_download_url(document: dict, expires_delta: timedelta) -> str:
    """Absolute signed URL for GET /api/documents/{id}/file."""
    token = create_download_token(document["id"], expires_delta)
    base = get_settings().public_base_url.rstrip("/")
    return f"{base}/api/documents/{document['id']}/file?token={token}"


def read_document_content(document: dict) -> bytes:
    """Raises StorageError when there is no stored object or it cannot be read."""
    if not document.get("object_name"):
        raise StorageError("Document has no stored file")
    return get_file_storage().read(document["object_name"])


def delete_document(document: dict) -> bool:
    """
    Remove the stored object, then the row. A storage failure is logged
    and does not stop the row from being deleted.
    """
    if document.get("object_name"):
        try:
            get_file_storage().delete(document["object_name"])
        except StorageError as e:
            logger.error(f"Failed to delete stored file for document {document['id']}: {e}")

    with get_db_session() as db:
        result = db.execute(delete(documents).where(documents.c.id == document["id"]))
        return result.rowcount > 0
