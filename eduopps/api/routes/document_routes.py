"""
Document Routes

POST /documents/upload - Upload a document to an opportunity (multipart)
GET /documents/formats - Supported upload formats
GET /documents/opportunity/{opportunity_id} - Documents of an opportunity
GET /documents/{document_id}/download - Signed download link (1 hour)
GET /documents/{document_id}/file?token= - Stream the file for a signed link
DELETE /documents/{document_id} - Delete document
"""

from datetime import timedelta
from fastapi import APIRouter, HTTPException, Depends, UploadFile, File, Form, Query
from fastapi.responses import Response
from loguru import logger
from typing import List

from eduopps.core.auth import get_current_user, verify_download_token
from eduopps.core.config import get_settings
from eduopps.core.permissions import can_delete_document, can_upload_document, can_view_opportunity
from eduopps.services import document_service, opportunity_service
from eduopps.services.file_storage import StorageError
from eduopps.utils.file_upload import read_validated_upload, get_supported_formats, sanitize_filename
from eduopps.schemas.schemas import (
    DocumentResponse, DocumentUploadResponse, DownloadLinkResponse, MessageResponse
)

router = APIRouter(prefix="/documents", tags=["Documents"])


def _get_opportunity_or_404(opportunity_id: int) -> dict:
    opportunity = opportunity_service.get_opportunity_by_id(opportunity_id)
    if not opportunity:
        raise HTTPException(status_code=404, detail="Opportunity not found")
    return opportunity


def _get_document_or_404(document_id: int) -> dict:
    document = document_service.get_document_by_id(document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.post("/upload", response_model=DocumentUploadResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    opportunity_id: int = Form(...),
    title: str = Form(""),
    user: dict = Depends(get_current_user)
):
    """
    Upload PDF, Word, Excel, image or text documents.

    Falls back to metadata-only storage when the file store is unavailable.
    """
    opportunity = _get_opportunity_or_404(opportunity_id)
    if not can_upload_document(user, opportunity):
        raise HTTPException(
            status_code=403,
            detail="You do not have permission to add documents to this opportunity"
        )

    content, filename, mime_type = await read_validated_upload(file)
    document, storage_mode = document_service.add_document(
        opportunity_id, title.strip(), filename, content, mime_type, user["id"]
    )

    message = (
        "Document uploaded successfully (metadata mode)"
        if storage_mode == document_service.STORAGE_MODE_METADATA
        else "Document uploaded successfully"
    )
    return DocumentUploadResponse(**document, message=message, storage_mode=storage_mode)


@router.get("/formats")
async def supported_formats():
    return get_supported_formats()


@router.get("/opportunity/{opportunity_id}", response_model=List[DocumentResponse])
async def list_documents(opportunity_id: int, user: dict = Depends(get_current_user)):
    opportunity = _get_opportunity_or_404(opportunity_id)
    if not can_view_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have access to this opportunity")
    return document_service.get_documents_by_opportunity(opportunity_id)


@router.get("/{document_id}/download", response_model=DownloadLinkResponse)
async def get_download_link(document_id: int, user: dict = Depends(get_current_user)):
    """Signed URL valid for DOWNLOAD_LINK_MINUTES (default one hour)."""
    document = _get_document_or_404(document_id)
    opportunity = _get_opportunity_or_404(document["opportunity_id"])
    if not can_view_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have access to this document")

    if not document["object_name"]:
        raise HTTPException(status_code=503, detail="File storage not available")

    expires = timedelta(minutes=get_settings().download_link_minutes)
    return DownloadLinkResponse(
        download_url=document_service.build_download_url(document, expires),
        file_name=document["name"],
        mime_type=document["file_type"],
        expires_in=int(expires.total_seconds()),
    )


@router.get("/{document_id}/file")
async def download_file(document_id: int, token: str = Query(...)):
    """No bearer token needed: the signed link is the authorisation."""
    if not verify_download_token(token, document_id):
        raise HTTPException(status_code=401, detail="Invalid or expired download link")

    document = _get_document_or_404(document_id)
    try:
        content = document_service.read_document_content(document)
    except StorageError as e:
        logger.error(f"Document {document_id} could not be read: {e}")
        raise HTTPException(
            status_code=503,
            detail="Document storage temporarily unavailable"
        )

    return Response(
        content=content,
        media_type=document["file_type"],
        headers={"Content-Disposition": f'attachment; filename="{sanitize_filename(document["name"])}"'},
    )


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(document_id: int, user: dict = Depends(get_current_user)):
    document = _get_document_or_404(document_id)
    opportunity = _get_opportunity_or_404(document["opportunity_id"])
    if not can_delete_document(user, opportunity, document):
        raise HTTPException(status_code=403, detail="You do not have permission to delete this document")

    document_service.delete_document(document)
    logger.info(f"Document {document_id} deleted by user {user['id']}")
    return MessageResponse(message="Document deleted successfully")
