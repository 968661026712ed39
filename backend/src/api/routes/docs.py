"""HTTP API routes for note documents."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from ...models.document import (
    ChatTranscript,
    DeleteResult,
    DocumentCreate,
    DocumentOut,
    DocumentUpdate,
    ExportFormat,
)
from ...services.config import get_config
from ...services.database import get_database_service
from ...services.docx_export import DOCX_MEDIA_TYPE, render_docx
from ...services.documents import DocumentNotFound, DocumentService, InvalidDocumentId
from ...services.html_text import export_filename, html_to_text, render_export_html
from ...services.pdf_import import PdfImportError, convert_pdf
from ..middleware import OwnerContext, get_owner_context

logger = logging.getLogger(__name__)

router = APIRouter()


def get_document_service() -> DocumentService:
    """Document service bound to the configured collection."""
    return DocumentService(get_database_service().collection())


def _invalid_id(exc: InvalidDocumentId) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "invalid_id", "message": "invalid id", "detail": {"id": exc.doc_id}},
    )


def _not_found(exc: DocumentNotFound) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "not_found", "message": "not found", "detail": {"id": exc.doc_id}},
    )


@router.get("/api/docs", response_model=list[DocumentOut])
def list_docs(
    q: Optional[str] = Query(None, description="Case-insensitive title filter"),
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    """List the owner's documents, most recently edited first."""
    return service.list_documents(owner.owner, q)


@router.post("/api/docs", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
def create_doc(
    create: Optional[DocumentCreate] = None,
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    """Create a document; missing fields fall back to the untitled defaults."""
    create = create or DocumentCreate()
    return service.create_document(
        owner.owner, title=create.title, content_html=create.content_html
    )


# Declared before /api/docs/{doc_id} routes so "import" is never taken for an id.
@router.post(
    "/api/docs/import", response_model=DocumentOut, status_code=status.HTTP_201_CREATED
)
def import_pdf(
    file: UploadFile = File(..., description="PDF to convert into a document"),
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    """Create a document from the text of an uploaded PDF."""
    limit = get_config().max_upload_bytes
    data = file.file.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": "payload_too_large",
                "message": f"PDF exceeds {limit} bytes",
                "detail": {"limit": limit},
            },
        )

    try:
        title, content_html = convert_pdf(file.filename, data)
    except PdfImportError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_pdf", "message": str(exc)},
        ) from exc

    return service.create_document(owner.owner, title=title, content_html=content_html)


@router.get("/api/docs/{doc_id}", response_model=DocumentOut)
def get_doc(
    doc_id: str,
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    try:
        return service.get_document(owner.owner, doc_id)
    except InvalidDocumentId as exc:
        raise _invalid_id(exc) from exc
    except DocumentNotFound as exc:
        raise _not_found(exc) from exc


@router.put("/api/docs/{doc_id}", response_model=DocumentOut)
def update_doc(
    doc_id: str,
    update: Optional[DocumentUpdate] = None,
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    """Partial update of title and/or content; the edit timestamp always moves."""
    update = update or DocumentUpdate()
    try:
        return service.update_document(
            owner.owner, doc_id, title=update.title, content_html=update.content_html
        )
    except InvalidDocumentId as exc:
        raise _invalid_id(exc) from exc
    except DocumentNotFound as exc:
        raise _not_found(exc) from exc


@router.delete("/api/docs/{doc_id}", response_model=DeleteResult)
def delete_doc(
    doc_id: str,
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    """Delete the document; succeeds even if it was already gone."""
    try:
        service.delete_document(owner.owner, doc_id)
    except InvalidDocumentId as exc:
        raise _invalid_id(exc) from exc
    return DeleteResult(ok=True)


@router.get("/api/docs/{doc_id}/chat", response_model=ChatTranscript)
def get_chat(
    doc_id: str,
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    try:
        messages = service.get_chat(owner.owner, doc_id)
    except InvalidDocumentId as exc:
        raise _invalid_id(exc) from exc
    except DocumentNotFound as exc:
        raise _not_found(exc) from exc
    return ChatTranscript(messages=messages)


@router.put("/api/docs/{doc_id}/chat", response_model=ChatTranscript)
def replace_chat(
    doc_id: str,
    transcript: ChatTranscript,
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    """Replace the whole chat transcript of a document."""
    try:
        messages = service.replace_chat(
            owner.owner, doc_id, [message.model_dump() for message in transcript.messages]
        )
    except InvalidDocumentId as exc:
        raise _invalid_id(exc) from exc
    except DocumentNotFound as exc:
        raise _not_found(exc) from exc
    return ChatTranscript(messages=messages)


@router.get("/api/docs/{doc_id}/export")
def export_doc(
    doc_id: str,
    format: ExportFormat = Query(ExportFormat.HTML, description="html, txt or docx"),
    owner: OwnerContext = Depends(get_owner_context),
    service: DocumentService = Depends(get_document_service),
):
    """Download the document as a standalone HTML page, plain text or Word file."""
    try:
        doc = service.get_document(owner.owner, doc_id)
    except InvalidDocumentId as exc:
        raise _invalid_id(exc) from exc
    except DocumentNotFound as exc:
        raise _not_found(exc) from exc

    if format is ExportFormat.DOCX:
        body = render_docx(doc["title"], doc["contentHtml"])
        media_type = DOCX_MEDIA_TYPE
    elif format is ExportFormat.TXT:
        body = html_to_text(doc["contentHtml"])
        media_type = "text/plain; charset=utf-8"
    else:
        body = render_export_html(doc["title"], doc["contentHtml"])
        media_type = "text/html; charset=utf-8"

    filename = export_filename(doc["title"], format.value)
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


__all__ = ["router", "get_document_service"]
