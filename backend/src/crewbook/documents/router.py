"""Member document endpoints.

Mounted under ``/organisations/{slug}/members/{member_id}/documents``.
Admins, HR and the member itself can upload, list, download and replace;
only admins and HR can delete.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..domain.documents.ports.object_storage_port import ObjectStoragePort
from ..infrastructure.storage.factory import get_storage_adapter
from ..organisations.dependencies import (
    OrganisationContext,
    is_organisation_admin_or_hr,
    is_organisation_admin_or_hr_or_self,
)
from .schemas import (
    CompleteUploadRequest,
    CompleteUploadResponse,
    DocumentListResponse,
    DocumentResponse,
    DownloadUrlResponse,
    InitiateUploadRequest,
    ReplaceDocumentRequest,
    UploadTicketResponse,
)
from .service import DocumentService, UploadTicket

router = APIRouter(
    prefix="/organisations/{slug}/members/{member_id}/documents",
    tags=["Documents"],
)

SelfOrAdminOrHR = Annotated[OrganisationContext, Depends(is_organisation_admin_or_hr_or_self)]
Storage = Annotated[ObjectStoragePort, Depends(get_storage_adapter)]


def _ticket_response(ticket: UploadTicket) -> UploadTicketResponse:
    return UploadTicketResponse(
        document_id=ticket.document.id,
        key=ticket.key,
        upload_url=ticket.upload_url,
        expires_in=ticket.expires_in,
        headers=ticket.headers,
    )


@router.post("/initiate", response_model=UploadTicketResponse, status_code=status.HTTP_201_CREATED)
async def initiate_upload(
    member_id: UUID,
    data: InitiateUploadRequest,
    request: Request,
    ctx: SelfOrAdminOrHR,
    storage: Storage,
    db: Annotated[Session, Depends(get_db)],
):
    """Start an upload: creates a PENDING document and returns a presigned PUT.

    The client then PUTs the file to ``upload_url`` with ``headers`` and calls
    ``/complete``.

    Raises:
        HTTPException: 400 if the file extension is not allowed
        HTTPException: 404 if the member is not in this organisation
    """
    ticket = await DocumentService(db, storage).initiate_upload(
        ctx.organisation, member_id, data, ctx.user, request
    )
    return _ticket_response(ticket)


@router.post("/complete", response_model=CompleteUploadResponse)
async def complete_upload(
    member_id: UUID,
    data: CompleteUploadRequest,
    request: Request,
    ctx: SelfOrAdminOrHR,
    storage: Storage,
    db: Annotated[Session, Depends(get_db)],
):
    """Confirm an upload. The stored object is checked before the document is READY.

    Raises:
        HTTPException: 400 if the object is missing, too large, or its size
            differs from ``expected_size`` (the document is marked FAILED)
        HTTPException: 404 if the document does not exist
        HTTPException: 409 if the document is not awaiting an upload
    """
    document = await DocumentService(db, storage).complete_upload(
        ctx.organisation, member_id, data, ctx.user, request
    )
    return CompleteUploadResponse(document_id=document.id, file_size=document.file_size)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    member_id: UUID,
    ctx: SelfOrAdminOrHR,
    storage: Storage,
    db: Annotated[Session, Depends(get_db)],
):
    """READY documents of the member, newest first."""
    documents = DocumentService(db, storage).list_documents(ctx.organisation, member_id)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents],
        total=len(documents),
    )


@router.get("/{document_id}", response_model=DownloadUrlResponse)
async def get_document(
    member_id: UUID,
    document_id: UUID,
    ctx: SelfOrAdminOrHR,
    storage: Storage,
    db: Annotated[Session, Depends(get_db)],
):
    """Short-lived download URL for a READY document.

    Raises:
        HTTPException: 400 if the document is not READY
        HTTPException: 404 if the document does not exist
    """
    link = await DocumentService(db, storage).get_download_link(
        ctx.organisation, member_id, document_id
    )
    return DownloadUrlResponse(document_id=link.document.id, url=link.url, expires_in=link.expires_in)


@router.put("/{document_id}", response_model=UploadTicketResponse)
async def replace_document(
    member_id: UUID,
    document_id: UUID,
    data: ReplaceDocumentRequest,
    request: Request,
    ctx: SelfOrAdminOrHR,
    storage: Storage,
    db: Annotated[Session, Depends(get_db)],
):
    """Replace the file of a document. The document is PENDING until completed again."""
    ticket = await DocumentService(db, storage).replace_document(
        ctx.organisation, member_id, document_id, data, ctx.user, request
    )
    return _ticket_response(ticket)


@router.delete("/{document_id}")
async def delete_document(
    member_id: UUID,
    document_id: UUID,
    request: Request,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin_or_hr)],
    storage: Storage,
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a document (admin/HR only)."""
    await DocumentService(db, storage).delete_document(
        ctx.organisation, member_id, document_id, ctx.user, request
    )
    return {"ok": True}
