"""Member document lifecycle.

Bytes never pass through the API. The service hands out presigned URLs and
keeps the document row in step with object storage:

    initiate  -> row PENDING, presigned PUT
    complete  -> HEAD the object, verify size -> READY | FAILED
    replace   -> new key, row back to PENDING, old object removed
    delete    -> object removed, row DELETED (terminal)

Every transition goes through ``_transition`` which enforces the state
machine, writes the audit entry and counts the transition.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from fastapi import Request
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..config import get_settings
from ..domain.documents.document_status import DocumentStatus, can_transition
from ..domain.documents.ports.object_storage_port import ObjectStoragePort
from ..domain.documents.validation import (
    format_size_limit,
    get_extension,
    is_supported_mime_type,
    validate_extension,
    validate_file_size,
)
from ..errors import BadRequestError, ConflictError, NotFoundError, StorageUnavailableError
from ..infrastructure.storage.s3_storage_adapter import StorageError
from ..members.service import MemberService
from ..models.document import Document
from ..models.member import Member
from ..models.organisation import Organisation
from ..models.user import User
from ..observability.metrics import (
    document_transitions_total,
    document_upload_bytes,
    storage_errors_total,
)
from .repository import DocumentRepository
from .schemas import CompleteUploadRequest, UploadRequest

logger = logging.getLogger(__name__)

DOCUMENT_NOT_FOUND = "Document not found"
DOCUMENT_NOT_READY = "Document not ready"
OBJECT_NOT_FOUND = "Object not found in storage"


@dataclass
class UploadTicket:
    document: Document
    key: str
    upload_url: str
    expires_in: int
    headers: Dict[str, str]


@dataclass
class DownloadLink:
    document: Document
    url: str
    expires_in: int


def build_object_key(org_id: UUID, member_id: UUID, extension: str) -> str:
    """Object key ``{org_id}/{member_id}/{uuid4}{ext}``."""
    return f"{org_id}/{member_id}/{uuid4()}{extension}"


class DocumentService:
    """Documents of one member, scoped to the member's organisation."""

    def __init__(self, db: Session, storage: ObjectStoragePort):
        self.db = db
        self.storage = storage
        self.documents = DocumentRepository(db)
        self.settings = get_settings()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_member(self, organisation: Organisation, member_id: UUID) -> Member:
        return MemberService(self.db).get(organisation, member_id)

    def _get_document(self, member: Member, document_id: UUID) -> Document:
        """Load a live document; DELETED documents are reported as missing."""
        document = self.documents.get_for_member(member.org_id, member.id, document_id)
        if document is None or document.status == DocumentStatus.DELETED.value:
            raise NotFoundError(DOCUMENT_NOT_FOUND)
        return document

    def _transition(
        self,
        document: Document,
        to_status: DocumentStatus,
        action: str,
        actor: User,
        request: Optional[Request],
        metadata: Optional[dict] = None,
    ) -> None:
        from_status = DocumentStatus(document.status) if document.status else None
        if not can_transition(from_status, to_status):
            raise ConflictError(
                f"Cannot change document status from {document.status} to {to_status.value}"
            )
        document.status = to_status.value
        self.db.flush()

        log_from_request(
            db=self.db,
            request=request,
            action=action,
            org_id=document.org_id,
            actor_id=actor.id,
            entity_type="document",
            entity_id=document.id,
            metadata={
                "member_id": str(document.member_id),
                "from_status": from_status.value if from_status else None,
                "to_status": to_status.value,
                **(metadata or {}),
            },
        )
        document_transitions_total.labels(to_status=to_status.value).inc()

    def _fail(
        self,
        document: Document,
        actor: User,
        request: Optional[Request],
        reason: str,
    ) -> None:
        """Mark FAILED and commit, so the state survives the error response."""
        self._transition(
            document,
            DocumentStatus.FAILED,
            "DOCUMENT_FAILED",
            actor,
            request,
            metadata={"reason": reason},
        )
        self.db.commit()
        logger.warning(
            "Document upload failed verification",
            extra={"document_id": document.id, "reason": reason},
        )

    async def _delete_object_quietly(self, key: str) -> None:
        """Remove an object; failures are logged and otherwise ignored."""
        try:
            await self.storage.delete_file(key)
        except StorageError as e:
            storage_errors_total.labels(operation="delete").inc()
            logger.warning(f"Could not delete object {key}: {e}")

    async def _presign_upload(self, key: str, content_type: str) -> str:
        try:
            return await self.storage.generate_presigned_upload_url(
                key,
                content_type,
                expires_in_seconds=self.settings.UPLOAD_URL_EXPIRES_SECONDS,
            )
        except StorageError as e:
            storage_errors_total.labels(operation="presign_upload").inc()
            logger.error(f"Upload URL generation failed for {key}: {e}")
            raise StorageUnavailableError("Could not create upload URL")

    def _check_file(self, file_name: str, file_type: str) -> str:
        valid, error = validate_extension(file_name)
        if not valid:
            raise BadRequestError(error)
        if not is_supported_mime_type(file_type):
            raise BadRequestError(f"Unsupported file type: {file_type}")
        return get_extension(file_name)

    def _ticket(self, document: Document, upload_url: str) -> UploadTicket:
        return UploadTicket(
            document=document,
            key=document.s3_key,
            upload_url=upload_url,
            expires_in=self.settings.UPLOAD_URL_EXPIRES_SECONDS,
            headers=self.storage.required_upload_headers(document.file_type),
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def initiate_upload(
        self,
        organisation: Organisation,
        member_id: UUID,
        data: UploadRequest,
        actor: User,
        request: Optional[Request] = None,
    ) -> UploadTicket:
        """Create a PENDING document and a presigned PUT URL for it.

        Raises:
            NotFoundError: Member not in this organisation
            BadRequestError: Extension not allowed
            StorageUnavailableError: URL could not be signed
        """
        member = self._get_member(organisation, member_id)
        extension = self._check_file(data.file_name, data.file_type)
        key = build_object_key(organisation.id, member.id, extension)

        upload_url = await self._presign_upload(key, data.file_type)

        document = self.documents.create(
            org_id=organisation.id,
            member_id=member.id,
            s3_key=key,
            file_name=data.file_name,
            file_type=data.file_type,
            document_type=data.document_type.value,
            status=DocumentStatus.PENDING.value,
        )
        log_from_request(
            db=self.db,
            request=request,
            action="DOCUMENT_UPLOAD_INITIATED",
            org_id=organisation.id,
            actor_id=actor.id,
            entity_type="document",
            entity_id=document.id,
            metadata={
                "member_id": str(member.id),
                "file_name": data.file_name,
                "document_type": document.document_type,
                "to_status": DocumentStatus.PENDING.value,
            },
        )
        document_transitions_total.labels(to_status=DocumentStatus.PENDING.value).inc()
        self.db.commit()
        self.db.refresh(document)

        logger.info(
            "Document upload initiated",
            extra={"document_id": document.id, "org_id": organisation.id},
        )
        return self._ticket(document, upload_url)

    async def complete_upload(
        self,
        organisation: Organisation,
        member_id: UUID,
        data: CompleteUploadRequest,
        actor: User,
        request: Optional[Request] = None,
    ) -> Document:
        """Verify the uploaded object and mark the document READY or FAILED.

        Raises:
            NotFoundError: Member or document not found
            ConflictError: Document is not PENDING
            BadRequestError: Size over the limit, object missing, or size mismatch
        """
        member = self._get_member(organisation, member_id)
        document = self._get_document(member, data.document_id)
        if document.status != DocumentStatus.PENDING.value:
            raise ConflictError(f"Document is not awaiting upload (status {document.status})")

        max_size = self.settings.MAX_DOCUMENT_SIZE_BYTES
        too_large = f"File size exceeds maximum limit of {format_size_limit(max_size)}"

        if data.expected_size is not None and data.expected_size > max_size:
            await self._delete_object_quietly(document.s3_key)
            self._fail(document, actor, request, "size_limit")
            raise BadRequestError(too_large)

        try:
            head = await self.storage.head_object(document.s3_key)
        except FileNotFoundError:
            self._fail(document, actor, request, "object_missing")
            raise BadRequestError(OBJECT_NOT_FOUND)
        except StorageError as e:
            storage_errors_total.labels(operation="head").inc()
            logger.error(f"HEAD failed for {document.s3_key}: {e}")
            self._fail(document, actor, request, "object_unreachable")
            raise BadRequestError(OBJECT_NOT_FOUND)

        size = head.size_bytes
        if data.expected_size is not None and data.expected_size != size:
            self._fail(document, actor, request, "size_mismatch")
            raise BadRequestError(
                f"File size mismatch. Expected {data.expected_size} bytes, got {size} bytes"
            )

        valid, error = validate_file_size(size, max_size)
        if not valid:
            if size > max_size:
                await self._delete_object_quietly(document.s3_key)
                self._fail(document, actor, request, "size_limit")
                raise BadRequestError(too_large)
            self._fail(document, actor, request, "empty_object")
            raise BadRequestError(error)

        document.file_size = size
        self._transition(
            document,
            DocumentStatus.READY,
            "DOCUMENT_READY",
            actor,
            request,
            metadata={"file_size": size},
        )
        self.db.commit()
        self.db.refresh(document)
        document_upload_bytes.observe(size)
        return document

    def list_documents(self, organisation: Organisation, member_id: UUID) -> List[Document]:
        """READY documents of a member, newest first."""
        member = self._get_member(organisation, member_id)
        return self.documents.list_for_member(organisation.id, member.id)

    async def get_download_link(
        self,
        organisation: Organisation,
        member_id: UUID,
        document_id: UUID,
    ) -> DownloadLink:
        """Presigned GET for a READY document.

        Raises:
            NotFoundError: Member or document not found
            BadRequestError: Document is not READY
            StorageUnavailableError: URL could not be signed
        """
        member = self._get_member(organisation, member_id)
        document = self._get_document(member, document_id)
        if document.status != DocumentStatus.READY.value:
            raise BadRequestError(DOCUMENT_NOT_READY)

        expires_in = self.settings.DOWNLOAD_URL_EXPIRES_SECONDS
        try:
            url = await self.storage.generate_presigned_download_url(
                document.s3_key,
                document.file_name,
                expires_in_seconds=expires_in,
            )
        except StorageError as e:
            storage_errors_total.labels(operation="presign_download").inc()
            logger.error(f"Download URL generation failed for {document.s3_key}: {e}")
            raise StorageUnavailableError("Could not create download URL")
        return DownloadLink(document=document, url=url, expires_in=expires_in)

    async def replace_document(
        self,
        organisation: Organisation,
        member_id: UUID,
        document_id: UUID,
        data: UploadRequest,
        actor: User,
        request: Optional[Request] = None,
    ) -> UploadTicket:
        """Point the document at a new object and issue a new upload URL.

        The document goes back to PENDING until the new upload is completed.
        The previous object is removed after the row is updated.
        """
        member = self._get_member(organisation, member_id)
        document = self._get_document(member, document_id)
        extension = self._check_file(data.file_name, data.file_type)

        old_key = document.s3_key
        new_key = build_object_key(organisation.id, member.id, extension)
        upload_url = await self._presign_upload(new_key, data.file_type)

        old_file_name = document.file_name
        document.s3_key = new_key
        document.file_name = data.file_name
        document.file_type = data.file_type
        document.document_type = data.document_type.value
        document.file_size = None
        self._transition(
            document,
            DocumentStatus.PENDING,
            "DOCUMENT_REPLACED",
            actor,
            request,
            metadata={"old_file_name": old_file_name, "file_name": data.file_name},
        )
        self.db.commit()
        self.db.refresh(document)

        await self._delete_object_quietly(old_key)
        return self._ticket(document, upload_url)

    async def delete_document(
        self,
        organisation: Organisation,
        member_id: UUID,
        document_id: UUID,
        actor: User,
        request: Optional[Request] = None,
    ) -> None:
        """Remove the object and mark the document DELETED."""
        member = self._get_member(organisation, member_id)
        document = self._get_document(member, document_id)

        await self._delete_object_quietly(document.s3_key)
        self._transition(document, DocumentStatus.DELETED, "DOCUMENT_DELETED", actor, request)
        self.db.commit()
