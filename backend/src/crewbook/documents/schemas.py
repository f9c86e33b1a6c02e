"""Pydantic schemas for member document endpoints"""

from datetime import datetime
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.documents.document_status import DocumentType

DocumentMimeType = Literal["application/pdf", "image/png", "image/jpeg"]


class UploadRequest(BaseModel):
    """Request body for initiate and replace.

    The extension of ``file_name`` is checked by the service so the client
    gets the documented 400 message rather than a validation error.
    """
    file_name: str = Field(..., min_length=1, max_length=255, examples=["passport.pdf"])
    file_type: DocumentMimeType = Field(..., examples=["application/pdf"])
    document_type: DocumentType = Field(..., examples=["passport"])

    @field_validator("file_name")
    @classmethod
    def strip_file_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("File name is required")
        return v


class InitiateUploadRequest(UploadRequest):
    pass


class ReplaceDocumentRequest(UploadRequest):
    pass


class CompleteUploadRequest(BaseModel):
    document_id: UUID
    expected_size: Optional[int] = Field(None, gt=0, description="Size the client uploaded, in bytes")


class UploadTicketResponse(BaseModel):
    """Presigned PUT for a direct upload to object storage.

    The client must send every header in ``headers`` with the PUT request,
    otherwise the signature does not match.
    """
    document_id: UUID
    key: str
    upload_url: str
    expires_in: int
    headers: Dict[str, str]


class CompleteUploadResponse(BaseModel):
    ok: bool = True
    document_id: UUID
    file_size: int


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    file_name: str
    file_type: str
    document_type: str
    file_size: Optional[int]
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse]
    total: int


class DownloadUrlResponse(BaseModel):
    document_id: UUID
    url: str
    expires_in: int
