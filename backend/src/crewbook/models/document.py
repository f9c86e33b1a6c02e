"""Document SQLAlchemy model - metadata for a member file held in object storage"""

from uuid import uuid4

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship

from ..domain.documents.document_status import DocumentStatus, DocumentType
from .base import Base, utcnow


class Document(Base):
    """Document model.

    The bytes never pass through the API: clients upload to and download from
    object storage with presigned URLs. ``s3_key`` has the form
    ``{org_id}/{member_id}/{uuid}{ext}``.
    """
    __tablename__ = "document"
    __table_args__ = (
        Index("ix_document_member_id_status", "member_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(Uuid, ForeignKey("organisation.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(Uuid, ForeignKey("member.id", ondelete="CASCADE"), nullable=False)
    s3_key = Column(String(512), nullable=False, unique=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(100), nullable=False)
    document_type = Column(String(50), nullable=False, default=DocumentType.OTHER.value)
    status = Column(String(20), nullable=False, default=DocumentStatus.PENDING.value)
    file_size = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    organisation = relationship("Organisation", back_populates="documents")
    member = relationship("Member", back_populates="documents")

    def __repr__(self):
        return f"<Document(id={self.id}, file_name='{self.file_name}', status='{self.status}')>"
