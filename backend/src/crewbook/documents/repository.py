"""Document repository for database operations"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from ..domain.documents.document_status import DocumentStatus
from ..models.document import Document


class DocumentRepository:
    """Repository for document table operations.

    Lookups are scoped to both organisation and member so a document id can
    only be reached through the member it belongs to.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_for_member(self, org_id: UUID, member_id: UUID, document_id: UUID) -> Optional[Document]:
        query = select(Document).where(
            and_(
                Document.id == document_id,
                Document.member_id == member_id,
                Document.org_id == org_id,
            )
        )
        return self.db.execute(query).scalars().first()

    def list_for_member(
        self,
        org_id: UUID,
        member_id: UUID,
        status: Optional[DocumentStatus] = DocumentStatus.READY,
    ) -> List[Document]:
        """Documents of a member, newest first (READY only by default)."""
        query = select(Document).where(
            and_(Document.member_id == member_id, Document.org_id == org_id)
        )
        if status is not None:
            query = query.where(Document.status == status.value)
        query = query.order_by(Document.created_at.desc())
        return list(self.db.execute(query).scalars().all())

    def create(self, **fields) -> Document:
        document = Document(**fields)
        self.db.add(document)
        self.db.flush()
        return document
