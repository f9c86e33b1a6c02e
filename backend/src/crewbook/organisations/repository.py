"""Organisation repository for database operations"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.organisation import Organisation


class OrganisationRepository:
    """Repository for organisation table operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, org_id: UUID) -> Optional[Organisation]:
        return self.db.get(Organisation, org_id)

    def get_by_slug(self, slug: str) -> Optional[Organisation]:
        query = select(Organisation).where(Organisation.slug == slug.lower())
        return self.db.execute(query).scalars().first()

    def slug_taken(self, slug: str, exclude_org_id: Optional[UUID] = None) -> bool:
        query = select(Organisation.id).where(Organisation.slug == slug)
        if exclude_org_id is not None:
            query = query.where(Organisation.id != exclude_org_id)
        return self.db.execute(query).first() is not None

    def list_all(self) -> List[Organisation]:
        query = select(Organisation).order_by(Organisation.created_at.desc())
        return list(self.db.execute(query).scalars().all())

    def create(self, **fields) -> Organisation:
        organisation = Organisation(**fields)
        self.db.add(organisation)
        self.db.flush()
        return organisation

    def update(self, organisation: Organisation, **fields) -> Organisation:
        for name, value in fields.items():
            setattr(organisation, name, value)
        self.db.flush()
        return organisation

    def delete(self, organisation: Organisation) -> None:
        self.db.delete(organisation)
        self.db.flush()
