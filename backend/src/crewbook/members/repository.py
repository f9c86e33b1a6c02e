"""Member repository for database operations"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, selectinload

from ..auth.roles import MemberStatus
from ..models.member import Member


class MemberRepository:
    """Repository for member table operations.

    Every lookup that takes an org_id filters by it, so a member id from
    another organisation behaves exactly like an unknown id.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_in_org(self, org_id: UUID, member_id: UUID) -> Optional[Member]:
        query = select(Member).where(
            and_(Member.id == member_id, Member.org_id == org_id)
        )
        return self.db.execute(query).scalars().first()

    def get_active_membership(self, org_id: UUID, user_id: UUID) -> Optional[Member]:
        """The user's ACTIVE member record in an organisation, if any."""
        query = select(Member).where(
            and_(
                Member.org_id == org_id,
                Member.user_id == user_id,
                Member.status == MemberStatus.ACTIVE.value,
            )
        )
        return self.db.execute(query).scalars().first()

    def get_by_email_in_org(
        self,
        org_id: UUID,
        email: str,
        exclude_member_id: Optional[UUID] = None,
    ) -> Optional[Member]:
        query = select(Member).where(
            and_(Member.org_id == org_id, func.lower(Member.email) == email.strip().lower())
        )
        if exclude_member_id is not None:
            query = query.where(Member.id != exclude_member_id)
        return self.db.execute(query).scalars().first()

    def get_by_user_in_org(self, org_id: UUID, user_id: UUID) -> Optional[Member]:
        query = select(Member).where(and_(Member.org_id == org_id, Member.user_id == user_id))
        return self.db.execute(query).scalars().first()

    def list_for_org(self, org_id: UUID, active_only: bool = False) -> List[Member]:
        query = select(Member).where(Member.org_id == org_id)
        if active_only:
            query = query.where(Member.status == MemberStatus.ACTIVE.value)
        query = query.order_by(Member.created_at)
        return list(self.db.execute(query).scalars().all())

    def list_active_for_user(self, user_id: UUID) -> List[Member]:
        """Active memberships of a user with their organisation loaded, newest first."""
        query = (
            select(Member)
            .options(selectinload(Member.organisation))
            .where(
                and_(
                    Member.user_id == user_id,
                    Member.status == MemberStatus.ACTIVE.value,
                )
            )
            .order_by(Member.created_at.desc())
        )
        return list(self.db.execute(query).scalars().all())

    def list_unlinked_by_email(self, email: str) -> List[Member]:
        """Member records awaiting an account with this email."""
        query = select(Member).where(
            and_(
                Member.user_id.is_(None),
                func.lower(Member.email) == email.strip().lower(),
            )
        )
        return list(self.db.execute(query).scalars().all())

    def create(self, **fields) -> Member:
        member = Member(**fields)
        self.db.add(member)
        self.db.flush()
        return member

    def update(self, member: Member, **fields) -> Member:
        for name, value in fields.items():
            setattr(member, name, value)
        self.db.flush()
        return member
