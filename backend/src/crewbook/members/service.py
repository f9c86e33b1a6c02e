"""Member service: add, edit and deactivate members of an organisation."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..auth.roles import MemberStatus
from ..errors import ConflictError, NotFoundError
from ..models.member import Member
from ..models.organisation import Organisation
from ..models.user import User
from ..users.repository import UserRepository
from .repository import MemberRepository
from .schemas import MemberCreate, MemberSelfUpdate, MemberUpdate

logger = logging.getLogger(__name__)

MEMBER_NOT_FOUND = "Member not found"
EMAIL_TAKEN = "A member with this email already exists in this organisation"


def _jsonable(value):
    """Audit metadata values: datetimes become ISO strings."""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


class MemberService:
    """Member records of one organisation.

    Every lookup is scoped by org_id; a member of another organisation is
    reported as not found.
    """

    def __init__(self, db: Session):
        self.db = db
        self.members = MemberRepository(db)
        self.users = UserRepository(db)

    def get(self, organisation: Organisation, member_id: UUID) -> Member:
        """Raises NotFoundError if the member is not in this organisation."""
        member = self.members.get_in_org(organisation.id, member_id)
        if member is None:
            raise NotFoundError(MEMBER_NOT_FOUND)
        return member

    def list_memberships(self, user: User) -> List[Member]:
        """Active memberships of a user, newest first."""
        return self.members.list_active_for_user(user.id)

    def create(
        self,
        organisation: Organisation,
        data: MemberCreate,
        actor: User,
        request: Optional[Request] = None,
    ) -> Member:
        """Add a member to the organisation.

        Without ``user_id`` the member is linked to an existing account with
        the same email, if there is one.

        Raises:
            ConflictError: Email already used by a member of this organisation
            NotFoundError: ``user_id`` given but no such user
        """
        email = data.email.lower()
        if self.members.get_by_email_in_org(organisation.id, email):
            raise ConflictError(EMAIL_TAKEN)

        if data.user_id is not None:
            user = self.users.get_by_id(data.user_id)
            if user is None:
                raise NotFoundError("User not found")
        else:
            user = self.users.get_by_email(email)

        member = self.members.create(
            org_id=organisation.id,
            user_id=user.id if user else None,
            role=data.role.value,
            name=data.name,
            email=email,
            dept=data.dept,
            start_date=data.start_date,
            status=data.status.value,
            country=data.country,
        )

        log_from_request(
            db=self.db,
            request=request,
            action="MEMBER_CREATED",
            org_id=organisation.id,
            actor_id=actor.id,
            entity_type="member",
            entity_id=member.id,
            metadata={
                "email": email,
                "role": member.role,
                "linked_user_id": str(member.user_id) if member.user_id else None,
            },
        )
        self.db.commit()
        self.db.refresh(member)
        logger.info(
            "Member created",
            extra={"org_id": organisation.id, "member_id": member.id},
        )
        return member

    def update(
        self,
        organisation: Organisation,
        member_id: UUID,
        data: MemberUpdate,
        actor: User,
        request: Optional[Request] = None,
    ) -> Member:
        """Replace every editable field of a member.

        Raises:
            NotFoundError: Member not in this organisation
            ConflictError: Another member of the organisation has this email
        """
        member = self.get(organisation, member_id)
        email = data.email.lower()
        if self.members.get_by_email_in_org(organisation.id, email, exclude_member_id=member.id):
            raise ConflictError(EMAIL_TAKEN)

        fields = {
            "role": data.role.value,
            "name": data.name,
            "email": email,
            "dept": data.dept,
            "start_date": data.start_date,
            "status": data.status.value,
            "country": data.country,
        }
        changes = {
            name: {"old": _jsonable(getattr(member, name)), "new": _jsonable(value)}
            for name, value in fields.items()
            if getattr(member, name) != value
        }
        self.members.update(member, **fields)

        log_from_request(
            db=self.db,
            request=request,
            action="MEMBER_UPDATED",
            org_id=organisation.id,
            actor_id=actor.id,
            entity_type="member",
            entity_id=member.id,
            metadata={"changes": changes},
        )
        self.db.commit()
        self.db.refresh(member)
        return member

    def update_self(
        self,
        organisation: Organisation,
        member_id: UUID,
        data: MemberSelfUpdate,
        actor: User,
        request: Optional[Request] = None,
    ) -> Member:
        """Name-only update, allowed for the member itself."""
        member = self.get(organisation, member_id)
        old_name = member.name
        self.members.update(member, name=data.name)

        log_from_request(
            db=self.db,
            request=request,
            action="MEMBER_UPDATED",
            org_id=organisation.id,
            actor_id=actor.id,
            entity_type="member",
            entity_id=member.id,
            metadata={"changes": {"name": {"old": old_name, "new": data.name}}},
        )
        self.db.commit()
        self.db.refresh(member)
        return member

    def deactivate(
        self,
        organisation: Organisation,
        member_id: UUID,
        actor: User,
        request: Optional[Request] = None,
    ) -> Member:
        """Soft delete: the record stays, status becomes inactive."""
        member = self.get(organisation, member_id)
        old_status = member.status
        self.members.update(member, status=MemberStatus.INACTIVE.value)

        log_from_request(
            db=self.db,
            request=request,
            action="MEMBER_DEACTIVATED",
            org_id=organisation.id,
            actor_id=actor.id,
            entity_type="member",
            entity_id=member.id,
            metadata={"old_status": old_status},
        )
        self.db.commit()
        self.db.refresh(member)
        return member
