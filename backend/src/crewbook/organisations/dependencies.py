"""Organisation access guards.

Each guard resolves the organisation from the ``slug`` path parameter and
the caller's ACTIVE member record in it, then checks the member's role.
Handlers receive an OrganisationContext with both.

Usage:
    @router.get("/{slug}/members")
    def list_members(ctx: OrganisationContext = Depends(is_organisation_admin_or_hr)):
        ...
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user
from ..auth.roles import ADMIN_OR_HR_ROLES, ADMIN_ROLES, has_member_role
from ..database import get_db
from ..errors import ForbiddenError, NotFoundError
from ..members.repository import MemberRepository
from ..models.member import Member
from ..models.organisation import Organisation
from ..models.user import User
from .repository import OrganisationRepository

ORGANISATION_NOT_FOUND = "Organisation not found"
NOT_A_MEMBER = "You are not a member of this organisation"
ADMIN_REQUIRED = "Admin access required for this organisation"
ADMIN_OR_HR_REQUIRED = "Admin or HR access required for this organisation"
SELF_OR_ADMIN_OR_HR_REQUIRED = "You can only access your own profile or require admin/HR privileges"


@dataclass
class OrganisationContext:
    """Resolved organisation and the caller's membership in it."""
    organisation: Organisation
    member: Member
    user: User

    @property
    def organisation_id(self) -> UUID:
        return self.organisation.id

    @property
    def is_admin(self) -> bool:
        return has_member_role(self.member.role, ADMIN_ROLES)


def _resolve(db: Session, slug: str, user: User) -> tuple[Organisation, Optional[Member]]:
    organisation = OrganisationRepository(db).get_by_slug(slug)
    if organisation is None:
        raise NotFoundError(ORGANISATION_NOT_FOUND)
    member = MemberRepository(db).get_active_membership(organisation.id, user.id)
    return organisation, member


def is_organisation_member(
    slug: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OrganisationContext:
    """Any active member of the organisation.

    Raises:
        NotFoundError: Unknown slug
        ForbiddenError: Caller has no active membership
    """
    organisation, member = _resolve(db, slug, current_user)
    if member is None:
        raise ForbiddenError(NOT_A_MEMBER)
    return OrganisationContext(organisation=organisation, member=member, user=current_user)


def is_organisation_admin(
    slug: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OrganisationContext:
    """Active member with the admin role."""
    organisation, member = _resolve(db, slug, current_user)
    if member is None or not has_member_role(member.role, ADMIN_ROLES):
        raise ForbiddenError(ADMIN_REQUIRED)
    return OrganisationContext(organisation=organisation, member=member, user=current_user)


def is_organisation_admin_or_hr(
    slug: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OrganisationContext:
    """Active member with the admin or hr role."""
    organisation, member = _resolve(db, slug, current_user)
    if member is None or not has_member_role(member.role, ADMIN_OR_HR_ROLES):
        raise ForbiddenError(ADMIN_OR_HR_REQUIRED)
    return OrganisationContext(organisation=organisation, member=member, user=current_user)


def is_organisation_admin_or_hr_or_self(
    slug: str,
    member_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OrganisationContext:
    """Active admin/hr member, or the member identified by ``member_id`` itself.

    Raises:
        NotFoundError: Unknown slug
        ForbiddenError: Caller is not an active member, or is a plain
            employee addressing someone else's member id
    """
    organisation, member = _resolve(db, slug, current_user)
    if member is None:
        raise ForbiddenError(NOT_A_MEMBER)
    if not has_member_role(member.role, ADMIN_OR_HR_ROLES) and member.id != member_id:
        raise ForbiddenError(SELF_OR_ADMIN_OR_HR_REQUIRED)
    return OrganisationContext(organisation=organisation, member=member, user=current_user)
