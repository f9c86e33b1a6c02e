"""Organisation service: tenant lifecycle and role-dependent views."""

import logging
from typing import List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..auth.roles import MemberRole, MemberStatus
from ..errors import ConflictError
from ..members.repository import MemberRepository
from ..members.schemas import MemberHRView, MemberPublicView, MemberResponse
from ..models.member import Member
from ..models.organisation import Organisation
from ..models.user import User
from .repository import OrganisationRepository
from .schemas import (
    OrganisationAdminView,
    OrganisationCreate,
    OrganisationHRView,
    OrganisationMemberView,
    OrganisationUpdate,
)

logger = logging.getLogger(__name__)

SLUG_TAKEN = "Organisation with this slug already exists"


class OrganisationService:
    """Create, update and delete organisations and build their read views."""

    def __init__(self, db: Session):
        self.db = db
        self.organisations = OrganisationRepository(db)
        self.members = MemberRepository(db)

    def list_all(self) -> List[Organisation]:
        return self.organisations.list_all()

    def create(
        self,
        data: OrganisationCreate,
        creator: User,
        request: Optional[Request] = None,
    ) -> Tuple[Organisation, Member]:
        """Create an organisation with the creator as its first active admin.

        Raises:
            ConflictError: Slug already used by another organisation
        """
        if self.organisations.slug_taken(data.slug):
            raise ConflictError(SLUG_TAKEN)

        organisation = self.organisations.create(
            name=data.name,
            slug=data.slug,
            country=data.country,
            address=data.address,
        )
        member = self.members.create(
            org_id=organisation.id,
            user_id=creator.id,
            role=MemberRole.ADMIN.value,
            name=creator.name,
            email=creator.email,
            status=MemberStatus.ACTIVE.value,
        )

        log_from_request(
            db=self.db,
            request=request,
            action="ORGANISATION_CREATED",
            org_id=organisation.id,
            actor_id=creator.id,
            entity_type="organisation",
            entity_id=organisation.id,
            metadata={"slug": organisation.slug},
        )
        self.db.commit()
        self.db.refresh(organisation)
        logger.info(
            "Organisation created",
            extra={"org_id": organisation.id, "user_id": creator.id},
        )
        return organisation, member

    def update(
        self,
        organisation: Organisation,
        data: OrganisationUpdate,
        actor: User,
        request: Optional[Request] = None,
    ) -> Organisation:
        """Replace name, slug, country and address.

        Raises:
            ConflictError: New slug already used by another organisation
        """
        if self.organisations.slug_taken(data.slug, exclude_org_id=organisation.id):
            raise ConflictError(SLUG_TAKEN)

        changes = {
            field: {"old": getattr(organisation, field), "new": value}
            for field, value in data.model_dump().items()
            if getattr(organisation, field) != value
        }
        self.organisations.update(organisation, **data.model_dump())

        log_from_request(
            db=self.db,
            request=request,
            action="ORGANISATION_UPDATED",
            org_id=organisation.id,
            actor_id=actor.id,
            entity_type="organisation",
            entity_id=organisation.id,
            metadata={"changes": changes},
        )
        self.db.commit()
        self.db.refresh(organisation)
        return organisation

    def delete(
        self,
        organisation: Organisation,
        actor: User,
        request: Optional[Request] = None,
    ) -> None:
        """Delete an organisation with its members, documents and audit log.

        The deletion event is recorded without org_id so it outlives the
        organisation's own audit entries.
        """
        org_id = organisation.id
        slug = organisation.slug
        self.organisations.delete(organisation)
        log_from_request(
            db=self.db,
            request=request,
            action="ORGANISATION_DELETED",
            actor_id=actor.id,
            entity_type="organisation",
            entity_id=org_id,
            metadata={"slug": slug},
        )
        self.db.commit()
        logger.info("Organisation deleted", extra={"org_id": org_id, "user_id": actor.id})

    # ------------------------------------------------------------------
    # Read views
    # ------------------------------------------------------------------

    def member_view(self, organisation: Organisation) -> OrganisationMemberView:
        """Organisation with its active members, as any member sees it."""
        members = self.members.list_for_org(organisation.id, active_only=True)
        return OrganisationMemberView(
            id=organisation.id,
            name=organisation.name,
            slug=organisation.slug,
            country=organisation.country,
            address=organisation.address,
            created_at=organisation.created_at,
            members=[MemberPublicView.model_validate(m) for m in members],
        )

    def admin_view(self, organisation: Organisation) -> OrganisationAdminView:
        """Full organisation with every member (settings, admin member list)."""
        members = self.members.list_for_org(organisation.id)
        return OrganisationAdminView(
            id=organisation.id,
            name=organisation.name,
            slug=organisation.slug,
            country=organisation.country,
            address=organisation.address,
            plan=organisation.plan,
            created_at=organisation.created_at,
            updated_at=organisation.updated_at,
            members=[MemberResponse.model_validate(m) for m in members],
        )

    def hr_view(self, organisation: Organisation) -> OrganisationHRView:
        members = self.members.list_for_org(organisation.id)
        return OrganisationHRView(
            id=organisation.id,
            name=organisation.name,
            slug=organisation.slug,
            country=organisation.country,
            address=organisation.address,
            plan=organisation.plan,
            created_at=organisation.created_at,
            members=[MemberHRView.model_validate(m) for m in members],
        )
