"""Member endpoints.

Two routers:
- ``router`` (``/members``): the signed-in user's own memberships
- ``organisation_members_router`` (``/organisations/{slug}/members``): member
  management inside one organisation, guarded by the organisation role checks
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..auth.dependencies import CurrentUser
from ..database import get_db
from ..organisations.dependencies import (
    OrganisationContext,
    is_organisation_admin,
    is_organisation_admin_or_hr,
    is_organisation_admin_or_hr_or_self,
)
from ..organisations.service import OrganisationService
from .schemas import (
    MemberCreate,
    MemberDetailResponse,
    MemberResponse,
    MemberSelfUpdate,
    MemberUpdate,
    MemberWithOrganisationResponse,
    MembershipListResponse,
)
from .service import MemberService

router = APIRouter(prefix="/members", tags=["Members"])
organisation_members_router = APIRouter(
    prefix="/organisations/{slug}/members",
    tags=["Organisation Members"],
)


@router.get("/me", response_model=MembershipListResponse)
def list_my_memberships(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Active memberships of the caller, each with its organisation."""
    memberships = MemberService(db).list_memberships(current_user)
    return MembershipListResponse(
        memberships=[MemberWithOrganisationResponse.model_validate(m) for m in memberships],
        total=len(memberships),
    )


@organisation_members_router.get("", response_model=None)
def list_organisation_members(
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin_or_hr)],
    db: Annotated[Session, Depends(get_db)],
):
    """Organisation with its members; the level of detail depends on the role.

    Admins get every field (same shape as ``/settings``). HR gets the
    organisation summary and member fields relevant to HR work.
    """
    service = OrganisationService(db)
    if ctx.is_admin:
        return service.admin_view(ctx.organisation)
    return service.hr_view(ctx.organisation)


@organisation_members_router.post(
    "",
    response_model=MemberWithOrganisationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_member(
    data: MemberCreate,
    request: Request,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin_or_hr)],
    db: Annotated[Session, Depends(get_db)],
):
    """Add a member to the organisation (admin/HR).

    Raises:
        HTTPException: 409 if a member of this organisation has the email
        HTTPException: 404 if ``user_id`` does not exist
    """
    member = MemberService(db).create(ctx.organisation, data, ctx.user, request)
    return MemberWithOrganisationResponse.model_validate(member)


@organisation_members_router.get("/{member_id}", response_model=MemberResponse)
def get_member(
    member_id: UUID,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin_or_hr)],
    db: Annotated[Session, Depends(get_db)],
):
    """One member of the organisation, for editing (admin/HR)."""
    return MemberService(db).get(ctx.organisation, member_id)


@organisation_members_router.put("/{member_id}", response_model=MemberDetailResponse)
def update_member(
    member_id: UUID,
    data: MemberUpdate,
    request: Request,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin_or_hr)],
    db: Annotated[Session, Depends(get_db)],
):
    """Full update of a member (admin/HR).

    Raises:
        HTTPException: 404 if the member is not in this organisation
        HTTPException: 409 if another member of the organisation has the email
    """
    member = MemberService(db).update(ctx.organisation, member_id, data, ctx.user, request)
    return MemberDetailResponse.model_validate(member)


@organisation_members_router.patch("/{member_id}", response_model=MemberResponse)
def update_member_self(
    member_id: UUID,
    data: MemberSelfUpdate,
    request: Request,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin_or_hr_or_self)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change a member's name (admin/HR, or the member itself)."""
    return MemberService(db).update_self(ctx.organisation, member_id, data, ctx.user, request)


@organisation_members_router.delete("/{member_id}", response_model=MemberResponse)
def deactivate_member(
    member_id: UUID,
    request: Request,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Deactivate a member (org admin only). The record is kept."""
    return MemberService(db).deactivate(ctx.organisation, member_id, ctx.user, request)
