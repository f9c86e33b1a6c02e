"""Organisation endpoints.

Access is decided by the organisation guards in ``dependencies``: listing all
organisations is reserved for system administrators, creation is open to any
signed-in user, everything under ``/{slug}`` requires a membership.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..auth.dependencies import CurrentUser, SystemAdmin
from ..database import get_db
from ..members.schemas import MemberResponse
from .dependencies import (
    OrganisationContext,
    is_organisation_admin,
    is_organisation_member,
)
from .schemas import (
    OrganisationAdminView,
    OrganisationCreate,
    OrganisationCreatedResponse,
    OrganisationListResponse,
    OrganisationMemberView,
    OrganisationResponse,
    OrganisationUpdate,
)
from .service import OrganisationService

router = APIRouter(prefix="/organisations", tags=["Organisations"])


@router.get("", response_model=OrganisationListResponse)
def list_organisations(
    _: SystemAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """List every organisation, newest first (system admin only)."""
    organisations = OrganisationService(db).list_all()
    return OrganisationListResponse(
        organisations=[OrganisationResponse.model_validate(o) for o in organisations],
        total=len(organisations),
    )


@router.post("", response_model=OrganisationCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_organisation(
    data: OrganisationCreate,
    request: Request,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Create an organisation; the caller becomes its first admin member.

    Raises:
        HTTPException: 409 if the slug is taken
    """
    organisation, member = OrganisationService(db).create(data, current_user, request)
    return OrganisationCreatedResponse(
        **OrganisationResponse.model_validate(organisation).model_dump(),
        member=MemberResponse.model_validate(member),
    )


@router.get("/{slug}", response_model=OrganisationMemberView)
def get_organisation(
    ctx: Annotated[OrganisationContext, Depends(is_organisation_member)],
    db: Annotated[Session, Depends(get_db)],
):
    """Organisation and its active members, as seen by any member."""
    return OrganisationService(db).member_view(ctx.organisation)


@router.put("/{slug}", response_model=OrganisationResponse)
def update_organisation(
    data: OrganisationUpdate,
    request: Request,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update name, slug, country and address (org admin only).

    Raises:
        HTTPException: 409 if the new slug belongs to another organisation
    """
    return OrganisationService(db).update(ctx.organisation, data, ctx.user, request)


@router.delete("/{slug}")
def delete_organisation(
    request: Request,
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete the organisation and everything it owns (org admin only)."""
    OrganisationService(db).delete(ctx.organisation, ctx.user, request)
    return {"message": "Organisation deleted successfully"}


@router.get("/{slug}/settings", response_model=OrganisationAdminView)
def get_organisation_settings(
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin)],
    db: Annotated[Session, Depends(get_db)],
):
    """Full organisation record with all members (org admin only)."""
    return OrganisationService(db).admin_view(ctx.organisation)
