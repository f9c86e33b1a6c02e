"""Pydantic schemas for organisation endpoints.

Three read views exist with decreasing detail: the admin view (settings and
admin member list), the HR view, and the member view.
"""

import re
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..members.schemas import MemberHRView, MemberPublicView, MemberResponse

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
SLUG_ERROR = (
    "Slug can only contain lowercase letters, numbers, and dashes "
    "(no spaces or special characters)"
)


class OrganisationWrite(BaseModel):
    """Request schema for creating or updating an organisation.

    ``country`` and ``address`` are nullable; an update replaces all fields.
    """
    name: str = Field(..., min_length=1, max_length=255, examples=["Acme Inc"])
    slug: str = Field(..., min_length=1, max_length=100, examples=["acme"])
    country: Optional[str] = Field(..., min_length=1, max_length=100, examples=["Portugal"])
    address: Optional[str] = Field(..., max_length=500, examples=["Rua Augusta 1, Lisboa"])

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        if not SLUG_PATTERN.match(v):
            raise ValueError(SLUG_ERROR)
        return v.lower()


class OrganisationCreate(OrganisationWrite):
    """Request schema for POST /organisations."""
    pass


class OrganisationUpdate(OrganisationWrite):
    """Request schema for PUT /organisations/{slug}."""
    pass


class OrganisationResponse(BaseModel):
    """Full organisation record."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    country: Optional[str]
    address: Optional[str]
    plan: str
    created_at: datetime
    updated_at: datetime


class OrganisationAdminView(OrganisationResponse):
    """Organisation with every member and every member field (admin)."""
    members: List[MemberResponse]


class OrganisationHRView(BaseModel):
    """Organisation info and member list as seen by HR."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    country: Optional[str]
    address: Optional[str]
    plan: str
    created_at: datetime
    members: List[MemberHRView]


class OrganisationMemberView(BaseModel):
    """Organisation as seen by any member: active colleagues only."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    country: Optional[str]
    address: Optional[str]
    created_at: datetime
    members: List[MemberPublicView]


class OrganisationListResponse(BaseModel):
    organisations: List[OrganisationResponse]
    total: int


class OrganisationCreatedResponse(OrganisationResponse):
    """Create response: the organisation and the caller's admin membership."""
    member: MemberResponse
