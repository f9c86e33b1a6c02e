"""Pydantic schemas for member endpoints.

A member is an organisation-scoped person record; it may or may not be
linked to a user account (``user_id``).
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..auth.roles import MemberRole, MemberStatus


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class MemberFields(BaseModel):
    """Fields shared by create and full update."""
    role: MemberRole = Field(..., examples=["employee"])
    name: str = Field(..., min_length=1, max_length=255, examples=["Ana Lima"])
    email: EmailStr = Field(..., max_length=320, examples=["ana@acme.io"])
    dept: Optional[str] = Field(..., max_length=100, examples=["Engineering"])
    start_date: Optional[datetime] = Field(..., examples=["2024-01-15T00:00:00Z"])
    status: MemberStatus = Field(..., examples=["active"])
    country: Optional[str] = Field(..., max_length=100, examples=["Portugal"])

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("dept", "country")
    @classmethod
    def blank_is_null(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class MemberCreate(MemberFields):
    """Request schema for adding a member (POST /organisations/{slug}/members).

    ``user_id`` links the record to an existing account. When omitted, a
    user with the same email is linked automatically if one exists;
    otherwise the record is linked when that email signs up.
    """
    user_id: Optional[UUID] = None


class MemberUpdate(MemberFields):
    """Request schema for a full member update by admin/HR."""
    pass


class MemberSelfUpdate(BaseModel):
    """Request schema for members updating their own record (name only)."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class OrganisationSummary(BaseModel):
    """Minimal organisation reference embedded in member responses."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str


class UserSummary(BaseModel):
    """Minimal user reference embedded in member responses."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class MemberResponse(BaseModel):
    """Full member record."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    org_id: UUID
    user_id: Optional[UUID]
    role: str
    name: str
    email: str
    dept: Optional[str]
    start_date: Optional[datetime]
    status: str
    country: Optional[str]
    created_at: datetime
    updated_at: datetime


class MemberWithOrganisationResponse(MemberResponse):
    """Member with its organisation (create response, membership list)."""
    org: OrganisationSummary = Field(validation_alias=AliasChoices("organisation", "org"))


class MemberDetailResponse(MemberWithOrganisationResponse):
    """Member with organisation and linked user (update response)."""
    user: Optional[UserSummary] = None


class MemberHRView(BaseModel):
    """Member fields visible to HR in the organisation member list."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str
    dept: Optional[str]
    start_date: Optional[datetime]
    status: str
    country: Optional[str]
    created_at: datetime


class MemberPublicView(BaseModel):
    """Member fields visible to every member of the organisation."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str
    dept: Optional[str]


class MembershipListResponse(BaseModel):
    """Active memberships of the current user."""
    memberships: List[MemberWithOrganisationResponse]
    total: int
