"""Pydantic schemas for user management endpoints"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..auth.schemas import UserResponse


class UserUpdate(BaseModel):
    """Request schema for PATCH /users/{id}. Only the display name is editable."""
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=255, examples=["Ana Lima"])

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
