"""Pydantic schemas for authentication endpoints"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .password_policy import MAX_PASSWORD_LENGTH


class SignUpRequest(BaseModel):
    """Request schema for email/password sign-up.

    The password is checked against the password policy by the service so
    that the user's name and email can be used as context.
    """
    name: str = Field(..., min_length=1, max_length=255, examples=["Ana Lima"])
    email: EmailStr = Field(..., max_length=320, examples=["ana@acme.io"])
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)
    image: Optional[str] = Field(None, max_length=2048)


class SignInRequest(BaseModel):
    """Request schema for email/password sign-in."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User information response (excludes password_hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    image: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: datetime


class SessionResponse(BaseModel):
    """Public view of a session row."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    expires_at: datetime
    created_at: datetime


class AuthResponse(BaseModel):
    """Response for sign-up and sign-in.

    The token is also set as an HttpOnly cookie; API clients may send it as
    ``Authorization: Bearer <token>`` instead.
    """
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class MeResponse(BaseModel):
    """Current user with the session the request was authenticated by."""
    user: UserResponse
    session: SessionResponse
