"""User account endpoints.

Listing and deleting accounts is reserved for system administrators. Reading
and renaming an account is allowed for the account owner and system admins.
Password hashes are never returned.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth.dependencies import CurrentUser, SystemAdmin
from ..auth.schemas import UserResponse
from ..database import get_db
from .schemas import UserListResponse, UserUpdate
from .service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
def list_users(
    _: SystemAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """All users, newest first (system admin only)."""
    users = UserService(db).list_all()
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: UUID,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Get a user (self or system admin).

    Raises:
        HTTPException: 403 for another user's account
        HTTPException: 404 if the user does not exist
    """
    return UserService(db).get_for(user_id, current_user)


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: UUID,
    data: UserUpdate,
    request: Request,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
):
    """Rename a user (self or system admin)."""
    return UserService(db).update(user_id, data, current_user, request)


@router.delete("/{user_id}")
def delete_user(
    user_id: UUID,
    request: Request,
    admin: SystemAdmin,
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a user account (system admin only)."""
    UserService(db).delete(user_id, admin, request)
    return {"message": "User deleted successfully"}
