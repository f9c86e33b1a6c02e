"""User account management (outside any organisation)."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..errors import ForbiddenError, NotFoundError
from ..models.user import User
from .repository import UserRepository
from .schemas import UserUpdate

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def list_all(self) -> List[User]:
        return self.users.list_all()

    def get_for(self, user_id: UUID, current_user: User) -> User:
        """Load a user the caller may see: itself, or anyone for a system admin.

        Raises:
            ForbiddenError: Another user's account and caller is not a system admin
            NotFoundError: No such user
        """
        if user_id != current_user.id and not current_user.is_system_admin:
            raise ForbiddenError("You can only access your own account")
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    def update(
        self,
        user_id: UUID,
        data: UserUpdate,
        current_user: User,
        request: Optional[Request] = None,
    ) -> User:
        user = self.get_for(user_id, current_user)
        old_name = user.name
        user.name = data.name
        log_from_request(
            db=self.db,
            request=request,
            action="USER_UPDATED",
            actor_id=current_user.id,
            entity_type="user",
            entity_id=user.id,
            metadata={"changes": {"name": {"old": old_name, "new": data.name}}},
        )
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user_id: UUID, actor: User, request: Optional[Request] = None) -> None:
        """Delete an account.

        Sessions go with it; member records stay and are unlinked
        (user_id set to NULL).

        Raises:
            NotFoundError: No such user
        """
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)

        # Logged first: actor and subject may be the same account
        log_from_request(
            db=self.db,
            request=request,
            action="USER_DELETED",
            actor_id=actor.id,
            entity_type="user",
            entity_id=user.id,
            metadata={"email": user.email},
        )
        self.users.delete(user)
        self.db.commit()
        logger.info("User deleted", extra={"user_id": user_id})
