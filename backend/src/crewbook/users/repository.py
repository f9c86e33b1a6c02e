"""User repository for database operations"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.user import User


class UserRepository:
    """Repository for user table operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: UUID) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup (emails are stored lower-cased)."""
        query = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.db.execute(query).scalars().first()

    def list_all(self) -> List[User]:
        query = select(User).order_by(User.created_at.desc())
        return list(self.db.execute(query).scalars().all())

    def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        image: Optional[str] = None,
        role: str = "user",
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            image=image,
            role=role,
        )
        self.db.add(user)
        self.db.flush()
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()
