"""Session repository for database operations"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.orm import Session

from ..models.session import UserSession


class SessionRepository:
    """Repository for session table operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        session_id: UUID,
        user_id: UUID,
        expires_at: datetime,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> UserSession:
        session = UserSession(
            id=session_id,
            user_id=user_id,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(session)
        self.db.flush()
        return session

    def get(self, session_id: UUID) -> Optional[UserSession]:
        return self.db.get(UserSession, session_id)

    def delete(self, session: UserSession) -> None:
        self.db.delete(session)
        self.db.flush()

    def delete_expired(self, now: datetime) -> int:
        """Remove sessions past their expiry. Returns number of rows deleted."""
        result = self.db.execute(
            delete(UserSession)
            .where(UserSession.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
