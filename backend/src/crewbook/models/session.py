"""Session SQLAlchemy model - server-side record backing a signed session token"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class UserSession(Base):
    """Authenticated session.

    The session token handed to clients references this row through its
    ``sid`` claim. Deleting the row (sign-out, user deletion) revokes the
    token even if its signature is still valid.
    """
    __tablename__ = "session"

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="sessions")

    def __repr__(self):
        return f"<UserSession(id={self.id}, user_id={self.user_id})>"
