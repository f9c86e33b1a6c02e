"""Member SQLAlchemy model - a person's record inside one organisation"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import relationship, validates

from .base import Base, utcnow


class Member(Base):
    """Organisation-scoped person record.

    A member may exist before its person has an account (``user_id`` is
    NULL). The record is linked to a user when that email signs up.
    ``role`` is the organisation role: admin, hr or employee.
    """
    __tablename__ = "member"
    __table_args__ = (
        Index("ix_member_org_id_email", "org_id", "email"),
        Index("ix_member_user_id_status", "user_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    org_id = Column(Uuid, ForeignKey("organisation.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    role = Column(String(20), nullable=False, default="employee")
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    dept = Column(String(100), nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    country = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    organisation = relationship("Organisation", back_populates="members")
    user = relationship("User", back_populates="members")
    documents = relationship("Document", back_populates="member", cascade="all, delete-orphan")

    @validates('email')
    def validate_email(self, key, value):
        return value.strip().lower() if value else value

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def __repr__(self):
        return f"<Member(id={self.id}, org_id={self.org_id}, email='{self.email}', role='{self.role}')>"
