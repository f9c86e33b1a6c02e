"""User SQLAlchemy model - global account shared across organisations"""

import re
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text, Uuid
from sqlalchemy.orm import relationship, validates

from .base import Base, utcnow

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


class User(Base):
    """User account.

    Users are global: a single account may hold member records in several
    organisations. ``role`` is the *system* role ("user" or "admin"), not a
    per-organisation role; organisation roles live on Member.
    """
    __tablename__ = "user"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    image = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default="user")
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    members = relationship("Member", back_populates="user")

    @validates('email')
    def validate_email(self, key, value):
        """Normalize email to lowercase and check basic shape.

        Raises:
            ValueError: If email is not a plausible address
        """
        if not value or not EMAIL_PATTERN.match(value.strip()):
            raise ValueError(f"Invalid email address: {value}")
        return value.strip().lower()

    @property
    def is_system_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
