"""Organisation model - root entity for multi-tenant isolation"""

import re
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship, validates

from .base import Base, utcnow

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


class Organisation(Base):
    """
    Organisation model - one tenant.

    Members, documents and audit entries all reference organisation.id and
    are removed together with their organisation.
    """
    __tablename__ = "organisation"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    country = Column(String(100), nullable=True)
    address = Column(String(500), nullable=True)
    plan = Column(String(50), nullable=False, default="free")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    members = relationship(
        "Member",
        back_populates="organisation",
        cascade="all, delete-orphan",
        order_by="Member.created_at",
    )
    documents = relationship("Document", back_populates="organisation", cascade="all, delete-orphan")
    audit_logs = relationship("AuditLog", back_populates="organisation", cascade="all, delete-orphan")

    @validates('slug')
    def validate_slug(self, key, value):
        """
        Ensure slug is URL-friendly.

        Pattern: ^[a-z0-9]+(?:-[a-z0-9]+)*$
        Valid: acme, acme-gmbh, team-42
        Invalid: Acme, -acme, acme--gmbh, acme_gmbh

        Raises:
            ValueError: If slug doesn't match pattern or length requirements
        """
        if not value or len(value) > 100:
            raise ValueError("Slug must be between 1 and 100 characters")
        if not SLUG_PATTERN.match(value):
            raise ValueError(
                "Slug must contain only lowercase letters, numbers, and single hyphens"
            )
        return value

    @validates('name')
    def validate_name(self, key, value):
        if not value or len(value.strip()) == 0:
            raise ValueError("Organisation name cannot be empty")
        if len(value) > 255:
            raise ValueError("Organisation name cannot exceed 255 characters")
        return value.strip()

    def __repr__(self):
        return f"<Organisation(id={self.id}, slug='{self.slug}', name='{self.name}')>"
