"""SQLAlchemy models for Crewbook"""

from .base import Base
from .user import User
from .session import UserSession
from .organisation import Organisation
from .member import Member
from .document import Document, DocumentStatus, DocumentType
from .audit_log import AuditLog

__all__ = [
    "Base",
    "User",
    "UserSession",
    "Organisation",
    "Member",
    "Document",
    "DocumentStatus",
    "DocumentType",
    "AuditLog",
]
