"""Audit logging service for security and compliance events.

All security-relevant events are written through this module. Entries are
flushed with the caller's transaction, so an event is only persisted when
the change it describes is committed.

Audit Events:
- SIGN_UP, SIGN_IN_SUCCESS, SIGN_IN_FAILED, SIGN_OUT
- USER_UPDATED, USER_DELETED
- ORGANISATION_CREATED, ORGANISATION_UPDATED
- MEMBER_CREATED, MEMBER_UPDATED, MEMBER_DEACTIVATED, MEMBER_LINKED
- DOCUMENT_UPLOAD_INITIATED, DOCUMENT_READY, DOCUMENT_FAILED,
  DOCUMENT_REPLACED, DOCUMENT_DELETED
"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, honouring the first X-Forwarded-For hop behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("User-Agent")


def log_audit_event(
    db: Session,
    action: str,
    org_id: Optional[UUID] = None,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """Create an audit log entry.

    All parameters are stored as-is. This function does not validate action
    names or entity types.

    Args:
        db: Database session
        action: Event action (e.g., "MEMBER_CREATED", "SIGN_IN_SUCCESS")
        org_id: Organisation ID (None for account-level events)
        actor_id: User who performed the action (None for anonymous events)
        entity_type: Type of entity affected (e.g., "member", "document")
        entity_id: ID of affected entity
        metadata: Additional context as JSON (e.g., {"old_status": "active"})
        ip_address: Client IP address
        user_agent: Client User-Agent header

    Returns:
        AuditLog: The created audit log entry
    """
    audit_entry = AuditLog(
        org_id=org_id,
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata_json=metadata,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_entry)
    db.flush()

    return audit_entry


def log_from_request(
    db: Session,
    request: Optional[Request],
    action: str,
    org_id: Optional[UUID] = None,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[UUID] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Create an audit entry, taking IP and User-Agent from the request.

    ``request`` may be None when a service is called outside HTTP (scripts).
    """
    return log_audit_event(
        db=db,
        action=action,
        org_id=org_id,
        actor_id=actor_id,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata=metadata,
        ip_address=get_client_ip(request) if request is not None else None,
        user_agent=get_user_agent(request) if request is not None else None,
    )
