"""Audit log query endpoint (organisation admins only).

Audit logs are append-only; there is no API to create, change or delete
entries. Admins see the entries of their own organisation, filtered by:
- Action type (MEMBER_CREATED, DOCUMENT_READY, etc.)
- Entity type (member, document, organisation)
- Date range (start_date, end_date)
- Pagination (page, per_page)
"""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.audit_log import AuditLog
from ..organisations.dependencies import OrganisationContext, is_organisation_admin
from .schemas import AuditLogListResponse, AuditLogResponse

router = APIRouter(prefix="/organisations/{slug}/audit-log", tags=["Audit Logs"])


@router.get("", response_model=AuditLogListResponse)
def query_audit_logs(
    ctx: Annotated[OrganisationContext, Depends(is_organisation_admin)],
    db: Annotated[Session, Depends(get_db)],
    action: Optional[str] = Query(None, description="Filter by action", examples=["MEMBER_CREATED"]),
    entity_type: Optional[str] = Query(None, description="Filter by entity type", examples=["member"]),
    start_date: Optional[datetime] = Query(None, description="Minimum created_at (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, description="Maximum created_at (ISO 8601)"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(50, ge=1, le=100, description="Entries per page (max 100)"),
) -> AuditLogListResponse:
    """Audit entries of the organisation, newest first."""
    query = select(AuditLog).where(AuditLog.org_id == ctx.organisation_id)

    if action:
        query = query.where(AuditLog.action == action)
    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)
    if start_date:
        query = query.where(AuditLog.created_at >= start_date)
    if end_date:
        query = query.where(AuditLog.created_at <= end_date)

    total = db.execute(select(func.count()).select_from(query.subquery())).scalar()

    offset = (page - 1) * per_page
    query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(offset).limit(per_page)
    entries = db.execute(query).scalars().all()

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(e) for e in entries],
        total=total or 0,
        page=page,
        per_page=per_page,
    )
