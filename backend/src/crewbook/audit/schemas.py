"""Pydantic schemas for audit log queries"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuditLogResponse(BaseModel):
    """One audit log entry."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    org_id: Optional[UUID]
    actor_id: Optional[UUID]
    action: str
    entity_type: Optional[str]
    entity_id: Optional[UUID]
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("metadata_json", "metadata"),
    )
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Paginated audit log entries."""
    items: List[AuditLogResponse]
    total: int
    page: int
    per_page: int
