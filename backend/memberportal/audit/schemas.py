"""Pydantic schemas for audit log queries.

Audit logs are read-only through the API (no create/update/delete operations).
"""

from datetime import datetime
from typing import Optional, Any
from uuid import UUID

from pydantic import Field

from ..schemas import CamelModel


class AuditLogFilters(CamelModel):
    """Filters accepted by the audit log query. All are optional and combined with AND."""
    event: Optional[str] = None
    user_id: Optional[UUID] = None
    target_user_id: Optional[UUID] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AuditLogResponse(CamelModel):
    """Audit log entry as returned to the compliance dashboard."""
    id: UUID
    event: str = Field(..., description="Dotted event name (user.restored, retention.purge.executed, ...)")
    user_id: Optional[UUID] = Field(None, description="Acting member (None for automated actions)")
    target_user_id: Optional[UUID] = Field(None, description="Member affected by the action")
    details: Optional[Any] = Field(None, description="Structured context payload")
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime


class AuditLogListResponse(CamelModel):
    """One page of audit log entries, newest first."""
    entries: list[AuditLogResponse]
    total: int = Field(..., description="Total number of entries matching filters")
    limit: int
    offset: int
