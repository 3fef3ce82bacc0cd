"""Compliance reporting endpoints (admin only).

All endpoints in this router are read-only. Audit logs are immutable and
cannot be created, updated, or deleted through the API.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..audit.schemas import AuditLogFilters, AuditLogListResponse
from ..auth.dependencies import CurrentAdmin
from ..database import get_db
from ..privacy.schemas import DsrRequestResponse
from ..privacy.service import list_dsr_requests
from .schemas import ConsentStatsResponse, RetentionStatsResponse
from .service import MAX_AUDIT_PAGE_SIZE, get_consent_stats, get_retention_stats, query_audit_logs


router = APIRouter(prefix="/admin", tags=["compliance"])


@router.get("/retention/stats", response_model=RetentionStatsResponse)
def retention_stats(
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
) -> RetentionStatsResponse:
    """Live member counts per retention state."""
    return get_retention_stats(db)


@router.get("/consent-stats", response_model=ConsentStatsResponse)
def consent_stats(
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
) -> ConsentStatsResponse:
    return get_consent_stats(db)


@router.get(
    "/audit-logs",
    response_model=AuditLogListResponse,
    summary="Query audit logs",
    description="Filter audit log entries by event, acting user, affected user and date range.",
)
def audit_logs(
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
    event: Optional[str] = Query(
        None,
        description="Filter by event name (e.g., user.restored)",
    ),
    user_id: Optional[UUID] = Query(
        None,
        alias="userId",
        description="Filter by acting member",
    ),
    target_user_id: Optional[UUID] = Query(
        None,
        alias="targetUserId",
        description="Filter by affected member",
    ),
    start_date: Optional[datetime] = Query(
        None,
        alias="startDate",
        description="Minimum created_at timestamp, inclusive (ISO 8601)",
    ),
    end_date: Optional[datetime] = Query(
        None,
        alias="endDate",
        description="Maximum created_at timestamp, inclusive (ISO 8601)",
    ),
    limit: int = Query(100, ge=1, le=MAX_AUDIT_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> AuditLogListResponse:
    """Audit log page, newest first.

    Example:
        GET /api/admin/audit-logs?event=user.restored&startDate=2025-01-01T00:00:00Z&limit=50
    """
    filters = AuditLogFilters(
        event=event,
        user_id=user_id,
        target_user_id=target_user_id,
        start_date=start_date,
        end_date=end_date,
    )
    return query_audit_logs(db, filters, limit=limit, offset=offset)


@router.get("/dsr-requests", response_model=List[DsrRequestResponse])
def dsr_requests(
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
) -> List[DsrRequestResponse]:
    """Messages that look like correction or deletion requests.

    Flagged messages still need a human decision; nothing is processed here.
    """
    return list_dsr_requests(db)
