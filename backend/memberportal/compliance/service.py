"""Read-only compliance aggregates and the audit log query.

Nothing in this module writes to the database.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..audit.schemas import AuditLogFilters, AuditLogListResponse, AuditLogResponse
from ..errors import ValidationError
from ..models.audit_log import AuditLog
from ..models.base import utcnow
from ..models.member import ACTIVE_STATUS, ANONYMIZED_FIRST_NAME, Member
from ..retention.schemas import RetentionPolicy, get_retention_policy
from ..retention.service import RetentionService
from .schemas import ConsentStatsResponse, RetentionStatsResponse

MAX_AUDIT_PAGE_SIZE = 500


def get_retention_stats(
    db: Session,
    policy: Optional[RetentionPolicy] = None,
    now: Optional[datetime] = None,
) -> RetentionStatsResponse:
    """Count members per retention state.

    ``upcoming_purge`` uses the same predicate as the soft-delete pass, so it
    equals what the next run would soft-delete.
    """
    policy = policy or get_retention_policy()
    now = now or utcnow()

    def count(*criteria) -> int:
        return db.query(func.count(Member.id)).filter(*criteria).scalar() or 0

    cutoff = RetentionService(db, policy=policy).calculate_cutoff_dates(now)['member_soft_delete']

    return RetentionStatsResponse(
        active=count(Member.deleted_at.is_(None)),
        active_memberships=count(
            Member.deleted_at.is_(None),
            Member.membership_status == ACTIVE_STATUS,
        ),
        soft_deleted=count(
            Member.deleted_at.is_not(None),
            Member.first_name != ANONYMIZED_FIRST_NAME,
        ),
        anonymized=count(
            Member.deleted_at.is_not(None),
            Member.first_name == ANONYMIZED_FIRST_NAME,
        ),
        upcoming_purge=count(*RetentionService.soft_delete_criteria(cutoff)),
    )


def get_consent_stats(db: Session) -> ConsentStatsResponse:
    """Marketing opt-in counts among members that are not deleted."""
    rows = (
        db.query(Member.marketing_opt_in, func.count(Member.id))
        .filter(Member.deleted_at.is_(None))
        .group_by(Member.marketing_opt_in)
        .all()
    )
    counts = {bool(opt_in): total for opt_in, total in rows}
    return ConsentStatsResponse(
        opted_in=counts.get(True, 0),
        opted_out=counts.get(False, 0),
    )


def _as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored timestamps are naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def query_audit_logs(
    db: Session,
    filters: Optional[AuditLogFilters] = None,
    limit: int = 100,
    offset: int = 0,
) -> AuditLogListResponse:
    """Filter and page the audit log, newest entries first.

    Filters are combined with AND; the date range is inclusive on both ends.

    Raises:
        ValidationError: limit outside 1..500 or negative offset
    """
    if limit < 1 or limit > MAX_AUDIT_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_AUDIT_PAGE_SIZE}")
    if offset < 0:
        raise ValidationError("offset must not be negative")

    filters = filters or AuditLogFilters()
    query = db.query(AuditLog)

    if filters.event:
        query = query.filter(AuditLog.event == filters.event)

    if filters.user_id:
        query = query.filter(AuditLog.user_id == filters.user_id)

    if filters.target_user_id:
        query = query.filter(AuditLog.target_user_id == filters.target_user_id)

    start_date = _as_naive_utc(filters.start_date)
    if start_date:
        query = query.filter(AuditLog.created_at >= start_date)

    end_date = _as_naive_utc(filters.end_date)
    if end_date:
        query = query.filter(AuditLog.created_at <= end_date)

    total = query.count()

    entries = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    return AuditLogListResponse(
        entries=[AuditLogResponse.model_validate(entry) for entry in entries],
        total=total,
        limit=limit,
        offset=offset,
    )
