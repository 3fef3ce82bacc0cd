"""Audit logging service for compliance events.

This service provides a centralized interface for creating immutable audit log
entries. All sensitive mutations must be logged through this service.

Audit Events:
- retention.purge.executed
- user.deactivated, user.restored
- privacy.data_exported
- privacy.correction_requested, privacy.deletion_requested

Recording is best-effort: an audit write failure is logged once and swallowed
so it never blocks the action being recorded. Callers commit their own
mutation before recording, because a failed write rolls the session back.
"""

import logging
from typing import Optional, Dict, Any
from uuid import UUID

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_audit_event(
    db: Session,
    event: str,
    user_id: Optional[UUID] = None,
    target_user_id: Optional[UUID] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[AuditLog]:
    """Create and commit an audit log entry.

    This function does not validate event names; callers use dotted names
    such as ``user.deactivated``.

    Args:
        db: Database session
        event: Event name (e.g., "user.restored")
        user_id: Acting member (None for automated/system actions)
        target_user_id: Member affected by the action
        details: Additional context, serialized to JSON
        ip_address: Client IP address
        user_agent: Client User-Agent header

    Returns:
        The created entry, or None if the write failed

    Example:
        log_audit_event(
            db=db,
            event="user.deactivated",
            user_id=admin.id,
            target_user_id=member.id,
            details={"email": member.email},
        )
    """
    try:
        audit_entry = AuditLog(
            event=event,
            user_id=user_id,
            target_user_id=target_user_id,
            details=jsonable_encoder(details) if details is not None else None,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.add(audit_entry)
        db.commit()
        return audit_entry

    except Exception as e:
        try:
            db.rollback()
        except Exception:
            logger.debug("Rollback after failed audit write also failed", exc_info=True)
        logger.warning(
            f"Failed to write audit log entry '{event}': {e}",
            extra={"event": event, "user_id": str(user_id) if user_id else None},
        )
        return None


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, preferring the first X-Forwarded-For hop (original client)."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


def log_from_request(
    db: Session,
    request: Request,
    event: str,
    user_id: Optional[UUID] = None,
    target_user_id: Optional[UUID] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Optional[AuditLog]:
    """Create audit log entry extracting IP and User-Agent from FastAPI request.

    Convenience wrapper around log_audit_event.

    Example:
        @router.post("/admin/users/{id}/restore")
        def restore(request: Request, id: UUID, ...):
            member = service.restore_member(id)
            log_from_request(
                db=db,
                request=request,
                event="user.restored",
                user_id=admin.id,
                target_user_id=member.id,
            )
    """
    return log_audit_event(
        db=db,
        event=event,
        user_id=user_id,
        target_user_id=target_user_id,
        details=details,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
