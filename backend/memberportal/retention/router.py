"""FastAPI router for retention administration endpoints.

Provides admin APIs for:
- Manually triggering a retention purge
- Listing deactivated members
- Restoring a soft-deleted member
- Deactivating (soft-deleting) a member

All endpoints require an admin account.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..auth.dependencies import CurrentAdmin
from ..database import get_db
from .schemas import DeletedMemberResponse, MemberStatusResponse, PurgeStats
from .service import RetentionService, run_retention_purge
from .tasks import PURGE_EXECUTED_EVENT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["retention"])


@router.post("/retention/purge", response_model=PurgeStats)
def trigger_retention_purge(
    request: Request,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
) -> PurgeStats:
    """Run the retention purge now.

    Uses the same run lock as the scheduled job.

    Returns:
        PurgeStats: Counts for this run

    Raises:
        RetentionRunInProgressError (409): Another run is in progress
        RetentionPassError (500): A pass could not select its candidates
    """
    stats = run_retention_purge(db)

    log_from_request(
        db=db,
        request=request,
        event=PURGE_EXECUTED_EVENT,
        user_id=admin.id,
        details={"trigger": "manual", "stats": stats.model_dump(by_alias=True)},
    )

    logger.info(
        "Manual retention purge completed",
        extra={"user_id": str(admin.id), "stats": stats.model_dump()},
    )
    return stats


@router.get("/users/deleted", response_model=List[DeletedMemberResponse])
def list_deleted_users(
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
) -> List[DeletedMemberResponse]:
    """List soft-deleted and anonymized members, most recent deletion first."""
    members = RetentionService(db).list_deleted_members()
    return [DeletedMemberResponse.model_validate(member) for member in members]


@router.post("/users/{member_id}/restore", response_model=MemberStatusResponse)
def restore_user(
    member_id: UUID,
    request: Request,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
) -> MemberStatusResponse:
    """Restore a soft-deleted member.

    Raises:
        NotFoundError (404): Member does not exist
        AnonymizedMemberError (409): Member was anonymized
        InvalidStateError (400): Member is not deleted
    """
    member = RetentionService(db).restore_member(member_id)

    log_from_request(
        db=db,
        request=request,
        event="user.restored",
        user_id=admin.id,
        target_user_id=member.id,
        details={"email": member.email},
    )

    return MemberStatusResponse.model_validate(member)


@router.post("/users/{member_id}/deactivate", response_model=MemberStatusResponse)
def deactivate_user(
    member_id: UUID,
    request: Request,
    admin: CurrentAdmin,
    db: Session = Depends(get_db),
) -> MemberStatusResponse:
    """Soft-delete a member on request (e.g. after a deletion request).

    Raises:
        ForbiddenError (403): Admin targeted their own account
        NotFoundError (404): Member does not exist
        InvalidStateError (400): Member is already deactivated
    """
    member = RetentionService(db).deactivate_member(member_id, actor_id=admin.id)

    log_from_request(
        db=db,
        request=request,
        event="user.deactivated",
        user_id=admin.id,
        target_user_id=member.id,
        details={"email": member.email},
    )

    return MemberStatusResponse.model_validate(member)
