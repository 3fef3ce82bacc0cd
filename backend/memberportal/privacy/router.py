"""FastAPI router for member self-service privacy endpoints.

Provides member APIs for:
- Downloading all personal data held by the portal
- Requesting a correction of personal data
- Requesting deactivation or deletion of the account

Every endpoint acts on the authenticated member only.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..auth.dependencies import CurrentUser
from ..database import get_db
from .schemas import CorrectionRequest, DataRequestResponse, DeletionRequest, MemberDataExport
from .service import export_member_data, submit_data_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/privacy", tags=["privacy"])


@router.get("/my-data", response_model=MemberDataExport)
def download_my_data(
    request: Request,
    member: CurrentUser,
    db: Session = Depends(get_db),
) -> MemberDataExport:
    """Return a machine-readable copy of the caller's data."""
    export = export_member_data(db, member.id)

    log_from_request(
        db=db,
        request=request,
        event="privacy.data_exported",
        user_id=member.id,
        target_user_id=member.id,
    )

    return export


@router.post(
    "/request-correction",
    response_model=DataRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def request_correction(
    body: CorrectionRequest,
    request: Request,
    member: CurrentUser,
    db: Session = Depends(get_db),
) -> DataRequestResponse:
    """Ask staff to correct personal data the member cannot edit.

    Raises:
        ConfigurationError (500): No staff account exists to receive the request
    """
    message = submit_data_request(db, member, "correction", body.details)

    log_from_request(
        db=db,
        request=request,
        event="privacy.correction_requested",
        user_id=message.from_user_id,
        target_user_id=message.from_user_id,
        details={"message_id": message.id},
    )

    return DataRequestResponse(
        message_id=message.id,
        request_type="correction",
        message="Your correction request has been sent.",
    )


@router.post(
    "/request-deletion",
    response_model=DataRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def request_deletion(
    request: Request,
    member: CurrentUser,
    db: Session = Depends(get_db),
    body: DeletionRequest = DeletionRequest(),
) -> DataRequestResponse:
    """Ask staff to deactivate or delete the member's account.

    The account stays active until staff act on the request.

    Raises:
        ConfigurationError (500): No staff account exists to receive the request
    """
    message = submit_data_request(db, member, "deletion", body.reason)

    log_from_request(
        db=db,
        request=request,
        event="privacy.deletion_requested",
        user_id=message.from_user_id,
        target_user_id=message.from_user_id,
        details={"message_id": message.id},
    )

    return DataRequestResponse(
        message_id=message.id,
        request_type="deletion",
        message="Your deletion request has been sent.",
    )
