"""Data subject request (DSR) handling.

Three capabilities:
- Classification: flag messages that look like correction or deletion
  requests so compliance staff can find them. Flagged messages are never
  acted on automatically.
- Self-service export: a member's own data across all entity types.
- Request submission: a member asks for a correction or for deletion; the
  request becomes a Message to a staff account. The member's record is not
  touched.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..errors import ConfigurationError, NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.document import Document
from ..models.event import EventRegistration
from ..models.member import Member
from ..models.message import Message
from ..models.payment import Invoice, Payment
from ..observability.metrics import data_exports_total, dsr_requests_submitted_total
from .schemas import (
    DocumentExport,
    DsrRequestResponse,
    EventRegistrationExport,
    InvoiceExport,
    MemberDataExport,
    MemberProfileExport,
    MessageExport,
    PaymentExport,
)

logger = logging.getLogger(__name__)

DSR_KEYWORDS = (
    "correction",
    "deletion",
    "deactivate",
    "data correction",
    "delete my account",
    "deactivate my account",
)

_DELETION_KEYWORDS = ("deletion", "deactivate", "delete my account", "deactivate my account")
_CORRECTION_KEYWORDS = ("correction", "data correction")

CORRECTION_SUBJECT = "Data Correction Request"
DELETION_SUBJECT = "Account Deletion Request"

REQUEST_TYPES = ("correction", "deletion")


def _contains_any(text: Optional[str], keywords) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def classify_request_type(subject: Optional[str], content: Optional[str]) -> Optional[str]:
    """Return "deletion", "correction" or None for a message.

    Subject and content are matched separately, case-insensitively. Deletion
    keywords win when both kinds appear.
    """
    if _contains_any(subject, _DELETION_KEYWORDS) or _contains_any(content, _DELETION_KEYWORDS):
        return "deletion"
    if _contains_any(subject, _CORRECTION_KEYWORDS) or _contains_any(content, _CORRECTION_KEYWORDS):
        return "correction"
    return None


def is_dsr_message(subject: Optional[str], content: Optional[str]) -> bool:
    return classify_request_type(subject, content) is not None


def list_dsr_requests(db: Session) -> List[DsrRequestResponse]:
    """Messages that look like data subject requests, newest first.

    Sender name and e-mail are included when the sender still exists.
    """
    keyword_filters = []
    for keyword in DSR_KEYWORDS:
        pattern = f"%{keyword}%"
        keyword_filters.append(Message.subject.ilike(pattern))
        keyword_filters.append(Message.content.ilike(pattern))

    rows = (
        db.query(Message, Member)
        .outerjoin(Member, Member.id == Message.from_user_id)
        .filter(or_(*keyword_filters))
        .order_by(Message.sent_at.desc(), Message.id.desc())
        .all()
    )

    requests = []
    for message, sender in rows:
        request_type = classify_request_type(message.subject, message.content)
        if request_type is None:
            continue
        requests.append(DsrRequestResponse(
            id=message.id,
            request_type=request_type,
            subject=message.subject,
            content=message.content,
            from_user_id=message.from_user_id,
            sender_name=sender.full_name if sender else None,
            sender_email=sender.email if sender else None,
            is_read=message.is_read,
            sent_at=message.sent_at,
        ))

    return requests


def export_member_data(
    db: Session,
    member_id: UUID,
    now: Optional[datetime] = None,
) -> MemberDataExport:
    """Assemble the member's own data for download.

    Every list is ordered by its timestamp, then id, so two exports of
    unchanged data are identical apart from ``exported_at``.

    Raises:
        NotFoundError: Member does not exist
    """
    member = db.get(Member, member_id)
    if member is None:
        raise NotFoundError(f"Member {member_id} not found")

    documents = (
        db.query(Document)
        .filter(Document.user_id == member_id)
        .order_by(Document.upload_date, Document.id)
        .all()
    )
    registrations = (
        db.query(EventRegistration)
        .filter(EventRegistration.user_id == member_id)
        .order_by(EventRegistration.created_at, EventRegistration.id)
        .all()
    )
    payments = (
        db.query(Payment)
        .filter(Payment.user_id == member_id)
        .order_by(Payment.payment_date, Payment.id)
        .all()
    )
    invoices = (
        db.query(Invoice)
        .filter(Invoice.user_id == member_id)
        .order_by(Invoice.created_at, Invoice.id)
        .all()
    )
    messages = (
        db.query(Message)
        .filter(or_(Message.from_user_id == member_id, Message.to_user_id == member_id))
        .order_by(Message.sent_at, Message.id)
        .all()
    )

    export = MemberDataExport(
        exported_at=now or utcnow(),
        profile=MemberProfileExport.model_validate(member),
        documents=[DocumentExport.model_validate(d) for d in documents],
        event_registrations=[EventRegistrationExport.model_validate(r) for r in registrations],
        payments=[PaymentExport.model_validate(p) for p in payments],
        invoices=[InvoiceExport.model_validate(i) for i in invoices],
        messages=[
            MessageExport(
                id=m.id,
                direction="sent" if m.from_user_id == member_id else "received",
                subject=m.subject,
                content=m.content,
                is_read=m.is_read,
                sent_at=m.sent_at,
                read_at=m.read_at,
            )
            for m in messages
        ],
    )

    data_exports_total.inc()
    logger.info(
        f"Exported personal data for member {member_id}",
        extra={"member_id": str(member_id)},
    )
    return export


def find_dsr_recipient(db: Session) -> Member:
    """Oldest non-deleted admin account.

    Raises:
        ConfigurationError: No admin account exists
    """
    admin = (
        db.query(Member)
        .filter(Member.is_admin.is_(True), Member.deleted_at.is_(None))
        .order_by(Member.created_at, Member.id)
        .first()
    )
    if admin is None:
        logger.error("No admin account available to receive data subject requests")
        raise ConfigurationError(
            "No staff account is configured to receive data requests. Please contact the association directly."
        )
    return admin


def _build_request_content(member: Member, request_type: str, details: Optional[str]) -> str:
    identity = f"{member.full_name} ({member.email})"
    if member.membership_number:
        identity += f", membership number {member.membership_number}"

    if request_type == "correction":
        return f"Member {identity} requests a data correction:\n\n{details}"

    reason = details if details else "No reason provided"
    return (
        f"Member {identity} requests deactivation or deletion of their account.\n\n"
        f"Reason: {reason}"
    )


def submit_data_request(
    db: Session,
    member: Member,
    request_type: str,
    details: Optional[str] = None,
) -> Message:
    """Send a correction or deletion request to a staff account.

    The subject is chosen so the request shows up in the DSR list.

    Raises:
        ValidationError: Unknown request type, or a correction without details
        ConfigurationError: No admin account exists to receive the request
    """
    if request_type not in REQUEST_TYPES:
        raise ValidationError(f"Unknown request type '{request_type}'")

    details = details.strip() if details else None
    if request_type == "correction" and not details:
        raise ValidationError("Please describe what needs to be corrected")

    recipient = find_dsr_recipient(db)

    message = Message(
        from_user_id=member.id,
        to_user_id=recipient.id,
        subject=CORRECTION_SUBJECT if request_type == "correction" else DELETION_SUBJECT,
        content=_build_request_content(member, request_type, details),
    )
    db.add(message)
    db.commit()
    db.refresh(message)

    dsr_requests_submitted_total.labels(request_type=request_type).inc()
    logger.info(
        f"Member {member.id} submitted a {request_type} request",
        extra={"member_id": str(member.id)},
    )
    return message
