"""SQLAlchemy Models for the member portal"""

from .base import Base, PortableJSONB, utcnow
from .member import Member, ANONYMIZED_FIRST_NAME, ANONYMIZED_LAST_NAME, ACTIVE_STATUS
from .event import Event, EventRegistration
from .document import Document, DocumentStatus
from .message import Message
from .payment import Payment, Invoice
from .audit_log import AuditLog, ImmutableAuditLogError
from .job_lock import JobLock

__all__ = [
    "Base",
    "PortableJSONB",
    "utcnow",
    "Member",
    "ANONYMIZED_FIRST_NAME",
    "ANONYMIZED_LAST_NAME",
    "ACTIVE_STATUS",
    "Event",
    "EventRegistration",
    "Document",
    "DocumentStatus",
    "Message",
    "Payment",
    "Invoice",
    "AuditLog",
    "ImmutableAuditLogError",
    "JobLock",
]
