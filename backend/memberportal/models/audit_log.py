"""AuditLog SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, DateTime, ForeignKey, Index, Uuid, event

from .base import Base, PortableJSONB, utcnow


class AuditLog(Base):
    """AuditLog model for immutable compliance event logging.

    Records administrative and compliance-relevant actions (status changes,
    deletions, retention runs, data subject requests). Entries are
    append-only: the mapper listeners below reject updates and deletes.
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_event_created_at", "event", "created_at"),
        Index("ix_audit_log_user_id_created_at", "user_id", "created_at"),
        Index("ix_audit_log_created_at", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event = Column(Text, nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="SET NULL"), nullable=True)
    target_user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="SET NULL"), nullable=True)
    details = Column(PortableJSONB, nullable=True)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        """Convert audit log entry to dictionary representation"""
        return {
            "id": str(self.id),
            "event": self.event,
            "user_id": str(self.user_id) if self.user_id else None,
            "target_user_id": str(self.target_user_id) if self.target_user_id else None,
            "details": self.details,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "created_at": self.created_at.isoformat(),
        }


class ImmutableAuditLogError(RuntimeError):
    """Raised when code attempts to modify or remove an audit log entry."""


@event.listens_for(AuditLog, "before_update")
def _reject_audit_update(mapper, connection, target):
    raise ImmutableAuditLogError(f"Audit log entry {target.id} is immutable")


@event.listens_for(AuditLog, "before_delete")
def _reject_audit_delete(mapper, connection, target):
    raise ImmutableAuditLogError(f"Audit log entry {target.id} cannot be deleted")
