"""Event and EventRegistration SQLAlchemy models"""

import uuid

from sqlalchemy import Column, Text, Numeric, DateTime, ForeignKey, Index, Uuid

from .base import Base, utcnow


class Event(Base):
    """Association event (conference, CPD session) members can register for."""
    __tablename__ = "event"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False)
    slug = Column(Text, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(Text, nullable=False, default="upcoming")
    created_at = Column(DateTime, nullable=False, default=utcnow)


class EventRegistration(Base):
    """Registration of a member (or anonymous public registrant) for an event.

    Registrations are historical records: the retention engine hard-deletes
    them once they pass the registration threshold, whatever the member state.
    """
    __tablename__ = "event_registration"
    __table_args__ = (
        Index("ix_event_registration_created_at", "created_at"),
        Index("ix_event_registration_user_id", "user_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("event.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="SET NULL"), nullable=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    registration_type = Column(Text, nullable=True)
    payment_status = Column(Text, nullable=False, default="pending")
    payment_amount = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
