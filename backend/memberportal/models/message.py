"""Message SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, Boolean, DateTime, ForeignKey, Index, Uuid

from .base import Base, utcnow


class Message(Base):
    """Internal message between a member and staff."""
    __tablename__ = "message"
    __table_args__ = (
        Index("ix_message_sent_at", "sent_at"),
        Index("ix_message_to_user_id", "to_user_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    from_user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="CASCADE"), nullable=False)
    to_user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="CASCADE"), nullable=False)
    subject = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    sent_at = Column(DateTime, nullable=False, default=utcnow)
    read_at = Column(DateTime, nullable=True)
