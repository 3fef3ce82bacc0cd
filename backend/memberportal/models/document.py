"""Document SQLAlchemy model"""

import uuid
from enum import Enum

from sqlalchemy import Column, Text, Integer, DateTime, ForeignKey, Index, Uuid

from .base import Base, utcnow


class DocumentStatus(str, Enum):
    """Verification status of an uploaded document."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Document(Base):
    """Uploaded file reference owned by a member.

    The file itself lives in object storage under ``object_path``.
    """
    __tablename__ = "document"
    __table_args__ = (
        Index("ix_document_upload_date", "upload_date"),
        Index("ix_document_user_id", "user_id"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="CASCADE"), nullable=False)
    file_name = Column(Text, nullable=False)
    file_type = Column(Text, nullable=True)
    file_size = Column(Integer, nullable=True)
    object_path = Column(Text, nullable=False)
    category = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=DocumentStatus.PENDING.value)
    upload_date = Column(DateTime, nullable=False, default=utcnow)
    verified_by = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="SET NULL"), nullable=True)
    verified_at = Column(DateTime, nullable=True)
