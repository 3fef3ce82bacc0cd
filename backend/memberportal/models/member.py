"""Member SQLAlchemy model"""

import re
import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, Index, Uuid
from sqlalchemy.orm import validates

from .base import Base, utcnow

# First name written by the anonymization pass. Rows carrying it are terminal.
ANONYMIZED_FIRST_NAME = "Deleted"
ANONYMIZED_LAST_NAME = "User"

ACTIVE_STATUS = "active"


class Member(Base):
    """Member account of the association.

    ``updated_at`` doubles as the last-activity marker for the retention
    engine. ``deleted_at`` is the soft-delete marker: once set, the member is
    excluded from active counts and can no longer authenticate.
    """
    __tablename__ = "member"
    __table_args__ = (
        Index("ix_member_deleted_at", "deleted_at"),
        Index("ix_member_status_updated_at", "membership_status", "updated_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(320), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    home_address = Column(Text, nullable=True)
    business_address = Column(Text, nullable=True)
    date_of_birth = Column(DateTime, nullable=True)
    place_of_birth = Column(Text, nullable=True)
    nationality = Column(Text, nullable=True)
    position = Column(Text, nullable=True)
    company = Column(Text, nullable=True)
    membership_type = Column(Text, nullable=True, default="professional")
    membership_status = Column(Text, nullable=True, default="pending")
    membership_number = Column(Text, nullable=True)
    marketing_opt_in = Column(Boolean, nullable=False, default=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    stripe_customer_id = Column(Text, nullable=True)
    password_reset_token = Column(Text, nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_anonymized(self) -> bool:
        return self.first_name == ANONYMIZED_FIRST_NAME

    @property
    def is_active_member(self) -> bool:
        return self.deleted_at is None and self.membership_status == ACTIVE_STATUS

    def __repr__(self):
        return f"<Member(id={self.id}, status='{self.membership_status}', deleted_at={self.deleted_at})>"
