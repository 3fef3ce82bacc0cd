"""Payment and Invoice SQLAlchemy models.

Financial records are under legal hold: tax law requires keeping them for
7+ years, so no automated retention pass reads or writes these tables.
Removal goes through a manual legal review outside this system.
"""

import uuid

from sqlalchemy import Column, Text, Boolean, Numeric, DateTime, ForeignKey, Uuid

from .base import Base, utcnow


class Payment(Base):
    __tablename__ = "payment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="RESTRICT"), nullable=False)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("event.id", ondelete="RESTRICT"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(Text, nullable=False, default="BSD")
    type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    stripe_payment_intent_id = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    payment_date = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class Invoice(Base):
    __tablename__ = "invoice"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invoice_number = Column(Text, nullable=False, unique=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="RESTRICT"), nullable=False)
    member_name = Column(Text, nullable=False)
    member_email = Column(Text, nullable=False)
    company_name = Column(Text, nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="generated")
    pdf_path = Column(Text, nullable=True)
    generated_by = Column(Uuid(as_uuid=True), ForeignKey("member.id", ondelete="SET NULL"), nullable=True)
    is_admin_generated = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
