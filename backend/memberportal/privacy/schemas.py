"""Pydantic schemas for data subject requests and the self-service export.

Export models list only the fields a member may see about themselves.
Internal fields (password hash, reset token, payment-gateway ids, admin
flag, storage paths) and other members' details are never part of them.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ..schemas import CamelModel

RequestType = Literal["correction", "deletion"]


class MemberProfileExport(CamelModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    home_address: Optional[str] = None
    business_address: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    place_of_birth: Optional[str] = None
    nationality: Optional[str] = None
    position: Optional[str] = None
    company: Optional[str] = None
    membership_type: Optional[str] = None
    membership_status: Optional[str] = None
    membership_number: Optional[str] = None
    marketing_opt_in: bool
    created_at: datetime
    updated_at: datetime


class DocumentExport(CamelModel):
    id: UUID
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    category: Optional[str] = None
    status: str
    upload_date: datetime
    verified_at: Optional[datetime] = None


class EventRegistrationExport(CamelModel):
    id: UUID
    event_id: UUID
    first_name: str
    last_name: str
    email: str
    registration_type: Optional[str] = None
    payment_status: str
    payment_amount: Optional[Decimal] = None
    created_at: datetime


class PaymentExport(CamelModel):
    id: UUID
    event_id: Optional[UUID] = None
    amount: Decimal
    currency: str
    type: str
    status: str
    description: Optional[str] = None
    payment_date: datetime
    created_at: datetime


class InvoiceExport(CamelModel):
    id: UUID
    invoice_number: str
    member_name: str
    member_email: str
    company_name: Optional[str] = None
    amount: Decimal
    description: Optional[str] = None
    status: str
    created_at: datetime


class MessageExport(CamelModel):
    """A message the member sent or received.

    The other party is reported only through ``direction``.
    """
    id: UUID
    direction: Literal["sent", "received"]
    subject: Optional[str] = None
    content: str
    is_read: bool
    sent_at: datetime
    read_at: Optional[datetime] = None


class MemberDataExport(CamelModel):
    """Everything the portal stores about one member, for download."""
    exported_at: datetime
    profile: MemberProfileExport
    documents: List[DocumentExport] = Field(default_factory=list)
    event_registrations: List[EventRegistrationExport] = Field(default_factory=list)
    payments: List[PaymentExport] = Field(default_factory=list)
    invoices: List[InvoiceExport] = Field(default_factory=list)
    messages: List[MessageExport] = Field(default_factory=list)


class CorrectionRequest(CamelModel):
    """Body of POST /privacy/request-correction."""
    details: str = Field(..., min_length=1, max_length=5000)

    @field_validator("details")
    @classmethod
    def details_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("details must not be blank")
        return v.strip()


class DeletionRequest(CamelModel):
    """Body of POST /privacy/request-deletion. The reason is optional."""
    reason: Optional[str] = Field(None, max_length=5000)


class DataRequestResponse(CamelModel):
    """Acknowledgement returned to the member after submitting a request."""
    message_id: UUID
    request_type: RequestType
    message: str


class DsrRequestResponse(CamelModel):
    """Message flagged as a possible data subject request."""
    id: UUID
    request_type: Optional[RequestType] = None
    subject: Optional[str] = None
    content: str
    from_user_id: UUID
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    is_read: bool
    sent_at: datetime
