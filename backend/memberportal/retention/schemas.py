"""Pydantic schemas for retention policy and purge statistics.

This module defines retention-related schemas:
- RetentionPolicy: Fixed retention periods, loaded once from settings
- PurgeStats: Counts produced by one retention run
- DeletedMemberResponse: Soft-deleted/anonymized member as listed to admins
"""

from datetime import datetime
from functools import lru_cache
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import get_settings
from ..schemas import CamelModel


class RetentionPolicy(BaseModel):
    """Retention periods in days for each entity type.

    Defaults follow the association's data inventory:
    - Members: soft-delete after 6 years of inactivity, anonymize 7 years after soft-delete
    - Event registrations: 6 years
    - Documents: 5 years (only when the owner is no longer an active member)
    - Messages: 6 years

    Payments and invoices have no entry here: they are never touched by the
    automated job.
    """

    member_soft_delete_after_days: int = Field(default=6 * 365, ge=1, le=36500)
    member_anonymize_after_days: int = Field(default=7 * 365, ge=1, le=36500)
    event_registration_delete_after_days: int = Field(default=6 * 365, ge=1, le=36500)
    document_delete_after_days: int = Field(default=5 * 365, ge=1, le=36500)
    message_delete_after_days: int = Field(default=6 * 365, ge=1, le=36500)
    anonymized_email_domain: str = Field(default="baco", min_length=1)

    class Config:
        frozen = True

    @field_validator("anonymized_email_domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        """Domain must be usable as the tail of an e-mail address."""
        v = v.strip().lower().lstrip(".")
        if not v or "@" in v or " " in v:
            raise ValueError("anonymized_email_domain must be a bare domain label")
        return v


@lru_cache()
def get_retention_policy() -> RetentionPolicy:
    """Build the retention policy from settings once per process."""
    settings = get_settings()
    return RetentionPolicy(
        member_soft_delete_after_days=settings.RETENTION_MEMBER_SOFT_DELETE_DAYS,
        member_anonymize_after_days=settings.RETENTION_MEMBER_ANONYMIZE_DAYS,
        event_registration_delete_after_days=settings.RETENTION_EVENT_REGISTRATION_DAYS,
        document_delete_after_days=settings.RETENTION_DOCUMENT_DAYS,
        message_delete_after_days=settings.RETENTION_MESSAGE_DAYS,
        anonymized_email_domain=settings.ANONYMIZED_EMAIL_DOMAIN,
    )


class PurgeStats(CamelModel):
    """Statistics from one retention run.

    Serialized in camelCase (usersSoftDeleted, usersAnonymised, ...).
    ``rows_failed`` counts rows skipped because their mutation failed;
    ``storage_errors`` counts stored files that could not be removed.
    """

    users_soft_deleted: int = Field(default=0, ge=0)
    users_anonymised: int = Field(default=0, ge=0)
    event_registrations_deleted: int = Field(default=0, ge=0)
    documents_deleted: int = Field(default=0, ge=0)
    messages_deleted: int = Field(default=0, ge=0)
    rows_failed: int = Field(default=0, ge=0)
    storage_errors: int = Field(default=0, ge=0)

    @property
    def total_changes(self) -> int:
        """Total number of rows transitioned or deleted."""
        return (
            self.users_soft_deleted +
            self.users_anonymised +
            self.event_registrations_deleted +
            self.documents_deleted +
            self.messages_deleted
        )

    @property
    def has_errors(self) -> bool:
        return self.rows_failed > 0 or self.storage_errors > 0


class DeletedMemberResponse(CamelModel):
    """Deactivated member as listed on the admin dashboard."""

    id: UUID
    email: str
    first_name: str
    last_name: str
    membership_status: Optional[str] = None
    deleted_at: datetime
    updated_at: datetime
    anonymized: bool = False

    @model_validator(mode="before")
    @classmethod
    def derive_anonymized(cls, data):
        if hasattr(data, "is_anonymized"):
            return {
                "id": data.id,
                "email": data.email,
                "first_name": data.first_name,
                "last_name": data.last_name,
                "membership_status": data.membership_status,
                "deleted_at": data.deleted_at,
                "updated_at": data.updated_at,
                "anonymized": data.is_anonymized,
            }
        return data


class MemberStatusResponse(CamelModel):
    """Result of a restore or deactivate action."""

    id: UUID
    email: str
    membership_status: Optional[str] = None
    deleted_at: Optional[datetime] = None
    updated_at: datetime
