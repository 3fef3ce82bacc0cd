"""Retention service enforcing the data-retention policy.

One run applies five passes against a single "now":
1. Soft-delete inactive, non-active members
2. Anonymize members soft-deleted longer than the anonymize period
3. Hard-delete old event registrations
4. Hard-delete old documents whose owner is no longer an active member
5. Hard-delete old messages

Every pass selects candidate ids first, then mutates and commits row by row.
A row whose mutation fails is rolled back, logged and skipped; the pass goes
on. Selection predicates re-read current state, so runs are idempotent and a
crashed run can simply be repeated.

Payments and invoices are under legal hold and are absent from
this module: no pass queries or mutates financial tables.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.password import make_unusable_password_hash
from ..config import get_settings
from ..errors import (
    AnonymizedMemberError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    RetentionPassError,
    RetentionRunInProgressError,
)
from ..models.base import utcnow
from ..models.document import Document
from ..models.event import EventRegistration
from ..models.member import (
    ACTIVE_STATUS,
    ANONYMIZED_FIRST_NAME,
    ANONYMIZED_LAST_NAME,
    Member,
)
from ..models.message import Message
from ..observability.metrics import (
    retention_row_failures_total,
    retention_rows_processed_total,
    retention_run_duration_seconds,
    retention_runs_total,
)
from .lock import JobRunLock, RETENTION_LOCK_NAME
from .schemas import PurgeStats, RetentionPolicy, get_retention_policy

logger = logging.getLogger(__name__)

MemberLookup = Callable[[UUID], Optional[Member]]


def build_anonymized_email(member_id: UUID, domain: str) -> str:
    """Unique sentinel address: deleted_<short id>_<epoch millis>@deleted.<domain>."""
    short_id = str(member_id)[:8]
    return f"deleted_{short_id}_{int(time.time() * 1000)}@deleted.{domain}"


class RetentionService:
    """Service executing retention passes and member restore/deactivate actions.

    The document pass depends on a member lookup collaborator rather than a
    join, so a failing lookup skips one document instead of the whole pass.
    """

    def __init__(
        self,
        db: Session,
        policy: Optional[RetentionPolicy] = None,
        member_lookup: Optional[MemberLookup] = None,
        storage_client: Optional[Any] = None,
    ):
        """Initialize retention service.

        Args:
            db: Database session
            policy: Retention periods (defaults to the process-wide policy)
            member_lookup: Callable returning the Member for an id, or None
            storage_client: Optional object storage client exposing delete_object(key)
        """
        self.db = db
        self.policy = policy or get_retention_policy()
        self.member_lookup = member_lookup or self._get_member
        self.storage_client = storage_client
        self.rows_failed = 0
        self.storage_errors = 0

    def _get_member(self, member_id: UUID) -> Optional[Member]:
        return self.db.get(Member, member_id)

    def calculate_cutoff_dates(self, now: datetime) -> Dict[str, datetime]:
        """Cutoff per pass; rows older than the cutoff are eligible."""
        return {
            'member_soft_delete': now - timedelta(days=self.policy.member_soft_delete_after_days),
            'member_anonymize': now - timedelta(days=self.policy.member_anonymize_after_days),
            'event_registrations': now - timedelta(days=self.policy.event_registration_delete_after_days),
            'documents': now - timedelta(days=self.policy.document_delete_after_days),
            'messages': now - timedelta(days=self.policy.message_delete_after_days),
        }

    # ------------------------------------------------------------------
    # Selection predicates
    # ------------------------------------------------------------------

    @staticmethod
    def soft_delete_criteria(cutoff: datetime) -> list:
        """Members not yet deleted, inactive since cutoff, without active membership."""
        return [
            Member.deleted_at.is_(None),
            Member.updated_at < cutoff,
            or_(Member.membership_status.is_(None), Member.membership_status != ACTIVE_STATUS),
        ]

    @staticmethod
    def anonymize_criteria(cutoff: datetime) -> list:
        """Members soft-deleted before cutoff and not anonymized yet."""
        return [
            Member.deleted_at.is_not(None),
            Member.deleted_at < cutoff,
            Member.first_name != ANONYMIZED_FIRST_NAME,
        ]

    # ------------------------------------------------------------------
    # Row-level helpers
    # ------------------------------------------------------------------

    def _select(self, pass_name: str, query) -> List[Any]:
        """Run a pass's selection query; failure aborts the run."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Retention pass '{pass_name}' could not select candidates",
                exc_info=True,
                extra={"pass_name": pass_name},
            )
            raise RetentionPassError(
                pass_name, f"Retention pass '{pass_name}' failed: {e.__class__.__name__}"
            ) from e

    def _apply(self, pass_name: str, row_id: UUID, mutate: Callable[[], int]) -> bool:
        """Run one row mutation in its own transaction.

        Returns True when exactly one row changed. Failures are counted and
        swallowed so the pass keeps going.
        """
        try:
            changed = mutate()
            self.db.commit()
            return changed == 1
        except Exception as e:
            self.db.rollback()
            self.rows_failed += 1
            retention_row_failures_total.labels(pass_name=pass_name).inc()
            logger.warning(
                f"Retention pass '{pass_name}' skipped row {row_id}: {e}",
                exc_info=True,
                extra={"pass_name": pass_name},
            )
            return False

    def _record(self, category: str, count: int, pass_name: str) -> int:
        if count:
            retention_rows_processed_total.labels(category=category).inc(count)
        logger.info(
            f"Retention pass '{pass_name}' finished: {count} rows",
            extra={"pass_name": pass_name},
        )
        return count

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def soft_delete_inactive_members(self, now: datetime) -> int:
        """Set deleted_at on members inactive past the soft-delete period.

        Members with an active membership are never soft-deleted here,
        however old their last activity.
        """
        cutoff = self.calculate_cutoff_dates(now)['member_soft_delete']
        criteria = self.soft_delete_criteria(cutoff)
        rows = self._select(
            "member_soft_delete",
            self.db.query(Member.id).filter(*criteria),
        )

        count = 0
        for (member_id,) in rows:
            def mutate(member_id=member_id):
                return self.db.query(Member).filter(Member.id == member_id, *criteria).update(
                    {Member.deleted_at: now, Member.updated_at: now},
                    synchronize_session=False,
                )

            if self._apply("member_soft_delete", member_id, mutate):
                count += 1
                logger.debug(f"Soft-deleted inactive member {member_id}", extra={"member_id": str(member_id)})

        return self._record("users_soft_deleted", count, "member_soft_delete")

    def anonymize_deleted_members(self, now: datetime) -> int:
        """Irreversibly overwrite personal data of long soft-deleted members.

        The row id survives, so registrations, payments and invoices keep
        pointing at a valid member. The sentinel first name excludes the row
        from later passes.
        """
        cutoff = self.calculate_cutoff_dates(now)['member_anonymize']
        criteria = self.anonymize_criteria(cutoff)
        rows = self._select(
            "member_anonymize",
            self.db.query(Member.id).filter(*criteria),
        )

        count = 0
        for (member_id,) in rows:
            def mutate(member_id=member_id):
                return self.db.query(Member).filter(Member.id == member_id, *criteria).update(
                    {
                        Member.email: build_anonymized_email(member_id, self.policy.anonymized_email_domain),
                        Member.first_name: ANONYMIZED_FIRST_NAME,
                        Member.last_name: ANONYMIZED_LAST_NAME,
                        Member.phone: None,
                        Member.address: None,
                        Member.home_address: None,
                        Member.business_address: None,
                        Member.date_of_birth: None,
                        Member.place_of_birth: None,
                        Member.nationality: None,
                        Member.password_reset_token: None,
                        Member.password_hash: make_unusable_password_hash(),
                        Member.updated_at: now,
                    },
                    synchronize_session=False,
                )

            if self._apply("member_anonymize", member_id, mutate):
                count += 1
                logger.debug(f"Anonymized member {member_id}", extra={"member_id": str(member_id)})

        return self._record("users_anonymised", count, "member_anonymize")

    def delete_expired_event_registrations(self, now: datetime) -> int:
        """Hard-delete registrations older than the registration period, unconditionally."""
        cutoff = self.calculate_cutoff_dates(now)['event_registrations']
        rows = self._select(
            "event_registrations",
            self.db.query(EventRegistration.id).filter(EventRegistration.created_at < cutoff),
        )

        count = 0
        for (registration_id,) in rows:
            def mutate(registration_id=registration_id):
                return self.db.query(EventRegistration).filter(
                    EventRegistration.id == registration_id,
                    EventRegistration.created_at < cutoff,
                ).delete(synchronize_session=False)

            if self._apply("event_registrations", registration_id, mutate):
                count += 1

        return self._record("event_registrations_deleted", count, "event_registrations")

    def delete_expired_documents(self, now: datetime) -> int:
        """Hard-delete old documents unless their owner is still an active member.

        The owner is re-fetched per document. A missing owner, a soft-deleted
        owner or a non-active membership all allow deletion.
        """
        cutoff = self.calculate_cutoff_dates(now)['documents']
        rows = self._select(
            "documents",
            self.db.query(Document.id, Document.user_id, Document.object_path)
            .filter(Document.upload_date < cutoff),
        )

        count = 0
        retained = 0
        for document_id, owner_id, object_path in rows:
            try:
                owner = self.member_lookup(owner_id)
            except Exception as e:
                self.db.rollback()
                self.rows_failed += 1
                retention_row_failures_total.labels(pass_name="documents").inc()
                logger.warning(
                    f"Retention pass 'documents' skipped document {document_id}: owner lookup failed: {e}",
                    exc_info=True,
                    extra={"pass_name": "documents"},
                )
                continue

            if owner is not None and owner.is_active_member:
                retained += 1
                continue

            def mutate(document_id=document_id):
                return self.db.query(Document).filter(
                    Document.id == document_id,
                    Document.upload_date < cutoff,
                ).delete(synchronize_session=False)

            if self._apply("documents", document_id, mutate):
                count += 1
                if not self.delete_object_storage_file(object_path):
                    self.storage_errors += 1

        if retained:
            logger.info(
                f"Retained {retained} expired documents owned by active members",
                extra={"pass_name": "documents"},
            )
        return self._record("documents_deleted", count, "documents")

    def delete_expired_messages(self, now: datetime) -> int:
        """Hard-delete messages older than the message period, whoever sent them."""
        cutoff = self.calculate_cutoff_dates(now)['messages']
        rows = self._select(
            "messages",
            self.db.query(Message.id).filter(Message.sent_at < cutoff),
        )

        count = 0
        for (message_id,) in rows:
            def mutate(message_id=message_id):
                return self.db.query(Message).filter(
                    Message.id == message_id,
                    Message.sent_at < cutoff,
                ).delete(synchronize_session=False)

            if self._apply("messages", message_id, mutate):
                count += 1

        return self._record("messages_deleted", count, "messages")

    def delete_object_storage_file(self, storage_key: str) -> bool:
        """Delete a document's stored file.

        A missing object counts as deleted. Other errors are logged and
        reported as False; the database row stays deleted.

        Returns:
            True if deleted, already gone or no storage client configured
        """
        if not self.storage_client or not storage_key:
            return True

        try:
            self.storage_client.delete_object(storage_key)
            logger.debug(f"Deleted object storage file: {storage_key}")
            return True

        except Exception as e:
            error_msg = str(e).lower()

            if '404' in error_msg or 'not found' in error_msg or 'nosuchkey' in error_msg:
                logger.debug(f"Object storage file not found (already deleted): {storage_key}")
                return True

            logger.error(
                f"Object storage deletion failed: {storage_key}",
                exc_info=True,
                extra={"pass_name": "documents"},
            )
            return False

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, now: Optional[datetime] = None) -> PurgeStats:
        """Run all five passes against one timestamp.

        Passes commit independently: if a later pass fails to select its
        candidates, earlier passes stay committed and RetentionPassError is
        raised to the caller.

        Returns:
            PurgeStats: Aggregated counts for this run
        """
        now = now or utcnow()
        self.rows_failed = 0
        self.storage_errors = 0
        start = time.monotonic()

        logger.info(f"Starting retention run (now={now.isoformat()})")

        try:
            users_soft_deleted = self.soft_delete_inactive_members(now)
            users_anonymised = self.anonymize_deleted_members(now)
            event_registrations_deleted = self.delete_expired_event_registrations(now)
            documents_deleted = self.delete_expired_documents(now)
            messages_deleted = self.delete_expired_messages(now)
        except RetentionPassError:
            retention_runs_total.labels(status="failed").inc()
            raise

        stats = PurgeStats(
            users_soft_deleted=users_soft_deleted,
            users_anonymised=users_anonymised,
            event_registrations_deleted=event_registrations_deleted,
            documents_deleted=documents_deleted,
            messages_deleted=messages_deleted,
            rows_failed=self.rows_failed,
            storage_errors=self.storage_errors,
        )

        duration = time.monotonic() - start
        retention_run_duration_seconds.observe(duration)
        retention_runs_total.labels(status="completed").inc()

        logger.info(
            f"Retention run completed in {duration:.2f}s",
            extra={"stats": stats.model_dump()},
        )
        if stats.has_errors:
            logger.warning(
                f"Retention run skipped {stats.rows_failed} rows and hit {stats.storage_errors} storage errors",
                extra={"stats": stats.model_dump()},
            )

        return stats

    # ------------------------------------------------------------------
    # Admin actions
    # ------------------------------------------------------------------

    def restore_member(self, member_id: UUID) -> Member:
        """Clear deleted_at on a soft-deleted member.

        Raises:
            NotFoundError: Member does not exist
            AnonymizedMemberError: Member was anonymized; nothing to restore
            InvalidStateError: Member is not deleted
        """
        member = self.db.get(Member, member_id)
        if member is None:
            raise NotFoundError(f"Member {member_id} not found")
        if member.is_anonymized:
            raise AnonymizedMemberError()
        if member.deleted_at is None:
            raise InvalidStateError(f"Member {member_id} is not deleted")

        member.deleted_at = None
        member.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(member)

        logger.info(f"Restored member {member_id}", extra={"member_id": str(member_id)})
        return member

    def deactivate_member(self, member_id: UUID, actor_id: UUID) -> Member:
        """Soft-delete a specific member on an admin's request.

        Raises:
            ForbiddenError: Admin targeted their own account
            NotFoundError: Member does not exist
            InvalidStateError: Member is already deactivated
        """
        if member_id == actor_id:
            raise ForbiddenError("You cannot deactivate your own account")

        member = self.db.get(Member, member_id)
        if member is None:
            raise NotFoundError(f"Member {member_id} not found")
        if member.deleted_at is not None:
            raise InvalidStateError(f"Member {member_id} is already deactivated")

        now = utcnow()
        member.deleted_at = now
        member.updated_at = now
        self.db.commit()
        self.db.refresh(member)

        logger.info(f"Deactivated member {member_id}", extra={"member_id": str(member_id)})
        return member

    def list_deleted_members(self) -> List[Member]:
        """Soft-deleted and anonymized members, most recently deleted first."""
        return (
            self.db.query(Member)
            .filter(Member.deleted_at.is_not(None))
            .order_by(Member.deleted_at.desc())
            .all()
        )


def run_retention_purge(
    db: Session,
    policy: Optional[RetentionPolicy] = None,
    storage_client: Optional[Any] = None,
    now: Optional[datetime] = None,
) -> PurgeStats:
    """Run one retention purge under the job run lock.

    This is the entry point shared by the admin endpoint, the Celery task and
    the command-line script.

    Raises:
        RetentionRunInProgressError: Another run holds the lock
        RetentionPassError: A pass could not select its candidates
    """
    ttl_minutes = get_settings().RETENTION_LOCK_TTL_MINUTES
    lock = JobRunLock(db, RETENTION_LOCK_NAME, ttl_minutes=ttl_minutes)
    try:
        lock.acquire()
    except RetentionRunInProgressError:
        retention_runs_total.labels(status="skipped").inc()
        logger.warning("Retention run skipped: another run holds the lock")
        raise

    try:
        service = RetentionService(db=db, policy=policy, storage_client=storage_client)
        return service.run(now=now)
    finally:
        lock.release()
