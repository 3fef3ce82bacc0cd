"""Unit tests for retention schemas.

Tests retention policy validation, purge statistics and member responses.
"""

import pytest
from datetime import datetime, timedelta
from uuid import uuid4
from pydantic import ValidationError

from memberportal.config import get_settings
from memberportal.models import Member
from memberportal.retention.schemas import (
    DeletedMemberResponse,
    PurgeStats,
    RetentionPolicy,
    get_retention_policy,
)


class TestRetentionPolicy:
    """Test RetentionPolicy schema validation."""

    def test_default_values(self):
        """Defaults follow the association's data inventory."""
        policy = RetentionPolicy()

        assert policy.member_soft_delete_after_days == 2190
        assert policy.member_anonymize_after_days == 2555
        assert policy.event_registration_delete_after_days == 2190
        assert policy.document_delete_after_days == 1825
        assert policy.message_delete_after_days == 2190
        assert policy.anonymized_email_domain == "baco"

    def test_minimum_period_validation(self):
        with pytest.raises(ValidationError) as exc:
            RetentionPolicy(document_delete_after_days=0)

        assert "greater than or equal to 1" in str(exc.value)

    def test_maximum_period_validation(self):
        with pytest.raises(ValidationError) as exc:
            RetentionPolicy(message_delete_after_days=36501)

        assert "less than or equal to 36500" in str(exc.value)

    def test_policy_is_immutable(self):
        policy = RetentionPolicy()

        with pytest.raises(ValidationError):
            policy.member_soft_delete_after_days = 1

    def test_domain_is_normalized(self):
        policy = RetentionPolicy(anonymized_email_domain=" .Example ")

        assert policy.anonymized_email_domain == "example"

    @pytest.mark.parametrize("domain", ["   ", "user@example", "bad domain"])
    def test_invalid_domain_rejected(self, domain):
        with pytest.raises(ValidationError):
            RetentionPolicy(anonymized_email_domain=domain)

    def test_policy_loaded_from_settings(self, monkeypatch):
        monkeypatch.setenv("RETENTION_DOCUMENT_DAYS", "100")
        monkeypatch.setenv("ANONYMIZED_EMAIL_DOMAIN", "example")
        get_settings.cache_clear()
        get_retention_policy.cache_clear()

        try:
            policy = get_retention_policy()

            assert policy.document_delete_after_days == 100
            assert policy.anonymized_email_domain == "example"
            # Loaded once per process
            assert get_retention_policy() is policy
        finally:
            get_settings.cache_clear()
            get_retention_policy.cache_clear()


class TestPurgeStats:
    """Test PurgeStats schema."""

    def test_total_changes(self):
        stats = PurgeStats(
            users_soft_deleted=3,
            users_anonymised=2,
            event_registrations_deleted=10,
            documents_deleted=4,
            messages_deleted=20,
            rows_failed=1,
        )

        assert stats.total_changes == 39

    def test_has_errors(self):
        assert not PurgeStats().has_errors
        assert PurgeStats(rows_failed=1).has_errors
        assert PurgeStats(storage_errors=2).has_errors

    def test_serializes_camel_case(self):
        payload = PurgeStats(users_soft_deleted=1).model_dump(by_alias=True)

        assert payload == {
            "usersSoftDeleted": 1,
            "usersAnonymised": 0,
            "eventRegistrationsDeleted": 0,
            "documentsDeleted": 0,
            "messagesDeleted": 0,
            "rowsFailed": 0,
            "storageErrors": 0,
        }

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            PurgeStats(documents_deleted=-1)


class TestDeletedMemberResponse:
    """Test DeletedMemberResponse conversion from the ORM model."""

    def _member(self, first_name: str) -> Member:
        now = datetime(2025, 1, 1, 12, 0, 0)
        return Member(
            id=uuid4(),
            email="someone@example.com",
            password_hash="!x",
            first_name=first_name,
            last_name="Doe",
            membership_status="lapsed",
            deleted_at=now - timedelta(days=10),
            updated_at=now,
        )

    def test_soft_deleted_member(self):
        response = DeletedMemberResponse.model_validate(self._member("Jane"))

        assert response.anonymized is False
        assert response.model_dump(by_alias=True)["firstName"] == "Jane"

    def test_anonymized_member(self):
        response = DeletedMemberResponse.model_validate(self._member("Deleted"))

        assert response.anonymized is True
