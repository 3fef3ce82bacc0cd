"""Unit tests for the audit logging service.

Tests cover:
- Entry creation with JSON-serialized details
- Best-effort behavior when the write fails
- Immutability of stored entries
- Client IP extraction
"""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from memberportal.audit.service import get_client_ip, log_audit_event
from memberportal.models import AuditLog, ImmutableAuditLogError


class TestLogAuditEvent:

    def test_creates_entry(self, db_session, admin_user):
        target_id = uuid4()

        entry = log_audit_event(
            db=db_session,
            event="user.deactivated",
            user_id=admin_user.id,
            target_user_id=target_id,
            details={"target": target_id, "count": 1},
            ip_address="203.0.113.7",
            user_agent="pytest",
        )

        assert entry is not None
        stored = db_session.query(AuditLog).one()
        assert stored.event == "user.deactivated"
        assert stored.user_id == admin_user.id
        assert stored.target_user_id == target_id
        assert stored.details == {"target": str(target_id), "count": 1}
        assert stored.ip_address == "203.0.113.7"
        assert stored.created_at is not None

    def test_system_event_without_actor(self, db_session):
        entry = log_audit_event(db=db_session, event="retention.purge.executed")

        assert entry is not None
        assert entry.user_id is None
        assert entry.details is None

    def test_write_failure_is_swallowed(self, caplog):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("database is down"))

        with caplog.at_level(logging.WARNING, logger="memberportal.audit.service"):
            result = log_audit_event(db=db, event="user.restored", user_id=uuid4())

        assert result is None
        db.rollback.assert_called_once()
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "user.restored" in warnings[0].getMessage()

    def test_failed_rollback_still_swallowed(self):
        db = MagicMock()
        db.commit.side_effect = RuntimeError("connection lost")
        db.rollback.side_effect = RuntimeError("connection lost")

        assert log_audit_event(db=db, event="privacy.data_exported") is None


class TestImmutability:

    def test_update_rejected(self, db_session):
        entry = log_audit_event(db=db_session, event="user.restored")

        entry.event = "user.deactivated"
        with pytest.raises(ImmutableAuditLogError):
            db_session.commit()
        db_session.rollback()

        assert db_session.query(AuditLog).one().event == "user.restored"

    def test_delete_rejected(self, db_session):
        entry = log_audit_event(db=db_session, event="user.restored")

        db_session.delete(entry)
        with pytest.raises(ImmutableAuditLogError):
            db_session.commit()
        db_session.rollback()

        assert db_session.query(AuditLog).count() == 1


class TestClientIp:

    def _request(self, headers, host="10.0.0.5"):
        return SimpleNamespace(headers=headers, client=SimpleNamespace(host=host))

    def test_first_forwarded_hop_wins(self):
        request = self._request({"X-Forwarded-For": "198.51.100.1, 10.0.0.1"})

        assert get_client_ip(request) == "198.51.100.1"

    def test_falls_back_to_peer(self):
        assert get_client_ip(self._request({})) == "10.0.0.5"

    def test_no_client(self):
        request = SimpleNamespace(headers={}, client=None)

        assert get_client_ip(request) is None
