"""Unit tests for data subject request handling.

Tests cover:
- Keyword classification of messages
- DSR listing for compliance staff
- Self-service data export
- Correction/deletion request submission
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from memberportal.errors import ConfigurationError, NotFoundError, ValidationError
from memberportal.models import (
    Document,
    Event,
    EventRegistration,
    Invoice,
    Member,
    Message,
    Payment,
)
from memberportal.models.base import utcnow
from memberportal.privacy.service import (
    DSR_KEYWORDS,
    classify_request_type,
    export_member_data,
    is_dsr_message,
    list_dsr_requests,
    submit_data_request,
)


class TestClassification:

    @pytest.mark.parametrize("subject, content, expected", [
        ("Please delete my account", "Thanks", "deletion"),
        ("Question", "data correction requested for my address", "correction"),
        ("DEACTIVATE MY ACCOUNT", "", "deletion"),
        ("Account Deletion Request", "Reason: moving abroad", "deletion"),
        ("Data Correction Request", "Wrong phone number", "correction"),
        ("Event registration", "Can I bring a guest?", None),
        (None, "Payment receipt", None),
    ])
    def test_classify_request_type(self, subject, content, expected):
        assert classify_request_type(subject, content) == expected

    def test_every_keyword_is_matched(self):
        for keyword in DSR_KEYWORDS:
            assert is_dsr_message(None, f"Hello, {keyword.upper()} please")

    def test_deletion_wins_over_correction(self):
        assert classify_request_type("Correction", "and then deletion of my data") == "deletion"


class TestListDsrRequests:

    def test_lists_matching_messages_newest_first(self, db_session, make_member, admin_user):
        sender = make_member(first_name="Sam", last_name="Sender")
        now = utcnow()
        deletion = Message(
            from_user_id=sender.id, to_user_id=admin_user.id,
            subject="Please delete my account", content="Thanks", sent_at=now - timedelta(days=2),
        )
        correction = Message(
            from_user_id=sender.id, to_user_id=admin_user.id,
            subject="Question", content="data correction requested", sent_at=now - timedelta(days=1),
        )
        unrelated = Message(
            from_user_id=sender.id, to_user_id=admin_user.id,
            subject="Event registration", content="Is there parking?", sent_at=now,
        )
        db_session.add_all([deletion, correction, unrelated])
        db_session.commit()

        requests = list_dsr_requests(db_session)

        assert [r.id for r in requests] == [correction.id, deletion.id]
        assert [r.request_type for r in requests] == ["correction", "deletion"]
        assert requests[0].sender_name == "Sam Sender"
        assert requests[0].sender_email == sender.email

    def test_sender_no_longer_present(self, db_session, admin_user):
        db_session.add(Message(
            from_user_id=uuid4(), to_user_id=admin_user.id,
            subject="Deletion", content="Remove me",
        ))
        db_session.commit()

        requests = list_dsr_requests(db_session)

        assert len(requests) == 1
        assert requests[0].sender_name is None
        assert requests[0].sender_email is None

    def test_empty_corpus(self, db_session):
        assert list_dsr_requests(db_session) == []


class TestExportMemberData:

    @pytest.fixture
    def populated_member(self, db_session, make_member, admin_user):
        member = make_member(first_name="Erin", last_name="Export", password_reset_token="secret-token")
        other = make_member(first_name="Otto", last_name="Other")
        now = utcnow()
        event = Event(title="Gala", slug="gala", start_date=now, end_date=now)
        db_session.add(event)
        db_session.commit()

        db_session.add_all([
            Document(user_id=member.id, file_name="b.pdf", object_path="documents/b.pdf",
                     upload_date=now - timedelta(days=1)),
            Document(user_id=member.id, file_name="a.pdf", object_path="documents/a.pdf",
                     upload_date=now - timedelta(days=5)),
            Document(user_id=other.id, file_name="other.pdf", object_path="documents/o.pdf"),
            EventRegistration(event_id=event.id, user_id=member.id, first_name="Erin",
                              last_name="Export", email=member.email),
            Payment(user_id=member.id, amount=Decimal("75.00"), type="event", status="completed"),
            Invoice(invoice_number="INV-1", user_id=member.id, member_name="Erin Export",
                    member_email=member.email, amount=Decimal("75.00")),
            Message(from_user_id=member.id, to_user_id=admin_user.id, content="Hi",
                    sent_at=now - timedelta(hours=2)),
            Message(from_user_id=admin_user.id, to_user_id=member.id, content="Hello back",
                    sent_at=now - timedelta(hours=1)),
            Message(from_user_id=other.id, to_user_id=admin_user.id, content="Not yours"),
        ])
        db_session.commit()
        return member

    def test_export_contains_every_entity_type(self, db_session, populated_member):
        export = export_member_data(db_session, populated_member.id)

        assert export.profile.id == populated_member.id
        assert export.profile.first_name == "Erin"
        assert [d.file_name for d in export.documents] == ["a.pdf", "b.pdf"]
        assert len(export.event_registrations) == 1
        assert len(export.payments) == 1
        assert len(export.invoices) == 1
        assert [m.direction for m in export.messages] == ["sent", "received"]
        assert export.exported_at is not None

    def test_export_redacts_internal_fields(self, db_session, populated_member):
        payload = export_member_data(db_session, populated_member.id).model_dump(by_alias=True)

        profile = payload["profile"]
        assert "passwordHash" not in profile
        assert "passwordResetToken" not in profile
        assert "stripeCustomerId" not in profile
        assert "isAdmin" not in profile
        assert "objectPath" not in payload["documents"][0]
        for message in payload["messages"]:
            assert "fromUserId" not in message
            assert "toUserId" not in message

    def test_export_is_deterministic(self, db_session, populated_member):
        now = utcnow()

        first = export_member_data(db_session, populated_member.id, now=now)
        second = export_member_data(db_session, populated_member.id, now=now)

        assert first.model_dump() == second.model_dump()

    def test_unknown_member(self, db_session):
        with pytest.raises(NotFoundError):
            export_member_data(db_session, uuid4())


class TestSubmitDataRequest:

    def test_correction_routed_to_oldest_admin(self, db_session, make_member, admin_user, member_user):
        make_member(email="newer-admin@example.com", is_admin=True)

        message = submit_data_request(db_session, member_user, "correction", "My phone number is wrong")

        assert message.to_user_id == admin_user.id
        assert message.from_user_id == member_user.id
        assert message.subject == "Data Correction Request"
        assert "My phone number is wrong" in message.content
        assert is_dsr_message(message.subject, message.content)

    def test_deletion_without_reason(self, db_session, admin_user, member_user):
        message = submit_data_request(db_session, member_user, "deletion")

        assert message.subject == "Account Deletion Request"
        assert "No reason provided" in message.content
        assert classify_request_type(message.subject, message.content) == "deletion"

    def test_request_does_not_modify_member(self, db_session, admin_user, member_user):
        submit_data_request(db_session, member_user, "deletion", "Leaving the profession")

        db_session.expire_all()
        member = db_session.get(Member, member_user.id)
        assert member.deleted_at is None
        assert member.first_name == "Maria"

    def test_deleted_admin_is_not_a_recipient(self, db_session, make_member, member_user):
        make_member(email="gone-admin@example.com", is_admin=True, deleted_at=utcnow())

        with pytest.raises(ConfigurationError):
            submit_data_request(db_session, member_user, "correction", "Fix my address")

    def test_no_admin_fails_loudly(self, db_session, member_user):
        with pytest.raises(ConfigurationError) as exc:
            submit_data_request(db_session, member_user, "deletion", None)

        assert exc.value.status_code == 500
        assert db_session.query(Message).count() == 0

    def test_correction_requires_details(self, db_session, admin_user, member_user):
        with pytest.raises(ValidationError):
            submit_data_request(db_session, member_user, "correction", "   ")

    def test_unknown_request_type(self, db_session, admin_user, member_user):
        with pytest.raises(ValidationError):
            submit_data_request(db_session, member_user, "export", "details")
