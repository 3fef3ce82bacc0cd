"""Pytest fixtures for the member portal backend.

Provides reusable test fixtures for:
- In-memory SQLite database session, tables created and dropped per test
- Member factory and admin/member accounts
- Test clients authenticated with JWT bearer tokens

Usage:
    def test_admin_endpoint(admin_client, db_session):
        response = admin_client.get("/api/admin/consent-stats")
        assert response.status_code == 200
"""

import os

# Set environment variables BEFORE any memberportal import so cached settings pick them up
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key-32-chars-long")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import timedelta
from typing import Callable, Generator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from memberportal.auth.jwt import create_access_token
from memberportal.database import get_db as database_get_db
from memberportal.models import Base, Member
from memberportal.models.base import utcnow


# One shared connection so every session sees the same in-memory database
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def make_member(db_session: Session) -> Callable[..., Member]:
    """Factory creating committed members.

    Keyword arguments override column values, e.g.
    ``make_member(membership_status="pending", updated_at=utcnow() - timedelta(days=3000))``.
    """
    def _make(**overrides) -> Member:
        now = utcnow()
        values = {
            "email": f"member-{uuid4().hex[:8]}@example.com",
            "password_hash": "!not-a-real-hash",
            "first_name": "Jane",
            "last_name": "Doe",
            "phone": "+1 242 555 0100",
            "address": "1 Bay Street, Nassau",
            "membership_status": "active",
            "membership_number": f"M-{uuid4().hex[:6]}",
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)

        member = Member(**values)
        db_session.add(member)
        db_session.commit()
        db_session.refresh(member)
        return member

    return _make


@pytest.fixture(scope="function")
def admin_user(make_member) -> Member:
    """Create an admin (staff) account for testing."""
    return make_member(
        email="admin@example.com",
        first_name="Admin",
        last_name="User",
        is_admin=True,
        created_at=utcnow() - timedelta(days=365),
    )


@pytest.fixture(scope="function")
def member_user(make_member) -> Member:
    """Create a regular member for testing."""
    return make_member(
        email="member@example.com",
        first_name="Maria",
        last_name="Member",
    )


def _build_client(db_session: Session, member: Member = None) -> TestClient:
    from memberportal.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db

    client = TestClient(app)
    if member is not None:
        token = create_access_token(
            user_id=member.id,
            email=member.email,
            is_admin=member.is_admin,
        )
        client.headers.update({"Authorization": f"Bearer {token}"})
    return client


@pytest.fixture(scope="function")
def client(db_session: Session):
    """Create an unauthenticated test client."""
    from memberportal.main import app

    yield _build_client(db_session)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def admin_client(db_session: Session, admin_user: Member):
    """Create a test client authenticated as the admin user."""
    from memberportal.main import app

    yield _build_client(db_session, admin_user)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def member_client(db_session: Session, member_user: Member):
    """Create a test client authenticated as a regular member."""
    from memberportal.main import app

    yield _build_client(db_session, member_user)
    app.dependency_overrides.clear()
