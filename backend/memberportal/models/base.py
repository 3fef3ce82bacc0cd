"""Declarative base and column helpers shared by the portal models.

All timestamp columns hold naive UTC datetimes so that PostgreSQL and the
SQLite test database compare them the same way.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base


# JSONB on PostgreSQL (indexable audit details), plain JSON elsewhere
PortableJSONB = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


Base = declarative_base()
