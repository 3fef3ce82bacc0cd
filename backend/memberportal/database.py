"""Engine and session factory.

The API uses ``get_db`` as a request dependency; the retention worker and the
command-line scripts open sessions from ``SessionLocal`` directly because the
purge commits row by row.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings

DATABASE_URL = get_settings().DATABASE_URL


def _engine_options(url: str) -> dict:
    options = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        # API workers plus one retention worker share the pool
        options["pool_size"] = 5
        options["max_overflow"] = 10
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
