"""Run lock for the retention job.

Two overlapping retention runs would race on the same rows and double-count
statistics, so every run holds a row in ``job_lock`` for its duration.
Acquisition is a plain INSERT: the primary key makes the second writer fail.
A lock older than its TTL is considered abandoned (crashed worker) and may
be taken over.
"""

import logging
import os
import socket
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from sqlalchemy import insert, delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import RetentionRunInProgressError
from ..models.base import utcnow
from ..models.job_lock import JobLock

logger = logging.getLogger(__name__)

RETENTION_LOCK_NAME = "retention.purge"


def _default_owner() -> str:
    return f"{socket.gethostname()}:{os.getpid()}:{uuid4().hex[:8]}"


class JobRunLock:
    """Database-backed mutual exclusion for a named job.

    Usage:
        with JobRunLock(db, RETENTION_LOCK_NAME, ttl_minutes=120):
            ...
    """

    def __init__(
        self,
        db: Session,
        name: str,
        ttl_minutes: int,
        owner: Optional[str] = None,
    ):
        self.db = db
        self.name = name
        self.ttl = timedelta(minutes=ttl_minutes)
        self.owner = owner or _default_owner()
        self.acquired = False

    def acquire(self) -> None:
        """Take the lock or raise RetentionRunInProgressError."""
        now = utcnow()
        try:
            self.db.execute(
                insert(JobLock).values(name=self.name, owner=self.owner, acquired_at=now)
            )
            self.db.commit()
            self.acquired = True
            logger.info(f"Acquired job lock '{self.name}'", extra={"run_owner": self.owner})
            return
        except IntegrityError:
            self.db.rollback()

        holder = self.db.query(JobLock).filter(JobLock.name == self.name).first()
        held_by = holder.owner if holder is not None else "unknown"

        if holder is not None and holder.acquired_at < now - self.ttl:
            # Compare-and-swap on acquired_at so two takeovers cannot both win
            result = self.db.execute(
                update(JobLock)
                .where(JobLock.name == self.name, JobLock.acquired_at == holder.acquired_at)
                .values(owner=self.owner, acquired_at=now)
            )
            self.db.commit()
            if result.rowcount == 1:
                logger.warning(
                    f"Took over stale job lock '{self.name}' from {held_by}",
                    extra={"run_owner": self.owner},
                )
                self.acquired = True
                return

        raise RetentionRunInProgressError(
            f"A retention run is already in progress (lock held by {held_by})"
        )

    def release(self) -> None:
        """Drop the lock if this instance holds it."""
        if not self.acquired:
            return
        try:
            self.db.execute(
                delete(JobLock).where(JobLock.name == self.name, JobLock.owner == self.owner)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                f"Failed to release job lock '{self.name}'; it will expire after {self.ttl}",
                exc_info=True,
                extra={"run_owner": self.owner},
            )
        finally:
            self.acquired = False

    def __enter__(self) -> "JobRunLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
