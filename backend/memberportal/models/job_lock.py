"""JobLock SQLAlchemy model"""

from sqlalchemy import Column, Text, DateTime

from .base import Base, utcnow


class JobLock(Base):
    """Run-lock row for singleton background jobs.

    The primary key on ``name`` makes acquisition an INSERT that fails when
    another process already holds the lock.
    """
    __tablename__ = "job_lock"

    name = Column(Text, primary_key=True)
    owner = Column(Text, nullable=False)
    acquired_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<JobLock(name='{self.name}', owner='{self.owner}', acquired_at={self.acquired_at})>"
