"""Data retention: scheduled purge, restore and manual deactivation."""

from .schemas import PurgeStats, RetentionPolicy, get_retention_policy
from .service import RetentionService, run_retention_purge

__all__ = [
    "PurgeStats",
    "RetentionPolicy",
    "RetentionService",
    "get_retention_policy",
    "run_retention_purge",
]
