"""Read-only compliance reporting."""

from .service import get_consent_stats, get_retention_stats, query_audit_logs

__all__ = ["get_consent_stats", "get_retention_stats", "query_audit_logs"]
