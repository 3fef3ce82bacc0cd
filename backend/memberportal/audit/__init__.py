"""Append-only audit trail for administrative and compliance actions."""

from .service import log_audit_event, log_from_request

__all__ = ["log_audit_event", "log_from_request"]
