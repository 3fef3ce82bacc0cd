"""Data subject requests: classification, self-service export and submission."""

from .service import (
    DSR_KEYWORDS,
    classify_request_type,
    export_member_data,
    is_dsr_message,
    list_dsr_requests,
    submit_data_request,
)

__all__ = [
    "DSR_KEYWORDS",
    "classify_request_type",
    "export_member_data",
    "is_dsr_message",
    "list_dsr_requests",
    "submit_data_request",
]
