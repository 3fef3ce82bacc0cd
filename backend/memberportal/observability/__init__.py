"""Observability for the member portal.

Structured logging, request/job correlation IDs and Prometheus metrics.
"""

from .logging_config import configure_logging, get_logger
from .request_id import generate_request_id, get_request_id, sanitize_request_id, set_request_id
from .middleware import REQUEST_ID_HEADER, RequestIDMiddleware

__all__ = [
    "configure_logging",
    "get_logger",
    "generate_request_id",
    "get_request_id",
    "sanitize_request_id",
    "set_request_id",
    "REQUEST_ID_HEADER",
    "RequestIDMiddleware",
]
