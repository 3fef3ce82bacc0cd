"""Correlation IDs for log lines.

HTTP requests carry the caller's ``X-Request-ID`` (or a fresh one); background
jobs such as the retention purge get a prefixed run ID so every line of one
run can be grouped.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

NO_REQUEST_ID = "no-request-id"

# Accept caller-supplied IDs only when they are short and log-safe
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def generate_request_id(prefix: Optional[str] = None) -> str:
    """New correlation ID, e.g. ``3f2b...`` or ``retention-3f2b...``."""
    value = uuid.uuid4().hex
    return f"{prefix}-{value}" if prefix else value


def sanitize_request_id(candidate: Optional[str]) -> Optional[str]:
    """Return the caller's ID if usable, else None."""
    if candidate and _VALID_REQUEST_ID.match(candidate):
        return candidate
    return None


def get_request_id() -> str:
    return request_id_var.get() or NO_REQUEST_ID


def set_request_id(request_id: Optional[str]) -> None:
    request_id_var.set(request_id)
