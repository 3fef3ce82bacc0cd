"""Request correlation middleware.

Every request gets an ID (the caller's ``X-Request-ID`` when it is safe to
log, otherwise a new one). The ID is echoed in the response header and
attached to all log lines written while the request is handled.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .request_id import generate_request_id, sanitize_request_id, set_request_id
from .logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a correlation ID and log one line per completed request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = sanitize_request_id(request.headers.get(REQUEST_ID_HEADER)) or generate_request_id()
        set_request_id(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"{request.method} {request.url.path} raised",
                exc_info=True,
                extra={"method": request.method, "path": request.url.path},
            )
            raise
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
