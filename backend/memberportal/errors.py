"""Domain exceptions for the member portal.

Services raise these instead of HTTPException so that the same code runs in
request handlers, Celery tasks and command-line scripts. The FastAPI app maps
every PortalError to a JSON response using ``status_code`` and ``code``.
"""

from fastapi import status


class PortalError(Exception):
    """Base class for errors surfaced to the caller with a descriptive message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(PortalError):
    """Bad input shape or values."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class InvalidStateError(ValidationError):
    """Operation does not apply to the entity in its current state."""

    code = "invalid_state"


class NotFoundError(PortalError):
    """Referenced entity is missing."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ForbiddenError(PortalError):
    """Caller may not perform this action (e.g. acting on their own account)."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class AnonymizedMemberError(PortalError):
    """Member was anonymized; the original data no longer exists."""

    status_code = status.HTTP_409_CONFLICT
    code = "member_anonymized"

    def __init__(self, message: str = "Cannot restore anonymized account"):
        super().__init__(message)


class RetentionRunInProgressError(PortalError):
    """Another retention run holds the run lock."""

    status_code = status.HTTP_409_CONFLICT
    code = "retention_run_in_progress"


class ConfigurationError(PortalError):
    """Deployment is missing something the operation needs.

    Never swallowed: a data subject request that cannot be routed must fail
    loudly instead of being dropped.
    """

    code = "configuration_error"


class RetentionPassError(PortalError):
    """A retention pass could not select its candidate rows."""

    code = "retention_pass_failed"

    def __init__(self, pass_name: str, message: str):
        self.pass_name = pass_name
        super().__init__(message)
