"""
Domain errors shared by services and endpoints.

Services raise these; the exception handler registered in ``app.main`` turns
them into the ``{success: false, message}`` envelope with the matching status.
"""
from fastapi import status


class AppError(Exception):
    """Base class for expected, caller-visible failures"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "An error occurred"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidArgument(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Conflict(AppError):
    # Duplicates are reported as plain bad requests to clients
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Already exists"


class InvalidState(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Operation not allowed in the current state"


class UpstreamUnavailable(AppError):
    """Third-party provider failure; callers degrade instead of surfacing it"""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Upstream service unavailable"
