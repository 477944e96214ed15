"""
Error types raised by the request handlers.

Every error carries the HTTP status it is answered with and a message that
is safe to show to the client. Store and hashing failures are wrapped in
OperationalError so internal details never reach the response body.
"""
from typing import Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Request body failed a check made before touching the store."""
    status_code = 401


class Unauthorized(AppError):
    status_code = 401


class NotFound(AppError):
    """A looked-up document is absent.

    Handlers that treat this as informational pass status_code=200.
    """
    status_code = 404


class OperationalError(AppError):
    status_code = 500


NO_PERMISSION = "You don't have permission to perform this action."
