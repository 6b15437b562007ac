"""
Error taxonomy shared by services and endpoints.

Services raise one of the ``AppError`` subclasses below; the handler
registered in ``main.create_app`` renders them as
``{"message": ..., "error": ...}`` with the matching HTTP status.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from fastapi import status


logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class ValidationError(AppError):
    """Malformed credentials or missing/invalid request fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(AppError):
    """Missing or revoked token, or an ownership/organizer mismatch."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ServerError(AppError):
    """Catch-all for store or hashing failures."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


@contextmanager
def server_error_guard(action: str) -> Iterator[None]:
    """Let ``AppError`` through and turn anything else into a ``ServerError``.

    The underlying exception message is exposed in the ``error`` field.
    """
    try:
        yield
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Server error during %s", action)
        raise ServerError(f"Server error during {action}", error=str(exc)) from exc
