"""Error taxonomy shared by the server routes, the stores and the client.

Every failure that crosses a layer boundary is a ``RewatchError`` subclass.
The server renders them as ``{"error": message}`` with ``status_code``; the
client maps HTTP responses back onto the same classes.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    BUSY = "busy"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    INVALID_CREDENTIALS = "invalid_credentials"
    NETWORK = "network"
    INTERNAL = "internal"


class RewatchError(Exception):
    """Base class; subclasses pin ``kind`` and the default status code."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = (message or "").strip() or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(RewatchError):
    kind = ErrorKind.UNAUTHENTICATED
    status_code = 401
    default_message = "Not authenticated"


class BusyError(RewatchError):
    kind = ErrorKind.BUSY
    status_code = 409
    default_message = "Already saving"


class NotFoundError(RewatchError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "User not found"


class InvalidInputError(RewatchError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "Invalid input"


class ConflictError(RewatchError):
    # The public API reports duplicate signups as 400, same as other bad input.
    kind = ErrorKind.CONFLICT
    status_code = 400
    default_message = "Email is already in use"


class InvalidCredentialsError(RewatchError):
    kind = ErrorKind.INVALID_CREDENTIALS
    status_code = 401
    default_message = "Invalid email or password"


class NetworkError(RewatchError):
    kind = ErrorKind.NETWORK
    status_code = 503
    default_message = "Network error"


class InternalError(RewatchError):
    kind = ErrorKind.INTERNAL
    status_code = 500
    default_message = "Internal server error"


_BY_STATUS: dict[int, type[RewatchError]] = {
    400: InvalidInputError,
    401: InvalidCredentialsError,
    404: NotFoundError,
}


def error_for_status(status: int, message: Optional[str] = None) -> RewatchError:
    """Map an HTTP status from the Re:Watch API back onto the taxonomy."""
    cls = _BY_STATUS.get(int(status), InternalError)
    return cls(message)
