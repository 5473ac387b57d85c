"""
Error taxonomy for the forum client.

Every failure that leaves the gateway is a ``ForumError`` carrying one
human-readable message. Callers display ``str(error)`` and may branch on
``error.kind`` (or the subclass) to decide what to do next, for example
routing to the login screen on ``SessionExpired``.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Coarse category of a ``ForumError``."""

    VALIDATION = "validation"
    SESSION_EXPIRED = "session_expired"
    MALFORMED_RESPONSE = "malformed_response"
    REQUEST_FAILED = "request_failed"
    CONNECTIVITY = "connectivity"


class ForumError(Exception):
    """Base exception for all forum client failures."""

    kind: ErrorKind = ErrorKind.REQUEST_FAILED

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(ForumError):
    """Caller-supplied input failed a local precondition."""

    kind = ErrorKind.VALIDATION


class SessionExpired(ForumError):
    """An authenticated operation was attempted with no active session."""

    kind = ErrorKind.SESSION_EXPIRED

    def __init__(self, message: str = "Session expired. Please log in again."):
        super().__init__(message)


class MalformedResponse(ForumError):
    """A server payload could not be normalized into a domain record."""

    kind = ErrorKind.MALFORMED_RESPONSE


class RequestFailed(ForumError):
    """The transport reported a failure; ``status_code`` is set for HTTP errors."""

    kind = ErrorKind.REQUEST_FAILED

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ConnectivityError(ForumError):
    """The server could not be reached at all."""

    kind = ErrorKind.CONNECTIVITY
