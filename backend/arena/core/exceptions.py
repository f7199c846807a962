"""Custom exception classes for the application"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ErrorKind(str, Enum):
    """Closed set of error kinds understood by the API layer"""
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    UNRESOLVED = "unresolved"


# kind -> (status code, message label)
ERROR_RESPONSES: Dict[ErrorKind, Tuple[int, str]] = {
    ErrorKind.NOT_FOUND: (404, "Not found"),
    ErrorKind.CONFLICT: (409, "Conflict"),
    ErrorKind.UNAUTHORIZED: (401, "Unauthorized"),
    ErrorKind.FORBIDDEN: (403, "Forbidden"),
    ErrorKind.BAD_REQUEST: (400, "Bad request"),
    ErrorKind.UNRESOLVED: (500, "Internal server error"),
}

INTERNAL_ERROR_LABEL = "Internal server error"


class AppError(Exception):
    """Base exception for all API errors"""

    kind: ErrorKind = ErrorKind.UNRESOLVED

    def __init__(
        self,
        message: str = "",
        details: Optional[Dict[str, Any]] = None,
        kind: Optional[ErrorKind] = None,
    ):
        if kind is not None:
            self.kind = kind
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_RESPONSES[self.kind][0]

    def public_message(self) -> str:
        """Message shown to the client, prefixed with the kind label"""
        label = ERROR_RESPONSES[self.kind][1]
        return f"{label}: {self.message}" if self.message else label


class NotFoundError(AppError):
    """Referenced entity does not exist"""
    kind = ErrorKind.NOT_FOUND


class ConflictError(AppError):
    """Entity already exists"""
    kind = ErrorKind.CONFLICT


class UnAuthorizedError(AppError):
    """Credentials or session are not currently authoritative"""
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(AppError):
    """Request lacks the anti-forgery token"""
    kind = ErrorKind.FORBIDDEN


class BadRequestError(AppError):
    """Malformed input at the trust boundary"""
    kind = ErrorKind.BAD_REQUEST


class UnresolvedError(AppError):
    """A store operation that was expected to apply produced no effect"""
    kind = ErrorKind.UNRESOLVED


# Token errors
class InvalidTokenError(Exception):
    """Token failed verification"""


class TokenInvalidError(InvalidTokenError):
    """Token is malformed or its signature does not match"""


class TokenExpiredError(InvalidTokenError):
    """Token signature is valid but the token has expired"""
