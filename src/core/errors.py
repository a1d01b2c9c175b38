"""
Custom exceptions and error handling for TravelTrack.

Defines application-specific exceptions with error codes and HTTP status
codes for consistent error handling across Lambda functions and client
communication.

Usage:
    from core.errors import NotFoundError, ErrorCode

    raise NotFoundError("Trip not found", code=ErrorCode.NOT_FOUND)
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    AUTH_FAILED = "AUTH_FAILED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"

    # Authorization errors
    FORBIDDEN = "FORBIDDEN"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VERSION_CONFLICT = "VERSION_CONFLICT"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Upstream errors
    EMAIL_FAILED = "EMAIL_FAILED"
    IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
    WEATHER_UNAVAILABLE = "WEATHER_UNAVAILABLE"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_FAILED: "Authentication failed. Please sign in again.",
    ErrorCode.INVALID_TOKEN: "Your session has expired. Please sign in again.",
    ErrorCode.INVALID_CREDENTIALS: "Invalid email or password.",
    ErrorCode.EMAIL_NOT_VERIFIED: "Please verify your email before signing in.",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorCode.NOT_FOUND: "The requested resource was not found.",
    ErrorCode.CONFLICT: "The request conflicts with existing data.",
    ErrorCode.VERSION_CONFLICT: "This record was changed by someone else. Please reload and try again.",
    ErrorCode.VALIDATION_ERROR: "Your request contains invalid information. Please check and try again.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.EMAIL_FAILED: "We could not send the email. Please try again later.",
    ErrorCode.IMAGE_UPLOAD_FAILED: "Image upload failed. Please try again.",
    ErrorCode.WEATHER_UNAVAILABLE: "Weather data is temporarily unavailable. Please try again later.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
}


class TravelTrackError(Exception):
    """Base exception for all TravelTrack errors."""

    status_code: int = 500
    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])

    @property
    def public_message(self) -> str:
        """Message safe to return to the client: our own text for 4xx, the generic one otherwise."""
        if self.status_code < 500:
            return self.message
        return self.user_message


class ValidationError(TravelTrackError):
    """Input validation or schema validation failed."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message, code)
        self.errors = errors or []


class AuthenticationError(TravelTrackError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    default_code = ErrorCode.AUTH_FAILED


class ForbiddenError(TravelTrackError):
    """Authenticated, but not allowed to perform the operation."""

    status_code = 403
    default_code = ErrorCode.FORBIDDEN


class NotFoundError(TravelTrackError):
    """Referenced record or item does not exist."""

    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class ConflictError(TravelTrackError):
    """Duplicate registration, duplicate collaborator, duplicate review and the like."""

    status_code = 409
    default_code = ErrorCode.CONFLICT


class VersionConflictError(ConflictError):
    """A conditional write lost against a concurrent update."""

    default_code = ErrorCode.VERSION_CONFLICT


class UpstreamError(TravelTrackError):
    """Email, image or weather provider failed."""

    status_code = 502
