"""Error taxonomy and user-facing error classification."""

from enum import Enum

import pydantic
from pydantic import BaseModel


class TaskTrackerError(Exception):
    """Base class for every failure surfaced by the task tracker."""


class ValidationError(TaskTrackerError):
    """Input rejected locally, never sent to the gateway."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError) -> "ValidationError":
        """Build from the first error of a pydantic validation failure."""
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        message = str(first.get("msg", "Invalid input")).removeprefix("Value error, ")
        return cls(message, field=field)


class NotFoundError(TaskTrackerError):
    """Requested user or task does not exist."""


class DuplicateError(TaskTrackerError):
    """Email or username already registered."""


class DeactivatedError(TaskTrackerError):
    """Account exists but has been deactivated."""


class TransportError(TaskTrackerError):
    """Gateway unreachable, timed out, or answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotAuthenticatedError(TaskTrackerError):
    """Task operation attempted without an authenticated principal."""


class EditConflictError(TaskTrackerError):
    """Another inline edit is already in progress."""


class StorageError(TaskTrackerError):
    """Session persistence could not be read or written."""


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_DUPLICATE = "ERR_DUPLICATE"
    ERR_DEACTIVATED = "ERR_DEACTIVATED"
    ERR_TRANSPORT = "ERR_TRANSPORT"
    ERR_NOT_AUTHENTICATED = "ERR_NOT_AUTHENTICATED"
    ERR_EDIT_CONFLICT = "ERR_EDIT_CONFLICT"
    ERR_STORAGE = "ERR_STORAGE"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, ValidationError):
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION,
            message=str(exception),
            suggestion="Correct the highlighted field and try again.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message=str(exception),
            suggestion="Refresh your task list or check the details you entered.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DuplicateError):
        return ErrorResponse(
            code=ErrorCode.ERR_DUPLICATE,
            message=str(exception),
            suggestion="Sign in instead, or choose a different email or username.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DeactivatedError):
        return ErrorResponse(
            code=ErrorCode.ERR_DEACTIVATED,
            message="Account is deactivated.",
            suggestion="Please contact support.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, NotAuthenticatedError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_AUTHENTICATED,
            message="You are not signed in.",
            suggestion="Sign in to manage your tasks.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, EditConflictError):
        return ErrorResponse(
            code=ErrorCode.ERR_EDIT_CONFLICT,
            message="Another task is already being edited.",
            suggestion="Save or cancel the current edit first.",
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, StorageError):
        return ErrorResponse(
            code=ErrorCode.ERR_STORAGE,
            message="Your session could not be saved.",
            suggestion="Check that the session file location is writable.",
            severity=ErrorSeverity.HIGH,
        )

    if isinstance(exception, TransportError | ConnectionError | TimeoutError):
        return ErrorResponse(
            code=ErrorCode.ERR_TRANSPORT,
            message="Could not reach the task server.",
            suggestion="Please check your connection and try again.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
    )
