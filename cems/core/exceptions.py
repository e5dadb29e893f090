# cems/core/exceptions.py
"""
Application error hierarchy.

Every error raised by the workflow and the moderation layer derives from
AppError so the boundary handlers can render the standard
``{success: false, message, code}`` envelope without inspecting types.
"""

from typing import List, Optional


class ErrorCode:
    """Machine-readable error codes returned alongside the message."""
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation_failed"
    CONFLICT = "conflict"
    DEADLINE_EXPIRED = "deadline_expired"
    EVENT_FULL = "event_full"
    ALREADY_REGISTERED = "already_registered"
    LIMIT_EXCEEDED = "limit_exceeded"
    ALREADY_STARTED = "already_started"
    INVALID_STATE = "invalid_state"
    ALREADY_SUBMITTED = "already_submitted"
    TIME_CONFLICT = "time_conflict"
    REGISTRATION_CLOSED = "registration_closed"
    DEPENDENCY_FAILURE = "dependency_failure"
    INTERNAL = "internal_error"


class AppError(Exception):
    """Base application error with structured information"""

    status_code: int = 500
    code: str = ErrorCode.INTERNAL

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = 404
    code = ErrorCode.NOT_FOUND


class ForbiddenError(AppError):
    status_code = 403
    code = ErrorCode.FORBIDDEN


class ValidationFailedError(AppError):
    """Malformed or out-of-range input, reported per field."""

    status_code = 400
    code = ErrorCode.VALIDATION

    def __init__(self, message: str = "Validation failed", errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


class ConflictError(AppError):
    """The request is well-formed but the current state does not allow it."""
    status_code = 400
    code = ErrorCode.CONFLICT


class DeadlineExpiredError(ConflictError):
    code = ErrorCode.DEADLINE_EXPIRED

    def __init__(self, message: str = "Registration deadline has passed"):
        super().__init__(message)


class EventFullError(ConflictError):
    code = ErrorCode.EVENT_FULL

    def __init__(self, message: str = "Event is full"):
        super().__init__(message)


class AlreadyRegisteredError(ConflictError):
    code = ErrorCode.ALREADY_REGISTERED

    def __init__(self, message: str = "You are already registered for this event"):
        super().__init__(message)


class RegistrationLimitError(ConflictError):
    code = ErrorCode.LIMIT_EXCEEDED

    def __init__(self, max_allowed: int):
        self.max_allowed = max_allowed
        super().__init__(f"Registration limit reached ({max_allowed})")


class RegistrationClosedError(ConflictError):
    code = ErrorCode.REGISTRATION_CLOSED

    def __init__(self, message: str = "Event registration is currently closed"):
        super().__init__(message)


class AlreadyStartedError(ConflictError):
    code = ErrorCode.ALREADY_STARTED

    def __init__(
        self, message: str = "Cannot unregister from an event that has already started"
    ):
        super().__init__(message)


class InvalidStateError(ConflictError):
    code = ErrorCode.INVALID_STATE


class AlreadySubmittedError(ConflictError):
    code = ErrorCode.ALREADY_SUBMITTED

    def __init__(self, message: str = "Feedback already submitted for this event"):
        super().__init__(message)


class TimeConflictError(ConflictError):
    code = ErrorCode.TIME_CONFLICT


class DependencyFailure(AppError):
    """
    A collaborator (QR, PDF, email) failed. Logged by the workflow and never
    surfaced as a failure of the primary operation.
    """
    status_code = 502
    code = ErrorCode.DEPENDENCY_FAILURE

    def __init__(self, message: str, dependency: str):
        super().__init__(message, details={"dependency": dependency})
        self.dependency = dependency
