from __future__ import annotations

from .enums import ReasonCode


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AttendanceError(DomainError):
    """Rejected attendance/leave operation with a typed reason."""

    retryable = False

    def __init__(self, reason: ReasonCode, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class PolicyViolation(AttendanceError):
    """Outside a window or not a working day; retry once the window changes."""


class InvalidTransition(AttendanceError):
    """The day's record is not in a state that allows the action."""


class ConflictingLeave(AttendanceError):
    """An approved (or active) leave request collides with the action."""


class InfrastructureError(AttendanceError):
    """Transient failure of the clock or the store; nothing was written."""

    retryable = True


class ClockUnavailable(InfrastructureError):
    def __init__(self, message: str = "Trusted time source is unavailable, please retry"):
        super().__init__(ReasonCode.CLOCK_UNAVAILABLE, message)


class StoreUnavailable(InfrastructureError):
    def __init__(self, message: str = "Attendance store is unavailable, please retry"):
        super().__init__(ReasonCode.STORE_UNAVAILABLE, message)
