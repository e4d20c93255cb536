from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role read from the authenticated session."""

    ADMIN = "admin"
    INTERN = "intern"


class AttendanceStatus(str, Enum):
    """Per-day attendance state stored on the record."""

    NOT_STARTED = "not_started"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    ABSENT = "absent"
    LEAVE = "leave"
    HOLIDAY = "holiday"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        AttendanceStatus.CHECKED_OUT,
        AttendanceStatus.ABSENT,
        AttendanceStatus.LEAVE,
        AttendanceStatus.HOLIDAY,
    }
)


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AbsentReason(str, Enum):
    NO_CHECKIN = "no_checkin"


class ReasonCode(str, Enum):
    """Machine-readable reason attached to every rejected operation."""

    NOT_WORKING_DAY = "not_working_day"
    TOO_EARLY = "too_early"
    DEADLINE_PASSED = "deadline_passed"
    CHECK_OUT_NOT_OPEN = "check_out_not_open"
    CHECK_OUT_CLOSED = "check_out_closed"

    NOT_CHECKED_IN = "not_checked_in"
    ALREADY_CHECKED_OUT = "already_checked_out"
    DAY_CLOSED = "day_closed"
    CLOCK_REGRESSED = "clock_regressed"
    REQUEST_ALREADY_DECIDED = "request_already_decided"
    DAY_ALREADY_WORKED = "day_already_worked"

    LEAVE_APPROVED = "leave_approved"
    LEAVE_ALREADY_REQUESTED = "leave_already_requested"

    CLOCK_UNAVAILABLE = "clock_unavailable"
    STORE_UNAVAILABLE = "store_unavailable"
