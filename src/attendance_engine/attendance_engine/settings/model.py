from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, Optional

from ..common.datetime_utils import parse_hhmm
from ..core.constants import (
    DEFAULT_CHECK_IN_END,
    DEFAULT_CHECK_IN_START,
    DEFAULT_CHECK_OUT_END,
    DEFAULT_MINIMUM_WORK_MINUTES,
    DEFAULT_WORKING_DAYS,
)
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceSettings:
    """Process-wide check-in/check-out windows, applied to every person."""

    check_in_start_time: time
    check_in_end_time: time
    check_out_start_time: Optional[time] = None
    check_out_end_time: Optional[time] = None
    working_days: FrozenSet[int] = field(default_factory=lambda: DEFAULT_WORKING_DAYS)
    minimum_work_minutes: int = DEFAULT_MINIMUM_WORK_MINUTES

    @classmethod
    def defaults(cls) -> "AttendanceSettings":
        return cls(
            check_in_start_time=parse_hhmm(DEFAULT_CHECK_IN_START),
            check_in_end_time=parse_hhmm(DEFAULT_CHECK_IN_END),
            check_out_end_time=parse_hhmm(DEFAULT_CHECK_OUT_END),
        )

    def validate(self) -> "AttendanceSettings":
        if not self.check_in_start_time < self.check_in_end_time:
            raise ValidationError("Check-in start must be before check-in end")
        if (
            self.check_out_start_time is not None
            and self.check_out_end_time is not None
            and not self.check_out_start_time < self.check_out_end_time
        ):
            raise ValidationError("Check-out start must be before check-out end")
        if any(d not in range(7) for d in self.working_days):
            raise ValidationError("Working days must be weekday numbers 0 (Monday) to 6 (Sunday)")
        if self.minimum_work_minutes < 0:
            raise ValidationError("Minimum work minutes cannot be negative")
        return self


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_date: date
    label: str
    description: Optional[str] = None
    created_by: Optional[str] = None
