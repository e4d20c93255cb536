from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class AttendanceSummary:
    start: date
    end: date
    present_days: int
    absent_days: int
    leave_days: int
    attendance_percentage: int
    # Present days whose check-out never happened.
    incomplete_days: int = 0
    total_work_minutes: int = 0

    @property
    def total_work_hours(self) -> float:
        return round(self.total_work_minutes / 60, 1)
