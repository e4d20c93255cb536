from __future__ import annotations

from datetime import date

from ..attendance.repository import AttendanceRepository
from ..attendance.service import validate_range
from ..core.enums import AttendanceStatus
from ..policy.evaluator import is_working_day
from ..settings.service import SettingsService
from .model import AttendanceSummary


def attendance_percentage(present: int, absent: int) -> int:
    """round(present / (present + absent) * 100), halves rounded up; 0 with no counted days."""
    denominator = present + absent
    if denominator == 0:
        return 0
    return (present * 200 + denominator) // (2 * denominator)


class SummaryService:
    def __init__(self, attendance: AttendanceRepository, settings: SettingsService):
        self._attendance = attendance
        self._settings = settings

    def summarize(self, person_id: str, *, start: date, end: date) -> AttendanceSummary:
        validate_range(start, end)

        settings = self._settings.get_settings()
        holidays = self._settings.get_holidays()

        present = absent = leave = incomplete = minutes = 0
        for record in self._attendance.list_for_person(person_id, start=start, end=end):
            if record.status in (AttendanceStatus.HOLIDAY, AttendanceStatus.NOT_STARTED):
                continue
            if not is_working_day(record.work_date, holidays, settings):
                continue

            if record.status == AttendanceStatus.CHECKED_OUT:
                present += 1
                minutes += int(record.work_duration_minutes or 0)
            elif record.status == AttendanceStatus.CHECKED_IN:
                present += 1
                incomplete += 1
            elif record.status == AttendanceStatus.ABSENT:
                absent += 1
            elif record.status == AttendanceStatus.LEAVE:
                leave += 1

        return AttendanceSummary(
            start=start,
            end=end,
            present_days=present,
            absent_days=absent,
            leave_days=leave,
            attendance_percentage=attendance_percentage(present, absent),
            incomplete_days=incomplete,
            total_work_minutes=minutes,
        )
