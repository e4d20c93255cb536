"""Pure admission checks over (instant, settings, holiday calendar).

Times are compared at minute granularity and window bounds are inclusive,
so any instant inside the boundary minute is still admissible.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable

from ..settings.model import AttendanceSettings, Holiday


def _minute_of_day(value) -> int:
    return value.hour * 60 + value.minute


def time_of_day_label(value: time) -> str:
    return value.strftime("%H:%M")


def is_working_day(day: date, holidays: Iterable[Holiday], settings: AttendanceSettings) -> bool:
    if day.weekday() not in settings.working_days:
        return False
    return not any(h.holiday_date == day for h in holidays)


def is_too_early_for_check_in(now: datetime, settings: AttendanceSettings) -> bool:
    return _minute_of_day(now) < _minute_of_day(settings.check_in_start_time)


def is_within_check_in_window(
    now: datetime,
    settings: AttendanceSettings,
    holidays: Iterable[Holiday] = (),
) -> bool:
    minute = _minute_of_day(now)
    in_window = _minute_of_day(settings.check_in_start_time) <= minute <= _minute_of_day(settings.check_in_end_time)
    return in_window and is_working_day(now.date(), holidays, settings)


def is_check_in_deadline_passed(now: datetime, settings: AttendanceSettings, *, has_checked_in: bool = False) -> bool:
    if has_checked_in:
        return False
    return _minute_of_day(now) > _minute_of_day(settings.check_in_end_time)


def is_check_out_open(now: datetime, settings: AttendanceSettings) -> bool:
    if settings.check_out_start_time is None:
        return True
    return _minute_of_day(now) >= _minute_of_day(settings.check_out_start_time)


def is_check_out_closed(now: datetime, settings: AttendanceSettings) -> bool:
    if settings.check_out_end_time is None:
        return False
    return _minute_of_day(now) > _minute_of_day(settings.check_out_end_time)


def is_within_check_out_window(now: datetime, settings: AttendanceSettings, *, has_checked_in: bool) -> bool:
    """Unset check-out end means open until the day rolls over."""
    if not has_checked_in:
        return False
    return is_check_out_open(now, settings) and not is_check_out_closed(now, settings)


def work_duration_minutes(check_in: datetime, check_out: datetime) -> int:
    return int((check_out - check_in).total_seconds() // 60)
