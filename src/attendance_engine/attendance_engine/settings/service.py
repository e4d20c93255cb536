from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import parse_hhmm
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_SETTINGS_CACHE_TTL_SECONDS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .cache import TimedCache
from .model import AttendanceSettings, Holiday
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_TIME_FIELDS = {
    "check_in_start_time": False,
    "check_in_end_time": False,
    "check_out_start_time": True,
    "check_out_end_time": True,
}


class SettingsService:
    """Read-mostly attendance configuration and holiday calendar.

    Reads go through short-lived caches; admin writes invalidate them.
    """

    def __init__(
        self,
        settings: SettingsRepository,
        *,
        ttl_seconds: float = DEFAULT_SETTINGS_CACHE_TTL_SECONDS,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._settings = settings
        self._settings_cache: TimedCache[AttendanceSettings] = TimedCache(
            self._load_settings, ttl_seconds=ttl_seconds, timer=timer
        )
        self._holidays_cache: TimedCache[tuple[Holiday, ...]] = TimedCache(
            lambda: tuple(self._settings.list_holidays()), ttl_seconds=ttl_seconds, timer=timer
        )

    def _load_settings(self) -> AttendanceSettings:
        stored = self._settings.get_settings()
        return stored if stored is not None else AttendanceSettings.defaults()

    def get_settings(self) -> AttendanceSettings:
        return self._settings_cache.get()

    def get_holidays(self) -> tuple[Holiday, ...]:
        return self._holidays_cache.get()

    def list_holidays(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        return [
            h
            for h in self.get_holidays()
            if (start is None or h.holiday_date >= start) and (end is None or h.holiday_date <= end)
        ]

    def update_settings(
        self,
        *,
        current_role: Role,
        patch: dict,
        updated_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceSettings:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change attendance settings")
        if not patch:
            raise ValidationError("Nothing to update")

        changes: dict = {}
        for key, value in patch.items():
            if key in _TIME_FIELDS:
                nullable = _TIME_FIELDS[key]
                if value in (None, "") and nullable:
                    changes[key] = None
                else:
                    changes[key] = parse_hhmm(value, key)
            elif key == "working_days":
                if not isinstance(value, (list, tuple)):
                    raise ValidationError("working_days must be a list of weekday numbers")
                try:
                    changes[key] = frozenset(int(d) for d in value)
                except (TypeError, ValueError):
                    raise ValidationError("working_days must be a list of weekday numbers")
            elif key == "minimum_work_minutes":
                try:
                    changes[key] = int(value)
                except (TypeError, ValueError):
                    raise ValidationError("minimum_work_minutes must be an integer")
            else:
                raise ValidationError(f"Unknown setting: {key}")

        updated = replace(self._load_settings(), **changes).validate()
        self._settings.save_settings(updated, updated_by=updated_by, updated_at=now or datetime.now())
        self._settings_cache.invalidate()
        logger.info("Attendance settings updated by %s: %s", updated_by, sorted(changes))
        return updated

    def add_holiday(
        self,
        *,
        current_role: Role,
        holiday_date: date,
        label: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can manage holidays")

        label = require_non_empty(label, "Holiday label")
        holiday_id = self._settings.add_holiday(
            holiday_date=holiday_date,
            label=label,
            description=optional_text(description),
            created_by=created_by,
        )
        if holiday_id is None:
            raise ValidationError(f"{holiday_date.isoformat()} is already a holiday")

        self._holidays_cache.invalidate()
        logger.info("Holiday %s (%s) added by %s", holiday_date.isoformat(), label, created_by)
        return holiday_id

    def delete_holiday(self, *, current_role: Role, holiday_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can manage holidays")

        if not self._settings.delete_holiday(holiday_id=int(holiday_id)):
            raise NotFoundError("Holiday not found")
        self._holidays_cache.invalidate()
