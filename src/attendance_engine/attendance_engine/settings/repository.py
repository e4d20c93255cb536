from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceSettings, Holiday


class SettingsRepository(Protocol):
    def get_settings(self) -> Optional[AttendanceSettings]:
        raise NotImplementedError

    def save_settings(self, settings: AttendanceSettings, *, updated_by: Optional[str], updated_at: datetime) -> None:
        raise NotImplementedError

    def list_holidays(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        raise NotImplementedError

    def add_holiday(
        self,
        *,
        holiday_date: date,
        label: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Optional[int]:
        """Insert a holiday.

        Returns holiday_id, or None when that date is already a holiday.
        """

        raise NotImplementedError

    def delete_holiday(self, *, holiday_id: int) -> bool:
        raise NotImplementedError
