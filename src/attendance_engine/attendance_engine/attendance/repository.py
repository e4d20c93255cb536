from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AbsentReason, AttendanceStatus
from .model import AttendanceRecord, GeoLocation


class AttendanceRepository(Protocol):
    def get_for_person_and_date(self, person_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_person(self, person_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Records in [start, end], newest first."""

        raise NotImplementedError

    def create_if_absent(self, record: AttendanceRecord) -> bool:
        """Insert guarded by the (person, day) key.

        Returns False when a record for that key already exists.
        """

        raise NotImplementedError

    def complete_checkout(
        self,
        *,
        person_id: str,
        work_date: date,
        check_out_time: datetime,
        work_duration_minutes: int,
        progress: Optional[str],
        blockers: Optional[str],
        completed_task_refs: Sequence[str],
        location: Optional[GeoLocation],
        client_time: Optional[str],
    ) -> bool:
        """Compare-and-set ``checked_in -> checked_out``.

        Returns False when the record is missing or no longer ``checked_in``.
        """

        raise NotImplementedError

    def delete_if_status(self, *, person_id: str, work_date: date, status: AttendanceStatus) -> bool:
        """Remove a marker row (used to release a leave reservation)."""

        raise NotImplementedError

    def replace_status(
        self,
        *,
        person_id: str,
        work_date: date,
        from_status: AttendanceStatus,
        to_status: AttendanceStatus,
        absent_reason: Optional[AbsentReason] = None,
        updated_at: Optional[datetime] = None,
    ) -> bool:
        """Compare-and-set ``from_status -> to_status``; False if the record moved on."""

        raise NotImplementedError
