from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import attendance_key, to_naive_civil
from ..core.enums import AbsentReason, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord, GeoLocation
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    person_id, work_date, status, check_in_time, check_out_time,
    check_in_plan, check_out_progress, check_out_blockers,
    check_in_latitude, check_in_longitude, check_in_accuracy,
    check_out_latitude, check_out_longitude, check_out_accuracy,
    current_task_id, current_task_title, completed_task_refs,
    work_duration_minutes, absent_reason, check_in_client_time, check_out_client_time,
    created_at, updated_at
"""


def _location_from_row(r: Dict[str, Any], prefix: str) -> Optional[GeoLocation]:
    lat = r.get(f"{prefix}_latitude")
    lng = r.get(f"{prefix}_longitude")
    if lat is None or lng is None:
        return None
    accuracy = r.get(f"{prefix}_accuracy")
    return GeoLocation(latitude=float(lat), longitude=float(lng), accuracy=None if accuracy is None else float(accuracy))


def _location_params(location: Optional[GeoLocation]) -> tuple:
    if location is None:
        return (None, None, None)
    return (location.latitude, location.longitude, location.accuracy)


class MySQLAttendanceRepository(AttendanceRepository):
    """DATETIME columns hold naive civil time in the engine's zone."""

    def __init__(self, conn_factory: DatabaseConnection, *, zone):
        self._conn_factory = conn_factory
        self._zone = zone

    def _aware(self, value: Optional[datetime]) -> Optional[datetime]:
        return self._zone.localize(value) if value is not None else None

    def _naive(self, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_civil(value, self._zone) if value is not None else None

    def _to_record(self, r: Dict[str, Any]) -> AttendanceRecord:
        refs = json.loads(r["completed_task_refs"]) if r.get("completed_task_refs") else []
        return AttendanceRecord(
            person_id=r["person_id"],
            work_date=r["work_date"],
            status=AttendanceStatus(r["status"]),
            check_in_time=self._aware(r.get("check_in_time")),
            check_out_time=self._aware(r.get("check_out_time")),
            check_in_plan=r.get("check_in_plan"),
            check_out_progress=r.get("check_out_progress"),
            check_out_blockers=r.get("check_out_blockers"),
            check_in_location=_location_from_row(r, "check_in"),
            check_out_location=_location_from_row(r, "check_out"),
            current_task_id=r.get("current_task_id"),
            current_task_title=r.get("current_task_title"),
            completed_task_refs=tuple(refs),
            work_duration_minutes=r.get("work_duration_minutes"),
            absent_reason=AbsentReason(r["absent_reason"]) if r.get("absent_reason") else None,
            check_in_client_time=r.get("check_in_client_time"),
            check_out_client_time=r.get("check_out_client_time"),
            created_at=self._aware(r.get("created_at")),
            updated_at=self._aware(r.get("updated_at")),
        )

    def get_for_person_and_date(self, person_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_key=%s",
                (attendance_key(person_id, work_date),),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def list_for_person(self, person_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE person_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC
                """,
                (person_id, start, end),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def create_if_absent(self, record: AttendanceRecord) -> bool:
        params = (
            record.key,
            record.person_id,
            record.work_date,
            record.status.value,
            self._naive(record.check_in_time),
            self._naive(record.check_out_time),
            record.check_in_plan,
            record.check_out_progress,
            record.check_out_blockers,
            *_location_params(record.check_in_location),
            *_location_params(record.check_out_location),
            record.current_task_id,
            record.current_task_title,
            json.dumps(list(record.completed_task_refs)) if record.completed_task_refs else None,
            record.work_duration_minutes,
            record.absent_reason.value if record.absent_reason else None,
            record.check_in_client_time,
            record.check_out_client_time,
            self._naive(record.created_at),
            self._naive(record.updated_at),
        )
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO attendance_records(attendance_key, {_COLUMNS})
                    VALUES({",".join(["%s"] * len(params))})
                    """,
                    params,
                )
                return True
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                logger.info("Attendance record %s already exists", record.key)
                return False
            raise

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
        naive_out = self._naive(check_out_time)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, check_out_time=%s, work_duration_minutes=%s,
                    check_out_progress=%s, check_out_blockers=%s, completed_task_refs=%s,
                    check_out_latitude=%s, check_out_longitude=%s, check_out_accuracy=%s,
                    check_out_client_time=%s, updated_at=%s
                WHERE attendance_key=%s AND status=%s
                """,
                (
                    AttendanceStatus.CHECKED_OUT.value,
                    naive_out,
                    int(work_duration_minutes),
                    progress,
                    blockers,
                    json.dumps(list(completed_task_refs)) if completed_task_refs else None,
                    *_location_params(location),
                    client_time,
                    naive_out,
                    attendance_key(person_id, work_date),
                    AttendanceStatus.CHECKED_IN.value,
                ),
            )
            return cur.rowcount > 0

    def delete_if_status(self, *, person_id: str, work_date: date, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE attendance_key=%s AND status=%s",
                (attendance_key(person_id, work_date), status.value),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, absent_reason=%s, updated_at=%s
                WHERE attendance_key=%s AND status=%s
                """,
                (
                    to_status.value,
                    absent_reason.value if absent_reason else None,
                    self._naive(updated_at),
                    attendance_key(person_id, work_date),
                    from_status.value,
                ),
            )
            return cur.rowcount > 0
