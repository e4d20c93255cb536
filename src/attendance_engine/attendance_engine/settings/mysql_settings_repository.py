from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, normalize_mysql_time
from .model import AttendanceSettings, Holiday
from .repository import SettingsRepository

_SETTINGS_ROW_ID = 1


def _parse_working_days(value: Optional[str]) -> frozenset[int]:
    return frozenset(int(p) for p in (value or "").split(",") if p.strip())


def _format_working_days(days) -> str:
    return ",".join(str(d) for d in sorted(days))


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_settings(self) -> Optional[AttendanceSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT check_in_start_time, check_in_end_time, check_out_start_time, check_out_end_time,
                       working_days, minimum_work_minutes
                FROM attendance_settings
                WHERE settings_id=%s
                """,
                (_SETTINGS_ROW_ID,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceSettings(
                check_in_start_time=normalize_mysql_time(r["check_in_start_time"]),
                check_in_end_time=normalize_mysql_time(r["check_in_end_time"]),
                check_out_start_time=normalize_mysql_time(r.get("check_out_start_time")),
                check_out_end_time=normalize_mysql_time(r.get("check_out_end_time")),
                working_days=_parse_working_days(r.get("working_days")),
                minimum_work_minutes=int(r.get("minimum_work_minutes") or 0),
            )

    def save_settings(self, settings: AttendanceSettings, *, updated_by: Optional[str], updated_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_settings(
                    settings_id, check_in_start_time, check_in_end_time, check_out_start_time,
                    check_out_end_time, working_days, minimum_work_minutes, updated_by, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_start_time=VALUES(check_in_start_time),
                    check_in_end_time=VALUES(check_in_end_time),
                    check_out_start_time=VALUES(check_out_start_time),
                    check_out_end_time=VALUES(check_out_end_time),
                    working_days=VALUES(working_days),
                    minimum_work_minutes=VALUES(minimum_work_minutes),
                    updated_by=VALUES(updated_by),
                    updated_at=VALUES(updated_at)
                """,
                (
                    _SETTINGS_ROW_ID,
                    settings.check_in_start_time,
                    settings.check_in_end_time,
                    settings.check_out_start_time,
                    settings.check_out_end_time,
                    _format_working_days(settings.working_days),
                    int(settings.minimum_work_minutes),
                    updated_by,
                    updated_at,
                ),
            )

    def list_holidays(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        clauses = ["1=1"]
        params: list[object] = []
        if start is not None:
            clauses.append("holiday_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("holiday_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT holiday_id, holiday_date, label, description, created_by
                FROM holidays
                WHERE {where}
                ORDER BY holiday_date ASC
                """,
                tuple(params),
            )
            return [
                Holiday(
                    holiday_id=int(r["holiday_id"]),
                    holiday_date=r["holiday_date"],
                    label=r["label"],
                    description=r.get("description"),
                    created_by=r.get("created_by"),
                )
                for r in fetchall(cur)
            ]

    def add_holiday(
        self,
        *,
        holiday_date: date,
        label: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO holidays(holiday_date, label, description, created_by)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (holiday_date, label, description, created_by),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                return None
            raise

    def delete_holiday(self, *, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            return cur.rowcount > 0
