from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import to_naive_civil
from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = "request_id, person_id, leave_date, reason, status, created_at, decided_by, decided_at, admin_response"


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, zone):
        self._conn_factory = conn_factory
        self._zone = zone

    def _to_request(self, r: Dict[str, Any]) -> LeaveRequest:
        return LeaveRequest(
            request_id=int(r["request_id"]),
            person_id=r["person_id"],
            leave_date=r["leave_date"],
            reason=r["reason"],
            status=LeaveStatus(r["status"]),
            created_at=self._zone.localize(r["created_at"]),
            decided_by=r.get("decided_by"),
            decided_at=self._zone.localize(r["decided_at"]) if r.get("decided_at") else None,
            admin_response=r.get("admin_response"),
        )

    def create(self, *, person_id: str, leave_date: date, reason: str, created_at: datetime) -> Optional[int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO leave_requests(person_id, leave_date, reason, status, created_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (person_id, leave_date, reason, LeaveStatus.PENDING.value, to_naive_civil(created_at, self._zone)),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                return None
            raise

    def get(self, *, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return self._to_request(r) if r else None

    def find_active(self, *, person_id: str, leave_date: date) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE person_id=%s AND leave_date=%s AND status IN (%s, %s)
                """,
                (person_id, leave_date, LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value),
            )
            r = fetchone(cur)
            return self._to_request(r) if r else None

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: str,
        decided_at: datetime,
        admin_response: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=%s, admin_response=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    decided_by,
                    to_naive_civil(decided_at, self._zone),
                    admin_response,
                    int(request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_for_person(self, *, person_id: str, limit: int = 200) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE person_id=%s
                ORDER BY leave_date DESC
                LIMIT %s
                """,
                (person_id, int(limit)),
            )
            return [self._to_request(r) for r in fetchall(cur)]

    def list_by_status(self, *, status: Optional[LeaveStatus] = None, limit: int = 200) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [self._to_request(r) for r in fetchall(cur)]
