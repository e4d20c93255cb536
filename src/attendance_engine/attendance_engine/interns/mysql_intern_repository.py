from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import InternshipPeriod
from .repository import InternRepository


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


class MySQLInternRepository(InternRepository):
    """Reads the admin app's ``intern_profiles`` table; never writes it."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_internship_period(self, person_id: str) -> Optional[InternshipPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT internship_start, internship_end FROM intern_profiles WHERE person_id=%s",
                (person_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return InternshipPeriod(start=_as_date(r["internship_start"]), end=_as_date(r["internship_end"]))
