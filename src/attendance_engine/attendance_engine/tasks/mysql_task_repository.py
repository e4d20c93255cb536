from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import TaskRef
from .repository import TaskRepository


class MySQLTaskRepository(TaskRepository):
    """Reads the project tracker's ``project_tasks`` table; never writes it."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_current_task(self, person_id: str) -> Optional[TaskRef]:
        # In-progress work first, otherwise the next todo in board order.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT task_id, title
                FROM project_tasks
                WHERE person_id=%s AND status IN ('in-progress', 'todo')
                ORDER BY status='in-progress' DESC, sort_order ASC
                LIMIT 1
                """,
                (person_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return TaskRef(task_id=str(r["task_id"]), title=r["title"])
