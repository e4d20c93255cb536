from __future__ import annotations

from typing import Optional, Protocol

from .model import TaskRef


class TaskRepository(Protocol):
    def get_current_task(self, person_id: str) -> Optional[TaskRef]:
        raise NotImplementedError
