from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TaskRef:
    """Reference to a task owned by the project tracker (display only)."""

    task_id: str
    title: str
