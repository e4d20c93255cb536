from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    person_id: str
    leave_date: date
    reason: str
    status: LeaveStatus
    created_at: datetime
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    admin_response: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in (LeaveStatus.PENDING, LeaveStatus.APPROVED)
