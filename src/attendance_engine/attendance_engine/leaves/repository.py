from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(self, *, person_id: str, leave_date: date, reason: str, created_at: datetime) -> Optional[int]:
        """Insert a pending request.

        Returns request_id, or None when an active (pending/approved) request
        already exists for that person and day.
        """

        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_active(self, *, person_id: str, leave_date: date) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: str,
        decided_at: datetime,
        admin_response: Optional[str] = None,
    ) -> bool:
        """Compare-and-set ``pending -> status``; False if no longer pending."""

        raise NotImplementedError

    def list_for_person(self, *, person_id: str, limit: int = 200) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_by_status(self, *, status: Optional[LeaveStatus] = None, limit: int = 200) -> Sequence[LeaveRequest]:
        raise NotImplementedError
