from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..clock.authority import ClockAuthority
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AttendanceStatus, LeaveStatus, ReasonCode, Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictingLeave,
    InvalidTransition,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

_WORKED = (AttendanceStatus.CHECKED_IN, AttendanceStatus.CHECKED_OUT)


@dataclass(frozen=True)
class _Reservation:
    reserved: bool
    # Record the reservation overwrote; None when it created the day.
    previous: Optional[AttendanceRecord] = None


_NOT_RESERVED = _Reservation(reserved=False)


class LeaveService:
    def __init__(self, leaves: LeaveRepository, attendance: AttendanceRepository, clock: ClockAuthority):
        self._leaves = leaves
        self._attendance = attendance
        self._clock = clock

    def submit(self, *, current_role: Role, person_id: str, leave_date: date, reason: str) -> LeaveRequest:
        if current_role != Role.INTERN:
            raise AuthorizationError("Only interns can request leave")

        reason = require_non_empty(reason, "Reason")

        record = self._attendance.get_for_person_and_date(person_id, leave_date)
        if record is not None and record.status in _WORKED:
            raise InvalidTransition(
                ReasonCode.DAY_ALREADY_WORKED,
                f"You already checked in on {leave_date.isoformat()}",
            )

        if self._leaves.find_active(person_id=person_id, leave_date=leave_date) is not None:
            raise ConflictingLeave(
                ReasonCode.LEAVE_ALREADY_REQUESTED,
                f"You already have a leave request for {leave_date.isoformat()}",
            )

        now = self._clock.now()
        request_id = self._leaves.create(person_id=person_id, leave_date=leave_date, reason=reason, created_at=now)
        if request_id is None:
            raise ConflictingLeave(
                ReasonCode.LEAVE_ALREADY_REQUESTED,
                f"You already have a leave request for {leave_date.isoformat()}",
            )

        logger.info("Leave request %s submitted by %s for %s", request_id, person_id, leave_date.isoformat())
        return LeaveRequest(
            request_id=request_id,
            person_id=person_id,
            leave_date=leave_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=now,
        )

    def decide(
        self,
        *,
        current_role: Role,
        admin_id: str,
        request_id: int,
        outcome: LeaveStatus,
        admin_response: Optional[str] = None,
    ) -> LeaveRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can decide leave requests")
        if outcome not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            raise ValidationError("Outcome must be approved or rejected")

        req = self._leaves.get(request_id=int(request_id))
        if req is None:
            raise NotFoundError("Leave request not found")
        if req.status != LeaveStatus.PENDING:
            raise InvalidTransition(ReasonCode.REQUEST_ALREADY_DECIDED, f"Leave request is already {req.status.value}")

        now = self._clock.now()
        response = optional_text(admin_response)

        reservation = _NOT_RESERVED
        if outcome == LeaveStatus.APPROVED:
            reservation = self._reserve_leave_day(req, now)

        try:
            decided = self._leaves.decide(
                request_id=req.request_id,
                status=outcome,
                decided_by=admin_id,
                decided_at=now,
                admin_response=response,
            )
        except Exception:
            self._release_leave_day(req, reservation, now)
            raise
        if not decided:
            self._release_leave_day(req, reservation, now)
            raise InvalidTransition(ReasonCode.REQUEST_ALREADY_DECIDED, "Leave request was decided by someone else")

        logger.info("Leave request %s %s by %s", req.request_id, outcome.value, admin_id)
        return LeaveRequest(
            request_id=req.request_id,
            person_id=req.person_id,
            leave_date=req.leave_date,
            reason=req.reason,
            status=outcome,
            created_at=req.created_at,
            decided_by=admin_id,
            decided_at=now,
            admin_response=response,
        )

    def _reserve_leave_day(self, req: LeaveRequest, now) -> _Reservation:
        """Mark the day ``leave`` before approving so a racing check-in cannot slip in.

        An ``absent`` day is excused by rewriting it to ``leave``; a
        ``holiday`` is kept as it is.
        """
        marker = AttendanceRecord(
            person_id=req.person_id,
            work_date=req.leave_date,
            status=AttendanceStatus.LEAVE,
            created_at=now,
        )
        if self._attendance.create_if_absent(marker):
            return _Reservation(reserved=True)

        existing = self._attendance.get_for_person_and_date(req.person_id, req.leave_date)
        if existing is None:
            raise StoreUnavailable("Leave day could not be reserved, please retry")
        if existing.status in _WORKED:
            raise ConflictingLeave(
                ReasonCode.DAY_ALREADY_WORKED,
                f"{req.person_id} already checked in on {req.leave_date.isoformat()}",
            )
        if existing.status == AttendanceStatus.ABSENT:
            excused = self._attendance.replace_status(
                person_id=req.person_id,
                work_date=req.leave_date,
                from_status=AttendanceStatus.ABSENT,
                to_status=AttendanceStatus.LEAVE,
                updated_at=now,
            )
            if not excused:
                raise StoreUnavailable("Leave day could not be reserved, please retry")
            logger.info("Absence on %s excused by leave", marker.key)
            return _Reservation(reserved=True, previous=existing)

        logger.info("Leave approved for %s with existing %s record kept", marker.key, existing.status.value)
        return _NOT_RESERVED

    def _release_leave_day(self, req: LeaveRequest, reservation: _Reservation, now) -> None:
        if not reservation.reserved:
            return
        if reservation.previous is None:
            self._attendance.delete_if_status(
                person_id=req.person_id, work_date=req.leave_date, status=AttendanceStatus.LEAVE
            )
            return
        self._attendance.replace_status(
            person_id=req.person_id,
            work_date=req.leave_date,
            from_status=AttendanceStatus.LEAVE,
            to_status=reservation.previous.status,
            absent_reason=reservation.previous.absent_reason,
            updated_at=now,
        )

    def list_for_person(self, *, person_id: str, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[LeaveRequest]:
        return self._leaves.list_for_person(person_id=person_id, limit=limit)

    def list_by_status(
        self,
        *,
        current_role: Role,
        status: Optional[LeaveStatus] = LeaveStatus.PENDING,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can review leave requests")
        return self._leaves.list_by_status(status=status, limit=limit)
