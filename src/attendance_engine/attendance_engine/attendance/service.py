from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..clock.authority import ClockAuthority
from ..common.validators import optional_text
from ..core.constants import MAX_SUMMARY_RANGE_DAYS, MAX_TASK_ID_LENGTH, MAX_TASK_TITLE_LENGTH
from ..core.enums import AbsentReason, AttendanceStatus, LeaveStatus, ReasonCode
from ..core.exceptions import (
    ConflictingLeave,
    InvalidTransition,
    PolicyViolation,
    StoreUnavailable,
    ValidationError,
)
from ..interns.repository import InternRepository
from ..leaves.repository import LeaveRepository
from ..policy import evaluator
from ..policy.factory import AdmissionRuleFactory
from ..policy.rules.base import AdmissionRule
from ..settings.model import AttendanceSettings
from ..settings.service import SettingsService
from ..tasks.model import TaskRef
from ..tasks.repository import TaskRepository
from .model import AttendanceRecord, CheckInResult, CheckOutResult, GeoLocation
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def validate_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("End date must be on or after start date")
    if (end - start).days + 1 > MAX_SUMMARY_RANGE_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_SUMMARY_RANGE_DAYS} days")


def short_day_warning(minutes: int, settings: AttendanceSettings) -> Optional[str]:
    if minutes >= settings.minimum_work_minutes:
        return None
    return (
        f"Short work day: {minutes / 60:.1f} hours worked, "
        f"minimum is {settings.minimum_work_minutes / 60:.1f} hours"
    )


class AttendanceService:
    """Check-in/check-out state machine for one record per person and day.

    Every decision uses the instant from the clock authority; a missing
    clock or store fails the operation before anything is written.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        settings: SettingsService,
        clock: ClockAuthority,
        *,
        tasks: TaskRepository | None = None,
        interns: InternRepository | None = None,
        rule_factory: AdmissionRuleFactory | None = None,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._settings = settings
        self._clock = clock
        self._tasks = tasks
        self._interns = interns
        self._factory = rule_factory or AdmissionRuleFactory()

    @staticmethod
    def _enforce(rule: AdmissionRule) -> None:
        decision = rule.decide()
        if not decision.allowed:
            raise PolicyViolation(decision.reason, decision.message)

    def _has_approved_leave(self, person_id: str, day: date) -> bool:
        active = self._leaves.find_active(person_id=person_id, leave_date=day)
        return active is not None and active.status == LeaveStatus.APPROVED

    def _current_task(self, person_id: str) -> Optional[TaskRef]:
        if self._tasks is None:
            return None
        try:
            return self._tasks.get_current_task(person_id)
        except Exception:
            # Display-only data; never blocks a check-in.
            logger.warning("Current task lookup failed for %s", person_id, exc_info=True)
            return None

    # -------- Check-in --------
    def check_in(
        self,
        person_id: str,
        plan_summary: Optional[str],
        *,
        location: Optional[GeoLocation] = None,
        client_time: Optional[str] = None,
    ) -> CheckInResult:
        now = self._clock.now()
        today = now.date()

        existing = self._attendance.get_for_person_and_date(person_id, today)
        if existing is not None:
            return self._resolve_existing_check_in(existing)

        if self._has_approved_leave(person_id, today):
            raise ConflictingLeave(ReasonCode.LEAVE_APPROVED, "You are on approved leave today")

        settings = self._settings.get_settings()
        self._enforce(self._factory.for_check_in(now=now, settings=settings, holidays=self._settings.get_holidays()))

        task = self._current_task(person_id)
        record = AttendanceRecord(
            person_id=person_id,
            work_date=today,
            status=AttendanceStatus.CHECKED_IN,
            check_in_time=now,
            check_in_plan=plan_summary,
            check_in_location=location,
            current_task_id=task.task_id[:MAX_TASK_ID_LENGTH] if task else None,
            current_task_title=task.title[:MAX_TASK_TITLE_LENGTH] if task else None,
            check_in_client_time=optional_text(client_time),
            created_at=now,
        )
        if self._attendance.create_if_absent(record):
            logger.info("Checked in %s at %s", record.key, now.isoformat())
            return CheckInResult(record=record, created=True)

        # Another request created the day's record between our read and insert.
        stored = self._attendance.get_for_person_and_date(person_id, today)
        if stored is None:
            raise StoreUnavailable("Check-in could not be recorded, please retry")
        logger.info("Concurrent check-in for %s resolved against stored %s record", record.key, stored.status.value)
        return self._resolve_existing_check_in(stored)

    @staticmethod
    def _resolve_existing_check_in(record: AttendanceRecord) -> CheckInResult:
        if record.status == AttendanceStatus.CHECKED_IN:
            return CheckInResult(record=record, created=False)
        if record.status == AttendanceStatus.LEAVE:
            raise ConflictingLeave(ReasonCode.LEAVE_APPROVED, "You are on approved leave today")
        if record.status == AttendanceStatus.CHECKED_OUT:
            raise InvalidTransition(ReasonCode.ALREADY_CHECKED_OUT, "You have already checked out today")
        raise InvalidTransition(ReasonCode.DAY_CLOSED, f"Today is already marked as {record.status.value}")

    # -------- Check-out --------
    def check_out(
        self,
        person_id: str,
        progress_summary: Optional[str],
        *,
        completed_task_refs: Sequence[str] = (),
        location: Optional[GeoLocation] = None,
        blockers: Optional[str] = None,
        client_time: Optional[str] = None,
    ) -> CheckOutResult:
        now = self._clock.now()
        today = now.date()

        record = self._attendance.get_for_person_and_date(person_id, today)
        if record is None:
            raise InvalidTransition(ReasonCode.NOT_CHECKED_IN, "You have not checked in today")

        settings = self._settings.get_settings()
        if record.status != AttendanceStatus.CHECKED_IN:
            return self._resolve_existing_check_out(record, settings)

        self._enforce(self._factory.for_check_out(now=now, settings=settings))
        if now < record.check_in_time:
            raise InvalidTransition(ReasonCode.CLOCK_REGRESSED, "Check-out time cannot be before check-in time")

        minutes = evaluator.work_duration_minutes(record.check_in_time, now)
        refs = tuple(str(r) for r in completed_task_refs or ())
        blockers = optional_text(blockers)
        client_time = optional_text(client_time)

        completed = self._attendance.complete_checkout(
            person_id=person_id,
            work_date=today,
            check_out_time=now,
            work_duration_minutes=minutes,
            progress=progress_summary,
            blockers=blockers,
            completed_task_refs=refs,
            location=location,
            client_time=client_time,
        )
        if not completed:
            stored = self._attendance.get_for_person_and_date(person_id, today)
            if stored is None:
                raise InvalidTransition(ReasonCode.NOT_CHECKED_IN, "You have not checked in today")
            logger.info("Concurrent check-out for %s resolved against stored %s record", record.key, stored.status.value)
            return self._resolve_existing_check_out(stored, settings)

        updated = replace(
            record,
            status=AttendanceStatus.CHECKED_OUT,
            check_out_time=now,
            check_out_progress=progress_summary,
            check_out_blockers=blockers,
            check_out_location=location,
            completed_task_refs=refs,
            work_duration_minutes=minutes,
            check_out_client_time=client_time,
            updated_at=now,
        )
        warning = short_day_warning(minutes, settings)
        logger.info("Checked out %s after %d minutes", updated.key, minutes)
        return CheckOutResult(record=updated, completed=True, warning=warning)

    @staticmethod
    def _resolve_existing_check_out(record: AttendanceRecord, settings: AttendanceSettings) -> CheckOutResult:
        if record.status == AttendanceStatus.CHECKED_OUT:
            return CheckOutResult(
                record=record,
                completed=False,
                warning=short_day_warning(record.work_duration_minutes or 0, settings),
            )
        if record.status == AttendanceStatus.LEAVE:
            raise ConflictingLeave(ReasonCode.LEAVE_APPROVED, "You are on approved leave today")
        if record.status == AttendanceStatus.CHECKED_IN:
            raise StoreUnavailable("Check-out could not be recorded, please retry")
        raise InvalidTransition(ReasonCode.DAY_CLOSED, f"Today is already marked as {record.status.value}")

    # -------- Reads --------
    def get_today_record(self, person_id: str, day: Optional[date] = None) -> AttendanceRecord:
        """Stored record for the day, or an unstored ``not_started``/``holiday`` placeholder."""
        if day is None:
            day = self._clock.now().date()

        record = self._attendance.get_for_person_and_date(person_id, day)
        if record is not None:
            return record
        if any(h.holiday_date == day for h in self._settings.get_holidays()):
            return AttendanceRecord.placeholder(person_id, day, AttendanceStatus.HOLIDAY)
        return AttendanceRecord.placeholder(person_id, day, AttendanceStatus.NOT_STARTED)

    def get_history(self, person_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        validate_range(start, end)
        return self._attendance.list_for_person(person_id, start=start, end=end)

    # -------- Day rollover support --------
    def _outside_internship(self, person_id: str, day: date) -> bool:
        if self._interns is None:
            return False
        period = self._interns.get_internship_period(person_id)
        return period is not None and not period.contains(day)

    def _classify_unrecorded_day(self, person_id: str, day: date, now: datetime) -> Optional[AttendanceStatus]:
        settings = self._settings.get_settings()

        # Only days already closed for check-in are classified.
        today = now.date()
        if day > today:
            return None
        if day == today and not evaluator.is_check_in_deadline_passed(now, settings):
            return None

        if self._outside_internship(person_id, day):
            return None
        if any(h.holiday_date == day for h in self._settings.get_holidays()):
            return AttendanceStatus.HOLIDAY
        if day.weekday() not in settings.working_days:
            return None

        if self._has_approved_leave(person_id, day):
            return AttendanceStatus.LEAVE
        return AttendanceStatus.ABSENT

    def classify_elapsed_day(self, person_id: str, day: date) -> Optional[AttendanceStatus]:
        """How the rollover sweep should treat ``day``.

        None while the day is still open for check-in, outside the internship
        period, or not a working day.
        """
        record = self._attendance.get_for_person_and_date(person_id, day)
        if record is not None:
            return record.status
        return self._classify_unrecorded_day(person_id, day, self._clock.now())

    def close_day(self, person_id: str, day: date) -> Optional[AttendanceRecord]:
        """Materialize ``absent``/``leave``/``holiday`` for a day nobody checked in on."""
        existing = self._attendance.get_for_person_and_date(person_id, day)
        if existing is not None:
            return existing

        now = self._clock.now()
        status = self._classify_unrecorded_day(person_id, day, now)
        if status is None:
            return None

        record = AttendanceRecord(
            person_id=person_id,
            work_date=day,
            status=status,
            absent_reason=AbsentReason.NO_CHECKIN if status == AttendanceStatus.ABSENT else None,
            created_at=now,
        )
        if self._attendance.create_if_absent(record):
            logger.info("Closed %s as %s", record.key, status.value)
            return record
        return self._attendance.get_for_person_and_date(person_id, day)
