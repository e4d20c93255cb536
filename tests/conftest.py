from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Sequence

import pytest
import pytz

from src.attendance_engine.attendance_engine.attendance.model import AttendanceRecord, GeoLocation
from src.attendance_engine.attendance_engine.attendance.service import AttendanceService
from src.attendance_engine.attendance_engine.core.enums import AttendanceStatus, LeaveStatus
from src.attendance_engine.attendance_engine.core.exceptions import ClockUnavailable
from src.attendance_engine.attendance_engine.interns.model import InternshipPeriod
from src.attendance_engine.attendance_engine.leaves.model import LeaveRequest
from src.attendance_engine.attendance_engine.leaves.service import LeaveService
from src.attendance_engine.attendance_engine.settings.model import AttendanceSettings, Holiday
from src.attendance_engine.attendance_engine.settings.service import SettingsService
from src.attendance_engine.attendance_engine.summary.service import SummaryService
from src.attendance_engine.attendance_engine.tasks.model import TaskRef

IST = pytz.timezone("Asia/Kolkata")


class FixedClock:
    def __init__(self, current: Optional[datetime] = None):
        self.current = current or IST.localize(datetime(2025, 12, 1, 9, 30))

    def set(self, year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
        self.current = IST.localize(datetime(year, month, day, hour, minute, second))
        return self.current

    def now(self) -> datetime:
        return self.current


class FailingClock:
    def now(self) -> datetime:
        raise ClockUnavailable()


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[tuple[str, date], AttendanceRecord] = {}
        self.writes = 0

    def get_for_person_and_date(self, person_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self.records.get((person_id, work_date))

    def list_for_person(self, person_id: str, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        items = [r for (p, d), r in self.records.items() if p == person_id and start <= d <= end]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items

    def create_if_absent(self, record: AttendanceRecord) -> bool:
        key = (record.person_id, record.work_date)
        if key in self.records:
            return False
        self.records[key] = record
        self.writes += 1
        return True

    def complete_checkout(
        self,
        *,
        person_id: str,
        work_date: date,
        check_out_time: datetime,
        work_duration_minutes: int,
        progress: Optional[str],
        blockers: Optional[str],
        completed_task_refs: Sequence[str],
        location: Optional[GeoLocation],
        client_time: Optional[str],
    ) -> bool:
        current = self.records.get((person_id, work_date))
        if current is None or current.status != AttendanceStatus.CHECKED_IN:
            return False
        self.records[(person_id, work_date)] = replace(
            current,
            status=AttendanceStatus.CHECKED_OUT,
            check_out_time=check_out_time,
            work_duration_minutes=work_duration_minutes,
            check_out_progress=progress,
            check_out_blockers=blockers,
            completed_task_refs=tuple(completed_task_refs),
            check_out_location=location,
            check_out_client_time=client_time,
        )
        self.writes += 1
        return True

    def delete_if_status(self, *, person_id: str, work_date: date, status: AttendanceStatus) -> bool:
        current = self.records.get((person_id, work_date))
        if current is None or current.status != status:
            return False
        del self.records[(person_id, work_date)]
        self.writes += 1
        return True

    def replace_status(
        self,
        *,
        person_id: str,
        work_date: date,
        from_status: AttendanceStatus,
        to_status: AttendanceStatus,
        absent_reason=None,
        updated_at=None,
    ) -> bool:
        current = self.records.get((person_id, work_date))
        if current is None or current.status != from_status:
            return False
        self.records[(person_id, work_date)] = replace(
            current, status=to_status, absent_reason=absent_reason, updated_at=updated_at
        )
        self.writes += 1
        return True


class InMemoryLeaves:
    def __init__(self):
        self.requests: dict[int, LeaveRequest] = {}
        self._id = 0

    def create(self, *, person_id: str, leave_date: date, reason: str, created_at: datetime) -> Optional[int]:
        if self.find_active(person_id=person_id, leave_date=leave_date) is not None:
            return None
        self._id += 1
        self.requests[self._id] = LeaveRequest(
            request_id=self._id,
            person_id=person_id,
            leave_date=leave_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=created_at,
        )
        return self._id

    def get(self, *, request_id: int) -> Optional[LeaveRequest]:
        return self.requests.get(request_id)

    def find_active(self, *, person_id: str, leave_date: date) -> Optional[LeaveRequest]:
        for r in self.requests.values():
            if r.person_id == person_id and r.leave_date == leave_date and r.is_active:
                return r
        return None

    def decide(self, *, request_id: int, status: LeaveStatus, decided_by: str, decided_at: datetime, admin_response=None) -> bool:
        current = self.requests.get(request_id)
        if current is None or current.status != LeaveStatus.PENDING:
            return False
        self.requests[request_id] = replace(
            current, status=status, decided_by=decided_by, decided_at=decided_at, admin_response=admin_response
        )
        return True

    def list_for_person(self, *, person_id: str, limit: int = 200) -> Sequence[LeaveRequest]:
        items = [r for r in self.requests.values() if r.person_id == person_id]
        return sorted(items, key=lambda r: r.request_id, reverse=True)[:limit]

    def list_by_status(self, *, status: Optional[LeaveStatus] = None, limit: int = 200) -> Sequence[LeaveRequest]:
        items = [r for r in self.requests.values() if status is None or r.status == status]
        return sorted(items, key=lambda r: r.request_id, reverse=True)[:limit]


class InMemorySettings:
    def __init__(self, settings: Optional[AttendanceSettings] = None):
        self.settings = settings
        self.holidays: dict[int, Holiday] = {}
        self.loads = 0
        self._id = 0

    def get_settings(self) -> Optional[AttendanceSettings]:
        self.loads += 1
        return self.settings

    def save_settings(self, settings: AttendanceSettings, *, updated_by, updated_at) -> None:
        self.settings = settings

    def list_holidays(self, *, start=None, end=None) -> Sequence[Holiday]:
        return sorted(
            (
                h
                for h in self.holidays.values()
                if (start is None or h.holiday_date >= start) and (end is None or h.holiday_date <= end)
            ),
            key=lambda h: h.holiday_date,
        )

    def add_holiday(self, *, holiday_date: date, label: str, description=None, created_by=None) -> Optional[int]:
        if any(h.holiday_date == holiday_date for h in self.holidays.values()):
            return None
        self._id += 1
        self.holidays[self._id] = Holiday(self._id, holiday_date, label, description, created_by)
        return self._id

    def delete_holiday(self, *, holiday_id: int) -> bool:
        return self.holidays.pop(holiday_id, None) is not None


class StaticInterns:
    def __init__(self):
        self.periods: dict[str, InternshipPeriod] = {}

    def get_internship_period(self, person_id: str) -> Optional[InternshipPeriod]:
        return self.periods.get(person_id)


class StaticTasks:
    def __init__(self, task: Optional[TaskRef] = None, *, fail: bool = False):
        self.task = task
        self.fail = fail

    def get_current_task(self, person_id: str) -> Optional[TaskRef]:
        if self.fail:
            raise RuntimeError("task tracker offline")
        return self.task


@dataclass
class World:
    clock: FixedClock
    attendance_repo: InMemoryAttendance
    leaves_repo: InMemoryLeaves
    settings_repo: InMemorySettings
    tasks: StaticTasks
    interns: StaticInterns
    settings_service: SettingsService
    attendance_service: AttendanceService
    leave_service: LeaveService
    summary_service: SummaryService

    def configure(self, **changes) -> AttendanceSettings:
        self.settings_repo.settings = replace(self.settings_service.get_settings(), **changes)
        return self.settings_repo.settings


def build_world(clock=None) -> World:
    clock = clock or FixedClock()
    attendance_repo = InMemoryAttendance()
    leaves_repo = InMemoryLeaves()
    settings_repo = InMemorySettings()
    tasks = StaticTasks(TaskRef(task_id="T-7", title="Write onboarding notes"))
    interns = StaticInterns()

    settings_service = SettingsService(settings_repo, ttl_seconds=0)
    return World(
        clock=clock,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        settings_repo=settings_repo,
        tasks=tasks,
        interns=interns,
        settings_service=settings_service,
        attendance_service=AttendanceService(
            attendance_repo, leaves_repo, settings_service, clock, tasks=tasks, interns=interns
        ),
        leave_service=LeaveService(leaves_repo, attendance_repo, clock),
        summary_service=SummaryService(attendance_repo, settings_service),
    )


@pytest.fixture
def world() -> World:
    return build_world()


@pytest.fixture
def settings() -> AttendanceSettings:
    return AttendanceSettings.defaults()


@pytest.fixture
def failing_world() -> World:
    return build_world(FailingClock())


@pytest.fixture
def settings_repo() -> InMemorySettings:
    return InMemorySettings()
