from datetime import date

import pytest

from src.attendance_engine.attendance_engine.core.enums import (
    AbsentReason,
    AttendanceStatus,
    LeaveStatus,
    ReasonCode,
    Role,
)
from src.attendance_engine.attendance_engine.core.exceptions import (
    AuthorizationError,
    ConflictingLeave,
    InvalidTransition,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)

PERSON = "intern-1"
# 2025-12-05 is a Friday.
LEAVE_DAY = date(2025, 12, 5)


def _submit(world, day=LEAVE_DAY, reason="Family event"):
    return world.leave_service.submit(current_role=Role.INTERN, person_id=PERSON, leave_date=day, reason=reason)


def _decide(world, request_id, outcome=LeaveStatus.APPROVED, response=None):
    return world.leave_service.decide(
        current_role=Role.ADMIN,
        admin_id="admin-1",
        request_id=request_id,
        outcome=outcome,
        admin_response=response,
    )


def test_submit_creates_pending_request(world):
    world.clock.set(2025, 12, 1, 8, 0)

    req = _submit(world)

    assert req.status == LeaveStatus.PENDING
    assert req.created_at == world.clock.current
    assert world.leave_service.list_for_person(person_id=PERSON) == [world.leaves_repo.get(request_id=req.request_id)]


def test_submit_requires_reason_and_intern_role(world):
    with pytest.raises(ValidationError):
        _submit(world, reason="   ")
    with pytest.raises(AuthorizationError):
        world.leave_service.submit(current_role=Role.ADMIN, person_id="admin-1", leave_date=LEAVE_DAY, reason="x")


def test_duplicate_active_request_is_rejected(world):
    _submit(world)

    with pytest.raises(ConflictingLeave) as exc:
        _submit(world, reason="Second try")

    assert exc.value.reason == ReasonCode.LEAVE_ALREADY_REQUESTED
    assert len(world.leaves_repo.requests) == 1


def test_rejected_request_can_be_resubmitted(world):
    first = _submit(world)
    _decide(world, first.request_id, LeaveStatus.REJECTED, "Sprint demo that day")

    again = _submit(world, reason="Moved the event")

    assert again.request_id != first.request_id


def test_cannot_request_leave_for_worked_day(world):
    world.clock.set(2025, 12, 5, 9, 30)
    world.attendance_service.check_in(PERSON, "plan")

    with pytest.raises(InvalidTransition) as exc:
        _submit(world)

    assert exc.value.reason == ReasonCode.DAY_ALREADY_WORKED


def test_approval_marks_day_as_leave_and_blocks_check_in(world):
    world.clock.set(2025, 12, 1, 8, 0)
    req = _submit(world)

    decided = _decide(world, req.request_id, response="Enjoy")

    assert decided.status == LeaveStatus.APPROVED
    assert decided.decided_by == "admin-1"
    assert decided.admin_response == "Enjoy"
    record = world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY)
    assert record.status == AttendanceStatus.LEAVE

    world.clock.set(2025, 12, 5, 9, 30)
    with pytest.raises(ConflictingLeave) as exc:
        world.attendance_service.check_in(PERSON, "plan")

    assert exc.value.reason == ReasonCode.LEAVE_APPROVED
    assert world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY).status == AttendanceStatus.LEAVE


def test_rejection_leaves_attendance_untouched(world):
    req = _submit(world)

    _decide(world, req.request_id, LeaveStatus.REJECTED)

    assert world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY) is None


def test_decision_is_final(world):
    req = _submit(world)
    _decide(world, req.request_id)

    with pytest.raises(InvalidTransition) as exc:
        _decide(world, req.request_id, LeaveStatus.REJECTED)

    assert exc.value.reason == ReasonCode.REQUEST_ALREADY_DECIDED
    assert world.leaves_repo.get(request_id=req.request_id).status == LeaveStatus.APPROVED


def test_lost_decision_race_releases_leave_marker(world, monkeypatch):
    req = _submit(world)
    monkeypatch.setattr(world.leaves_repo, "decide", lambda **kwargs: False)

    with pytest.raises(InvalidTransition):
        _decide(world, req.request_id)

    assert world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY) is None


def test_approval_refused_when_day_was_worked_after_request(world):
    world.clock.set(2025, 12, 1, 8, 0)
    req = _submit(world)
    world.clock.set(2025, 12, 5, 9, 30)
    world.attendance_service.check_in(PERSON, "came in anyway")

    with pytest.raises(ConflictingLeave) as exc:
        _decide(world, req.request_id)

    assert exc.value.reason == ReasonCode.DAY_ALREADY_WORKED
    assert world.leaves_repo.get(request_id=req.request_id).status == LeaveStatus.PENDING


def test_decide_unknown_request_and_roles(world):
    with pytest.raises(NotFoundError):
        _decide(world, 99)
    req = _submit(world)
    with pytest.raises(AuthorizationError):
        world.leave_service.decide(
            current_role=Role.INTERN, admin_id=PERSON, request_id=req.request_id, outcome=LeaveStatus.APPROVED
        )
    with pytest.raises(ValidationError):
        _decide(world, req.request_id, LeaveStatus.PENDING)


def test_admin_lists_by_status(world):
    first = _submit(world)
    _submit(world, day=date(2025, 12, 8))
    _decide(world, first.request_id)

    pending = world.leave_service.list_by_status(current_role=Role.ADMIN)
    everything = world.leave_service.list_by_status(current_role=Role.ADMIN, status=None)

    assert [r.leave_date for r in pending] == [date(2025, 12, 8)]
    assert len(everything) == 2
    with pytest.raises(AuthorizationError):
        world.leave_service.list_by_status(current_role=Role.INTERN)


def test_store_failure_during_approval_releases_leave_marker(world, monkeypatch):
    world.clock.set(2025, 12, 1, 8, 0)
    req = _submit(world)

    def store_down(**kwargs):
        raise StoreUnavailable()

    monkeypatch.setattr(world.leaves_repo, "decide", store_down)
    with pytest.raises(StoreUnavailable):
        _decide(world, req.request_id)
    monkeypatch.undo()

    assert world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY) is None
    assert world.leaves_repo.get(request_id=req.request_id).status == LeaveStatus.PENDING

    _decide(world, req.request_id, LeaveStatus.REJECTED)
    world.clock.set(2025, 12, 5, 9, 30)
    assert world.attendance_service.check_in(PERSON, "plan").created is True


def test_approval_excuses_recorded_absence(world):
    world.clock.set(2025, 12, 1, 8, 0)
    req = _submit(world)
    world.clock.set(2025, 12, 6, 12, 0)
    world.attendance_service.close_day(PERSON, LEAVE_DAY)
    assert world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY).status == AttendanceStatus.ABSENT

    _decide(world, req.request_id)

    record = world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY)
    assert record.status == AttendanceStatus.LEAVE
    assert record.absent_reason is None
    summary = world.summary_service.summarize(PERSON, start=LEAVE_DAY, end=LEAVE_DAY)
    assert (summary.absent_days, summary.leave_days) == (0, 1)


def test_lost_decision_race_restores_absence(world, monkeypatch):
    world.clock.set(2025, 12, 1, 8, 0)
    req = _submit(world)
    world.clock.set(2025, 12, 6, 12, 0)
    world.attendance_service.close_day(PERSON, LEAVE_DAY)
    monkeypatch.setattr(world.leaves_repo, "decide", lambda **kwargs: False)

    with pytest.raises(InvalidTransition):
        _decide(world, req.request_id)

    record = world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY)
    assert record.status == AttendanceStatus.ABSENT
    assert record.absent_reason == AbsentReason.NO_CHECKIN


def test_approval_keeps_holiday_record(world):
    world.clock.set(2025, 12, 1, 8, 0)
    req = _submit(world)
    world.settings_repo.add_holiday(holiday_date=LEAVE_DAY, label="Festival")
    world.clock.set(2025, 12, 6, 12, 0)
    world.attendance_service.close_day(PERSON, LEAVE_DAY)

    _decide(world, req.request_id)

    assert world.attendance_repo.get_for_person_and_date(PERSON, LEAVE_DAY).status == AttendanceStatus.HOLIDAY
