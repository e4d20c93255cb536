from datetime import date, time

import pytest

from src.attendance_engine.attendance_engine.core.enums import Role
from src.attendance_engine.attendance_engine.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.attendance_engine.attendance_engine.settings.cache import TimedCache
from src.attendance_engine.attendance_engine.settings.service import SettingsService


class FakeTimer:
    def __init__(self):
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


def test_timed_cache_reloads_after_ttl():
    timer = FakeTimer()
    loads = []

    def loader():
        loads.append(timer.value)
        return len(loads)

    cache = TimedCache(loader, ttl_seconds=300, timer=timer)

    assert cache.get() == 1
    timer.value = 299.9
    assert cache.get() == 1
    timer.value = 300.0
    assert cache.get() == 2
    assert loads == [0.0, 300.0]


def test_timed_cache_invalidate_forces_reload():
    cache = TimedCache(lambda: object(), ttl_seconds=300, timer=FakeTimer())
    first = cache.get()

    cache.invalidate()

    assert cache.get() is not first


def test_missing_settings_row_falls_back_to_defaults(settings_repo):
    service = SettingsService(settings_repo)
    settings = service.get_settings()

    assert settings.check_in_start_time == time(9, 0)
    assert settings.check_in_end_time == time(11, 0)
    assert settings.check_out_start_time is None
    assert settings.minimum_work_minutes == 360
    assert 6 not in settings.working_days


def test_settings_are_cached_until_admin_update(settings_repo):
    repo = settings_repo
    timer = FakeTimer()
    service = SettingsService(repo, ttl_seconds=300, timer=timer)

    service.get_settings()
    service.get_settings()
    assert repo.loads == 1

    updated = service.update_settings(
        current_role=Role.ADMIN,
        patch={"check_in_end_time": "10:00", "check_out_start_time": "16:30", "working_days": [0, 1, 2, 3, 4]},
        updated_by="admin-1",
    )

    assert updated.check_in_end_time == time(10, 0)
    assert service.get_settings() == updated
    assert service.get_settings().working_days == frozenset({0, 1, 2, 3, 4})


def test_nullable_check_out_fields_can_be_cleared(settings_repo):
    service = SettingsService(settings_repo)

    updated = service.update_settings(current_role=Role.ADMIN, patch={"check_out_end_time": None})

    assert updated.check_out_end_time is None


@pytest.mark.parametrize(
    "patch",
    [
        {},
        {"check_in_start_time": "9am"},
        {"check_in_start_time": None},
        {"check_in_start_time": "12:00"},
        {"working_days": [7]},
        {"working_days": "135"},
        {"minimum_work_minutes": "lots"},
        {"grace_minutes": 5},
    ],
)
def test_invalid_settings_patch_is_rejected(settings_repo, patch):
    repo = settings_repo
    service = SettingsService(repo)

    with pytest.raises(ValidationError):
        service.update_settings(current_role=Role.ADMIN, patch=patch)
    assert repo.settings is None


def test_only_admin_changes_settings(settings_repo):
    with pytest.raises(AuthorizationError):
        SettingsService(settings_repo).update_settings(current_role=Role.INTERN, patch={"check_in_end_time": "10:00"})


def test_holiday_calendar_management(settings_repo):
    service = SettingsService(settings_repo, ttl_seconds=300, timer=FakeTimer())
    xmas = date(2025, 12, 25)

    holiday_id = service.add_holiday(current_role=Role.ADMIN, holiday_date=xmas, label="Christmas", created_by="admin-1")
    assert [h.holiday_date for h in service.get_holidays()] == [xmas]
    assert service.list_holidays(start=date(2026, 1, 1)) == []

    with pytest.raises(ValidationError):
        service.add_holiday(current_role=Role.ADMIN, holiday_date=xmas, label="Again")

    service.delete_holiday(current_role=Role.ADMIN, holiday_id=holiday_id)
    assert service.get_holidays() == ()

    with pytest.raises(NotFoundError):
        service.delete_holiday(current_role=Role.ADMIN, holiday_id=holiday_id)
    with pytest.raises(AuthorizationError):
        service.add_holiday(current_role=Role.INTERN, holiday_date=xmas, label="Christmas")
