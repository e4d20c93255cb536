from datetime import date, datetime, time
from dataclasses import replace

import pytest

from src.attendance_engine.attendance_engine.core.enums import ReasonCode
from src.attendance_engine.attendance_engine.policy import evaluator
from src.attendance_engine.attendance_engine.policy.factory import AdmissionRuleFactory
from src.attendance_engine.attendance_engine.policy.rules.window_rules import (
    CheckOutClosedRule,
    CheckOutNotOpenRule,
    DeadlinePassedRule,
    NonWorkingDayRule,
    OpenWindowRule,
    TooEarlyRule,
)
from src.attendance_engine.attendance_engine.settings.model import Holiday

# 2025-12-01 is a Monday.
MONDAY = date(2025, 12, 1)


def _at(hour, minute, second=0, day=MONDAY):
    return datetime(day.year, day.month, day.day, hour, minute, second)


@pytest.mark.parametrize(
    "hour,minute,second,expected",
    [
        (8, 59, 59, False),
        (9, 0, 0, True),
        (10, 30, 0, True),
        (11, 0, 0, True),
        (11, 0, 59, True),
        (11, 1, 0, False),
    ],
)
def test_check_in_window_bounds_are_inclusive_to_the_minute(settings, hour, minute, second, expected):
    assert evaluator.is_within_check_in_window(_at(hour, minute, second), settings) is expected


def test_check_in_window_closed_on_holiday(settings):
    holidays = [Holiday(1, MONDAY, "Founders day")]
    assert evaluator.is_within_check_in_window(_at(9, 30), settings, holidays) is False
    assert evaluator.is_working_day(MONDAY, holidays, settings) is False


def test_sunday_is_not_a_working_day_by_default(settings):
    assert evaluator.is_working_day(date(2025, 12, 7), (), settings) is False
    assert evaluator.is_working_day(date(2025, 12, 6), (), settings) is True


def test_deadline_only_applies_before_check_in(settings):
    late = _at(11, 1)
    assert evaluator.is_check_in_deadline_passed(late, settings) is True
    assert evaluator.is_check_in_deadline_passed(late, settings, has_checked_in=True) is False
    assert evaluator.is_check_in_deadline_passed(_at(11, 0, 59), settings) is False


def test_check_out_window_without_start_is_open_after_check_in(settings):
    assert evaluator.is_within_check_out_window(_at(9, 5), settings, has_checked_in=True) is True
    assert evaluator.is_within_check_out_window(_at(9, 5), settings, has_checked_in=False) is False
    assert evaluator.is_within_check_out_window(_at(20, 0, 30), settings, has_checked_in=True) is True
    assert evaluator.is_within_check_out_window(_at(20, 1), settings, has_checked_in=True) is False


def test_check_out_window_unset_end_stays_open(settings):
    open_ended = replace(settings, check_out_end_time=None)
    assert evaluator.is_check_out_closed(_at(23, 59), open_ended) is False


def test_work_duration_is_whole_minutes():
    assert evaluator.work_duration_minutes(_at(9, 0), _at(17, 30)) == 510
    assert evaluator.work_duration_minutes(_at(9, 0, 30), _at(9, 1, 29)) == 0


def test_factory_check_in_open_window(settings):
    rule = AdmissionRuleFactory().for_check_in(now=_at(9, 30), settings=settings, holidays=())
    assert isinstance(rule, OpenWindowRule)
    assert rule.decide().allowed is True


def test_factory_check_in_too_early(settings):
    rule = AdmissionRuleFactory().for_check_in(now=_at(8, 59), settings=settings, holidays=())
    decision = rule.decide()

    assert isinstance(rule, TooEarlyRule)
    assert decision.allowed is False
    assert decision.reason == ReasonCode.TOO_EARLY
    assert "09:00" in decision.message


def test_factory_check_in_deadline_passed(settings):
    tight = replace(settings, check_in_end_time=time(10, 0))
    rule = AdmissionRuleFactory().for_check_in(now=_at(10, 30), settings=tight, holidays=())

    assert isinstance(rule, DeadlinePassedRule)
    assert rule.decide().reason == ReasonCode.DEADLINE_PASSED
    assert "10:00" in rule.decide().message


def test_factory_non_working_day_wins_over_window(settings):
    sunday = date(2025, 12, 7)
    rule = AdmissionRuleFactory().for_check_in(now=_at(9, 30, day=sunday), settings=settings, holidays=())

    assert isinstance(rule, NonWorkingDayRule)
    assert rule.decide().reason == ReasonCode.NOT_WORKING_DAY


def test_factory_check_out_rules(settings):
    factory = AdmissionRuleFactory()
    with_start = replace(settings, check_out_start_time=time(16, 0))

    assert isinstance(factory.for_check_out(now=_at(15, 59), settings=with_start), CheckOutNotOpenRule)
    assert isinstance(factory.for_check_out(now=_at(16, 0), settings=with_start), OpenWindowRule)
    assert isinstance(factory.for_check_out(now=_at(20, 1), settings=with_start), CheckOutClosedRule)
