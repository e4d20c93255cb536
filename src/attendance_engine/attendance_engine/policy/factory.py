from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from ..settings.model import AttendanceSettings, Holiday
from . import evaluator
from .rules.base import AdmissionRule
from .rules.window_rules import (
    CheckOutClosedRule,
    CheckOutNotOpenRule,
    DeadlinePassedRule,
    NonWorkingDayRule,
    OpenWindowRule,
    TooEarlyRule,
)


@dataclass
class AdmissionRuleFactory:
    """Factory Pattern: choose the rule that applies at ``now``."""

    def for_check_in(self, *, now: datetime, settings: AttendanceSettings, holidays: Iterable[Holiday]) -> AdmissionRule:
        holidays = tuple(holidays)
        if not evaluator.is_working_day(now.date(), holidays, settings):
            return NonWorkingDayRule(now.date())
        if evaluator.is_too_early_for_check_in(now, settings):
            return TooEarlyRule(settings.check_in_start_time)
        if evaluator.is_check_in_deadline_passed(now, settings):
            return DeadlinePassedRule(settings.check_in_end_time)
        return OpenWindowRule()

    def for_check_out(self, *, now: datetime, settings: AttendanceSettings) -> AdmissionRule:
        if not evaluator.is_check_out_open(now, settings):
            return CheckOutNotOpenRule(settings.check_out_start_time)
        if evaluator.is_check_out_closed(now, settings):
            return CheckOutClosedRule(settings.check_out_end_time)
        return OpenWindowRule()
