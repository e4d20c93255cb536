from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time

from ...core.enums import ReasonCode
from ..evaluator import time_of_day_label
from .base import AdmissionDecision, AdmissionRule


class OpenWindowRule(AdmissionRule):
    def decide(self) -> AdmissionDecision:
        return AdmissionDecision(allowed=True)


@dataclass(frozen=True)
class NonWorkingDayRule(AdmissionRule):
    day: date

    def decide(self) -> AdmissionDecision:
        return AdmissionDecision(
            allowed=False,
            reason=ReasonCode.NOT_WORKING_DAY,
            message=f"{self.day.isoformat()} is not a working day",
        )


@dataclass(frozen=True)
class TooEarlyRule(AdmissionRule):
    opens_at: time

    def decide(self) -> AdmissionDecision:
        return AdmissionDecision(
            allowed=False,
            reason=ReasonCode.TOO_EARLY,
            message=f"Check-in opens at {time_of_day_label(self.opens_at)}",
        )


@dataclass(frozen=True)
class DeadlinePassedRule(AdmissionRule):
    closed_at: time

    def decide(self) -> AdmissionDecision:
        return AdmissionDecision(
            allowed=False,
            reason=ReasonCode.DEADLINE_PASSED,
            message=f"Check-in window closed at {time_of_day_label(self.closed_at)}",
        )


@dataclass(frozen=True)
class CheckOutNotOpenRule(AdmissionRule):
    opens_at: time

    def decide(self) -> AdmissionDecision:
        return AdmissionDecision(
            allowed=False,
            reason=ReasonCode.CHECK_OUT_NOT_OPEN,
            message=f"Check-out opens at {time_of_day_label(self.opens_at)}",
        )


@dataclass(frozen=True)
class CheckOutClosedRule(AdmissionRule):
    closed_at: time

    def decide(self) -> AdmissionDecision:
        return AdmissionDecision(
            allowed=False,
            reason=ReasonCode.CHECK_OUT_CLOSED,
            message=f"Check-out window closed at {time_of_day_label(self.closed_at)}",
        )
