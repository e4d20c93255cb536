from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import ReasonCode


@dataclass(frozen=True)
class AdmissionDecision:
    allowed: bool
    reason: Optional[ReasonCode] = None
    message: Optional[str] = None


class AdmissionRule(ABC):
    """Strategy Pattern: one outcome of the window checks for an action."""

    @abstractmethod
    def decide(self) -> AdmissionDecision:
        raise NotImplementedError
