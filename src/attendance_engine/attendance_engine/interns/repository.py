from __future__ import annotations

from typing import Optional, Protocol

from .model import InternshipPeriod


class InternRepository(Protocol):
    def get_internship_period(self, person_id: str) -> Optional[InternshipPeriod]:
        """None when the person has no intern profile."""

        raise NotImplementedError
