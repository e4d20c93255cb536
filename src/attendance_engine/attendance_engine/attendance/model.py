from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from ..common.datetime_utils import attendance_key
from ..common.validators import require_float_in_range
from ..core.enums import AbsentReason, AttendanceStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> Optional["GeoLocation"]:
        """Accept ``{lat, lng, accuracy}`` or ``{latitude, longitude, accuracy}``."""
        if not payload:
            return None
        if not isinstance(payload, Mapping):
            raise ValidationError("location must be an object")

        lat = payload.get("lat", payload.get("latitude"))
        lng = payload.get("lng", payload.get("longitude"))
        accuracy = payload.get("accuracy")
        return cls(
            latitude=require_float_in_range(lat, "latitude", -90.0, 90.0),
            longitude=require_float_in_range(lng, "longitude", -180.0, 180.0),
            accuracy=None if accuracy is None else require_float_in_range(accuracy, "accuracy", 0.0, float("inf")),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """One person's attendance for one civil day."""

    person_id: str
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    check_in_plan: Optional[str] = None
    check_out_progress: Optional[str] = None
    check_out_blockers: Optional[str] = None
    check_in_location: Optional[GeoLocation] = None
    check_out_location: Optional[GeoLocation] = None
    current_task_id: Optional[str] = None
    current_task_title: Optional[str] = None
    completed_task_refs: Tuple[str, ...] = ()
    work_duration_minutes: Optional[int] = None
    absent_reason: Optional[AbsentReason] = None
    # Client-reported times are display metadata only.
    check_in_client_time: Optional[str] = None
    check_out_client_time: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return attendance_key(self.person_id, self.work_date)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def placeholder(cls, person_id: str, work_date: date, status: AttendanceStatus) -> "AttendanceRecord":
        """Unstored record for reads of a day with no row (``not_started`` or ``holiday``)."""
        return cls(person_id=person_id, work_date=work_date, status=status)


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceRecord
    # False when an existing check-in was returned (duplicate request).
    created: bool


@dataclass(frozen=True)
class CheckOutResult:
    record: AttendanceRecord
    completed: bool
    warning: Optional[str] = None
