from __future__ import annotations

from datetime import date, datetime, time

import pytz

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_hhmm(value: str, field_name: str = "time") -> time:
    """Parse an HH:MM civil time-of-day."""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def format_display_time(value: datetime) -> str:
    """12-hour display text, e.g. '9:05 AM'."""
    hours = value.hour % 12 or 12
    return f"{hours}:{value.minute:02d} {'PM' if value.hour >= 12 else 'AM'}"


def attendance_key(person_id: str, work_date: date) -> str:
    """Stable composite key other systems use to address one day's record."""
    return f"{person_id}_{work_date.isoformat()}"


def get_zone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ValidationError(f"Unknown timezone: {name!r}")


def to_zone(value: datetime, zone) -> datetime:
    """Aware datetime expressed in ``zone``; naive values are taken as civil time there."""
    if value.tzinfo is None:
        return zone.localize(value)
    return value.astimezone(zone)


def to_naive_civil(value: datetime, zone) -> datetime:
    """Strip tzinfo after converting to ``zone`` (MySQL DATETIME columns)."""
    return to_zone(value, zone).replace(tzinfo=None)
