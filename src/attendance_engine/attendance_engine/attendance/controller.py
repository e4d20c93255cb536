from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_display_time, parse_iso_date
from ..common.validators import optional_bounded_text
from ..common.web import (
    admin_required,
    current_user_id,
    date_range_args,
    json_body,
    login_required,
    target_person_id,
)
from ..container import Container
from ..core.constants import MAX_CLIENT_TIME_LENGTH
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, GeoLocation


def _location_json(location: Optional[GeoLocation]) -> Optional[dict]:
    if location is None:
        return None
    return {"lat": location.latitude, "lng": location.longitude, "accuracy": location.accuracy}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _client_time(body: dict) -> Optional[str]:
    return optional_bounded_text(body.get("client_time"), "client_time", MAX_CLIENT_TIME_LENGTH)


def record_to_json(r: AttendanceRecord) -> dict:
    return {
        "id": r.key,
        "person_id": r.person_id,
        "date": r.work_date.isoformat(),
        "status": r.status.value,
        "is_terminal": r.is_terminal,
        "check_in_time": _iso(r.check_in_time),
        "check_in_time_formatted": format_display_time(r.check_in_time) if r.check_in_time else None,
        "check_out_time": _iso(r.check_out_time),
        "check_out_time_formatted": format_display_time(r.check_out_time) if r.check_out_time else None,
        "check_in_plan": r.check_in_plan,
        "check_out_progress": r.check_out_progress,
        "check_out_blockers": r.check_out_blockers,
        "check_in_location": _location_json(r.check_in_location),
        "check_out_location": _location_json(r.check_out_location),
        "current_task_id": r.current_task_id,
        "current_task_title": r.current_task_title,
        "completed_task_refs": list(r.completed_task_refs),
        "work_duration_minutes": r.work_duration_minutes,
        "absent_reason": r.absent_reason.value if r.absent_reason else None,
        "check_in_client_time": r.check_in_client_time,
        "check_out_client_time": r.check_out_client_time,
    }


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in():
        body = json_body()
        result = attendance.check_in(
            current_user_id(),
            body.get("plan"),
            location=GeoLocation.from_payload(body.get("location")),
            client_time=_client_time(body),
        )
        message = "Checked in successfully!" if result.created else "You are already checked in today."
        return jsonify({"ok": True, "message": message, "created": result.created, "record": record_to_json(result.record)})

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out():
        body = json_body()
        refs = body.get("completed_task_refs") or []
        if not isinstance(refs, list):
            raise ValidationError("completed_task_refs must be a list")

        result = attendance.check_out(
            current_user_id(),
            body.get("progress"),
            completed_task_refs=refs,
            location=GeoLocation.from_payload(body.get("location")),
            blockers=body.get("blockers"),
            client_time=_client_time(body),
        )
        message = "Checked out successfully!" if result.completed else "You have already checked out today."
        return jsonify(
            {
                "ok": True,
                "message": message,
                "completed": result.completed,
                "warning": result.warning,
                "record": record_to_json(result.record),
            }
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        day_raw = request.args.get("date")
        day = parse_iso_date(day_raw) if day_raw else None
        record = attendance.get_today_record(target_person_id(), day)
        return jsonify({"ok": True, "record": record_to_json(record)})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def history():
        start, end = date_range_args(container.clock.now().date())
        records = attendance.get_history(target_person_id(), start=start, end=end)
        return jsonify({"ok": True, "start": start.isoformat(), "end": end.isoformat(), "records": [record_to_json(r) for r in records]})

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def summary():
        start, end = date_range_args(container.clock.now().date())
        s = container.summary_service.summarize(target_person_id(), start=start, end=end)
        return jsonify(
            {
                "ok": True,
                "summary": {
                    "start": s.start.isoformat(),
                    "end": s.end.isoformat(),
                    "present_days": s.present_days,
                    "absent_days": s.absent_days,
                    "leave_days": s.leave_days,
                    "attendance_percentage": s.attendance_percentage,
                    "incomplete_days": s.incomplete_days,
                    "total_work_hours": s.total_work_hours,
                },
            }
        )

    @app.route("/api/admin/attendance/close-day", methods=["POST"], endpoint="admin_close_day")
    @admin_required
    def close_day():
        body = json_body()
        person_id = str(body.get("person_id") or "").strip()
        if not person_id:
            raise ValidationError("person_id is required")
        day = parse_iso_date(body.get("date"))

        record = attendance.close_day(person_id, day)
        return jsonify({"ok": True, "record": record_to_json(record) if record else None})
