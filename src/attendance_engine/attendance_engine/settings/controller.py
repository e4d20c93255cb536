from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_hhmm, parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, json_body
from ..container import Container
from .model import AttendanceSettings, Holiday


def settings_to_json(s: AttendanceSettings) -> dict:
    return {
        "check_in_start_time": format_hhmm(s.check_in_start_time),
        "check_in_end_time": format_hhmm(s.check_in_end_time),
        "check_out_start_time": format_hhmm(s.check_out_start_time) if s.check_out_start_time else None,
        "check_out_end_time": format_hhmm(s.check_out_end_time) if s.check_out_end_time else None,
        "working_days": sorted(s.working_days),
        "minimum_work_minutes": s.minimum_work_minutes,
    }


def holiday_to_json(h: Holiday) -> dict:
    return {
        "id": h.holiday_id,
        "date": h.holiday_date.isoformat(),
        "label": h.label,
        "description": h.description,
        "created_by": h.created_by,
    }


def register(app: Flask, container: Container) -> None:
    settings = container.settings_service

    @app.route("/api/admin/attendance-settings", methods=["GET"], endpoint="admin_settings")
    @admin_required
    def get_settings():
        return jsonify({"ok": True, "settings": settings_to_json(settings.get_settings())})

    @app.route("/api/admin/attendance-settings", methods=["PATCH"], endpoint="admin_settings_update")
    @admin_required
    def update_settings():
        updated = settings.update_settings(current_role=current_role(), patch=json_body(), updated_by=current_user_id())
        return jsonify({"ok": True, "settings": settings_to_json(updated)})

    @app.route("/api/admin/holidays", methods=["GET"], endpoint="admin_holidays")
    @admin_required
    def list_holidays():
        start = parse_iso_date(request.args["start"]) if request.args.get("start") else None
        end = parse_iso_date(request.args["end"]) if request.args.get("end") else None
        return jsonify({"ok": True, "holidays": [holiday_to_json(h) for h in settings.list_holidays(start=start, end=end)]})

    @app.route("/api/admin/holidays", methods=["POST"], endpoint="admin_holiday_add")
    @admin_required
    def add_holiday():
        body = json_body()
        holiday_id = settings.add_holiday(
            current_role=current_role(),
            holiday_date=parse_iso_date(body.get("date")),
            label=body.get("label") or "",
            description=body.get("description"),
            created_by=current_user_id(),
        )
        return jsonify({"ok": True, "id": holiday_id}), 201

    @app.route("/api/admin/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="admin_holiday_delete")
    @admin_required
    def delete_holiday(holiday_id: int):
        settings.delete_holiday(current_role=current_role(), holiday_id=holiday_id)
        return jsonify({"ok": True})
