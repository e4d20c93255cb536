from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, json_body, login_required
from ..container import Container
from ..core.enums import LeaveStatus
from ..core.exceptions import ValidationError
from .model import LeaveRequest


def leave_to_json(r: LeaveRequest) -> dict:
    return {
        "id": r.request_id,
        "person_id": r.person_id,
        "date": r.leave_date.isoformat(),
        "reason": r.reason,
        "status": r.status.value,
        "admin_response": r.admin_response,
        "reviewed_by": r.decided_by,
        "reviewed_at": r.decided_at.isoformat() if r.decided_at else None,
        "created_at": r.created_at.isoformat() if r.created_at else None,
    }


def _parse_status(value, *, allow_all: bool) -> LeaveStatus | None:
    if allow_all and value in (None, "", "all"):
        return None
    try:
        return LeaveStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown leave status: {value!r}")


def register(app: Flask, container: Container) -> None:
    leaves = container.leave_service

    @app.route("/api/leaves", methods=["POST"], endpoint="leave_submit")
    @login_required
    def submit():
        body = json_body()
        req = leaves.submit(
            current_role=current_role(),
            person_id=current_user_id(),
            leave_date=parse_iso_date(body.get("date")),
            reason=body.get("reason") or "",
        )
        return jsonify({"ok": True, "message": "Leave request submitted successfully!", "request": leave_to_json(req)}), 201

    @app.route("/api/leaves", methods=["GET"], endpoint="leave_mine")
    @login_required
    def mine():
        data = leaves.list_for_person(person_id=current_user_id())
        return jsonify({"ok": True, "requests": [leave_to_json(r) for r in data]})

    @app.route("/api/admin/leaves", methods=["GET"], endpoint="admin_leaves")
    @admin_required
    def admin_list():
        status = _parse_status(request.args.get("status", LeaveStatus.PENDING.value), allow_all=True)
        data = leaves.list_by_status(current_role=current_role(), status=status)
        return jsonify({"ok": True, "requests": [leave_to_json(r) for r in data]})

    @app.route("/api/admin/leaves/<int:request_id>/decision", methods=["POST"], endpoint="admin_leave_decision")
    @admin_required
    def decide(request_id: int):
        body = json_body()
        req = leaves.decide(
            current_role=current_role(),
            admin_id=current_user_id(),
            request_id=request_id,
            outcome=_parse_status(body.get("outcome"), allow_all=False),
            admin_response=body.get("response"),
        )
        return jsonify({"ok": True, "request": leave_to_json(req)})
