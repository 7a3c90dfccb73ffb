from __future__ import annotations

from flask import Flask, g

from ..common.datetime_utils import isoformat_or_none
from ..common.http import bearer_required, field, json_body, json_ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    token_required = bearer_required(container.auth_service)

    @app.route("/api/check-in", methods=["POST"], endpoint="check_in")
    @token_required
    def check_in():
        record = attendance.check_in(g.identity.user_id, field(json_body(), "location"))
        return json_ok(
            message="Checked in",
            data={"id": record.attendance_id, "check_in_time": isoformat_or_none(record.check_in_time)},
        )

    @app.route("/api/check-out", methods=["POST"], endpoint="check_out")
    @token_required
    def check_out():
        record = attendance.check_out(g.identity.user_id)
        return json_ok(
            message="Checked out",
            data={"id": record.attendance_id, "check_out_time": isoformat_or_none(record.check_out_time)},
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @token_required
    def today():
        record = attendance.get_today(g.identity.user_id)
        return json_ok(data=record.to_dict() if record else None)

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @token_required
    def history():
        return json_ok(data=[r.to_dict() for r in attendance.get_history(g.identity.user_id)])

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @token_required
    def delete(attendance_id: int):
        attendance.delete_record(g.identity.user_id, attendance_id)
        return json_ok(message="Attendance record deleted")
