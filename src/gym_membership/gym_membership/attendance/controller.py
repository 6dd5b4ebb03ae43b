from __future__ import annotations

from datetime import datetime
from typing import Any

from flask import Flask, jsonify, request

from ..common.validators import parse_int, parse_optional_date
from ..container import Container
from ..core.enums import AttendanceStatus
from ..core.exceptions import BadRequestError
from .model import AttendanceRecord
from .service import MarkEntry


def record_to_dict(record: AttendanceRecord) -> dict[str, Any]:
    return {
        "attendanceId": record.attendance_id,
        "memberId": record.member_id,
        "batchId": record.batch_id,
        "date": record.attendance_date.isoformat(),
        "status": record.status.value,
        "checkInTime": record.check_in_time.isoformat() if record.check_in_time else None,
        "markedBy": "self" if record.self_marked else record.marked_by,
        "notes": record.note,
    }


def _entry(raw: dict) -> MarkEntry:
    try:
        status = AttendanceStatus(raw.get("status"))
    except ValueError:
        raise BadRequestError("Invalid attendance status")
    check_in = raw.get("checkInTime")
    try:
        check_in_time = datetime.fromisoformat(check_in) if check_in else None
    except ValueError:
        raise BadRequestError("checkInTime must be an ISO timestamp")
    return MarkEntry(
        member_id=parse_int(raw.get("memberId"), "memberId"),
        status=status,
        check_in_time=check_in_time,
        note=raw.get("notes"),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_mark_attendance")
    def mark_attendance():
        data = request.get_json(silent=True) or {}
        records = container.attendance_service.mark(
            batch_id=parse_int(data.get("batchId"), "batchId"),
            attendance_date=parse_optional_date(data.get("date"), "date") or container.clock.today(),
            entries=[_entry(raw) for raw in data.get("attendanceData") or []],
            marked_by=parse_int(data.get("markedBy"), "markedBy"),
        )
        return jsonify({"success": True, "records": [record_to_dict(r) for r in records]})

    @app.route("/api/attendance/auto-mark-absent", methods=["POST"], endpoint="api_auto_mark_absent")
    def auto_mark_absent():
        data = request.get_json(silent=True) or {}
        result = container.absence_sweeper.run(parse_optional_date(data.get("date"), "date"))
        body = {
            "success": result.success,
            "message": result.message,
            "data": {
                "date": result.attendance_date.isoformat(),
                "markedAbsent": result.marked_absent,
                "members": result.member_names,
            },
        }
        if result.error:
            body["error"] = result.error
        return jsonify(body), 200 if result.success else 500

    @app.route("/api/attendance/stats/overview", methods=["GET"], endpoint="api_attendance_stats")
    def attendance_stats():
        today = container.clock.today()
        overview = container.attendance_service.overview(
            start=parse_optional_date(request.args.get("startDate"), "startDate") or today,
            end=parse_optional_date(request.args.get("endDate"), "endDate") or today,
        )
        return jsonify(
            {
                "success": True,
                "stats": {
                    "total": overview.total,
                    "present": overview.present,
                    "late": overview.late,
                    "absent": overview.absent,
                    "excused": overview.excused,
                    "attendanceRate": overview.attendance_rate,
                },
            }
        )

    @app.route("/api/members/<int:member_id>/attendance/today", methods=["GET"], endpoint="api_today_attendance")
    def today_attendance(member_id: int):
        record = container.attendance_service.today_record(member_id, container.clock.today())
        return jsonify({"success": True, "record": record_to_dict(record) if record else None})

    @app.route("/api/members/<int:member_id>/attendance", methods=["GET"], endpoint="api_attendance_history")
    def attendance_history(member_id: int):
        limit = parse_int(request.args.get("limit"), "limit", default=30)
        records = container.attendance_service.history(member_id, limit=limit)
        return jsonify({"success": True, "records": [record_to_dict(r) for r in records]})
