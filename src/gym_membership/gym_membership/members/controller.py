from __future__ import annotations

from dataclasses import asdict
from typing import Any

from flask import Flask, jsonify, request

from ..common.validators import parse_int, parse_optional_date
from ..container import Container
from .model import LifecycleEvent, Member


def member_to_dict(member: Member, *, today) -> dict[str, Any]:
    return {
        "memberId": member.member_id,
        "name": member.name,
        "phone": member.phone,
        "email": member.email,
        "batchId": member.batch_id,
        "registeredOn": member.registered_on.isoformat() if member.registered_on else None,
        "status": member.status.value,
        "paymentStatus": member.payment_state.value,
        "endDate": member.coverage_end.isoformat() if member.coverage_end else None,
        "daysLeft": member.days_left(today),
        "lastPaymentDate": member.last_payment_date.isoformat() if member.last_payment_date else None,
        "freezeStart": member.freeze_start.isoformat() if member.freeze_start else None,
        "freezeEnd": member.freeze_end.isoformat() if member.freeze_end else None,
        "freezeReason": member.freeze_reason,
    }


def event_to_dict(event: LifecycleEvent) -> dict[str, Any]:
    data = {"kind": event.kind.value}
    for key, value in asdict(event).items():
        if hasattr(value, "isoformat"):
            value = value.isoformat()
        elif hasattr(value, "value"):
            value = value.value
        data[key] = value
    return data


def register(app: Flask, container: Container) -> None:
    def payload() -> dict:
        return request.get_json(silent=True) or {}

    def today():
        return container.clock.today()

    @app.route("/api/members", methods=["POST"], endpoint="api_register_member")
    def register_member():
        data = payload()
        batch_id = data.get("batchId")
        member = container.member_service.register(
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            email=data.get("email"),
            date_of_birth=parse_optional_date(data.get("dateOfBirth"), "dateOfBirth"),
            batch_id=parse_int(batch_id, "batchId") if batch_id not in (None, "") else None,
        )
        return jsonify({"success": True, "member": member_to_dict(member, today=today())}), 201

    @app.route("/api/members/<int:member_id>", methods=["GET"], endpoint="api_get_member")
    def get_member(member_id: int):
        member = container.member_service.get(member_id)
        return jsonify({"success": True, "member": member_to_dict(member, today=today())})

    @app.route("/api/members/<int:member_id>/history", methods=["GET"], endpoint="api_member_history")
    def member_history(member_id: int):
        events = container.member_service.history(member_id)
        return jsonify({"success": True, "history": [event_to_dict(e) for e in events]})

    @app.route("/api/members/<int:member_id>/batch", methods=["PUT"], endpoint="api_assign_batch")
    def assign_batch(member_id: int):
        batch_id = parse_int(payload().get("batchId"), "batchId")
        member = container.member_service.assign_batch(member_id, batch_id)
        return jsonify({"success": True, "member": member_to_dict(member, today=today())})

    @app.route("/api/members/stats/overview", methods=["GET"], endpoint="api_member_stats")
    def member_stats():
        return jsonify({"success": True, "stats": container.member_service.status_overview()})

    @app.route("/api/members/<int:member_id>/freeze", methods=["POST"], endpoint="api_freeze_member")
    def freeze_member(member_id: int):
        data = payload()
        duration = data.get("expectedDuration")
        member = container.freeze_controller.freeze(
            member_id,
            reason=data.get("reason", ""),
            start_date=parse_optional_date(data.get("startDate"), "startDate"),
            expected_duration_days=parse_int(duration, "expectedDuration") if duration not in (None, "") else None,
        )
        return jsonify(
            {
                "success": True,
                "message": f"Membership frozen for {member.name}",
                "member": member_to_dict(member, today=today()),
            }
        )

    @app.route("/api/members/<int:member_id>/unfreeze", methods=["POST"], endpoint="api_unfreeze_member")
    def unfreeze_member(member_id: int):
        extra_days = parse_int(payload().get("extensionDays"), "extensionDays", default=0)
        member = container.freeze_controller.unfreeze(member_id, extra_days=extra_days)
        return jsonify(
            {
                "success": True,
                "message": f"Membership resumed for {member.name}",
                "member": member_to_dict(member, today=today()),
            }
        )
