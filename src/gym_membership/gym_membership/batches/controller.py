from __future__ import annotations

from typing import Any, Optional

from flask import Flask, jsonify, request

from ..common.validators import parse_clock_time, parse_int
from ..container import Container
from ..members.controller import member_to_dict
from .model import Batch


def batch_to_dict(batch: Batch, *, member_count: Optional[int] = None) -> dict[str, Any]:
    data = {
        "batchId": batch.batch_id,
        "name": batch.name,
        "startTime": batch.start_time.strftime("%H:%M"),
        "endTime": batch.end_time.strftime("%H:%M"),
        "displayTime": batch.display_time,
        "capacity": batch.capacity,
        "isActive": batch.is_active,
    }
    if member_count is not None:
        data["currentMemberCount"] = member_count
    return data


def register(app: Flask, container: Container) -> None:
    service = container.batch_service

    def payload() -> dict:
        return request.get_json(silent=True) or {}

    def optional_time(data: dict, key: str):
        value = data.get(key)
        return parse_clock_time(value, key) if value not in (None, "") else None

    @app.route("/api/batches", methods=["GET"], endpoint="api_list_batches")
    def list_batches():
        batches = [batch_to_dict(b, member_count=service.member_count(b.batch_id)) for b in service.list_active()]
        return jsonify({"success": True, "batches": batches})

    @app.route("/api/batches/<int:batch_id>", methods=["GET"], endpoint="api_get_batch")
    def get_batch(batch_id: int):
        batch = service.get(batch_id)
        return jsonify({"success": True, "batch": batch_to_dict(batch, member_count=service.member_count(batch_id))})

    @app.route("/api/batches", methods=["POST"], endpoint="api_create_batch")
    def create_batch():
        data = payload()
        batch = service.create(
            name=str(data.get("name") or ""),
            start_time=parse_clock_time(data.get("startTime"), "startTime"),
            end_time=parse_clock_time(data.get("endTime"), "endTime"),
            capacity=data.get("capacity", 30),
        )
        return jsonify({"success": True, "message": "Batch created successfully", "batch": batch_to_dict(batch)}), 201

    @app.route("/api/batches/<int:batch_id>", methods=["PUT"], endpoint="api_update_batch")
    def update_batch(batch_id: int):
        data = payload()
        batch = service.update(
            batch_id,
            name=data.get("name"),
            start_time=optional_time(data, "startTime"),
            end_time=optional_time(data, "endTime"),
            capacity=data.get("capacity"),
        )
        return jsonify({"success": True, "message": "Batch updated successfully", "batch": batch_to_dict(batch)})

    @app.route("/api/batches/<int:batch_id>", methods=["DELETE"], endpoint="api_delete_batch")
    def delete_batch(batch_id: int):
        service.deactivate(batch_id)
        return jsonify({"success": True, "message": "Batch deleted successfully"})

    @app.route("/api/batches/<int:batch_id>/members", methods=["GET"], endpoint="api_batch_members")
    def batch_members(batch_id: int):
        today = container.clock.today()
        members = [member_to_dict(m, today=today) for m in service.members(batch_id)]
        return jsonify({"success": True, "members": members})

    @app.route("/api/batches/<int:batch_id>/assign-member", methods=["POST"], endpoint="api_batch_assign_member")
    def assign_member(batch_id: int):
        member_id = parse_int(payload().get("memberId"), "memberId")
        member = container.member_service.assign_batch(member_id, batch_id)
        return jsonify({"success": True, "member": member_to_dict(member, today=container.clock.today())})
