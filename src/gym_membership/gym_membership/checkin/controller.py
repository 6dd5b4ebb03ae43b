from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from .model import CheckInRequest


def register(app: Flask, container: Container) -> None:
    @app.route("/api/public/self-checkin", methods=["POST"], endpoint="api_self_checkin")
    def self_checkin():
        data = request.get_json(silent=True) or {}
        result = container.checkin_service.check_in(
            CheckInRequest(
                phone=str(data.get("phone") or "").strip(),
                email=str(data.get("email") or "").strip().lower(),
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
            )
        )
        return jsonify({"success": True, "message": result.message, "data": result.to_dict()}), 201
