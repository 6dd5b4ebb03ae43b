from __future__ import annotations

from typing import Any

from flask import Flask, jsonify, request

from ..common.validators import parse_int, parse_optional_date
from ..container import Container
from ..core.enums import PaymentMethod
from ..members.controller import member_to_dict
from .model import BillingPeriod


def period_to_dict(period: BillingPeriod) -> dict[str, Any]:
    return {
        "paymentId": period.payment_id,
        "memberId": period.member_id,
        "amount": str(period.amount),
        "durationMonths": period.duration_months,
        "paymentMethod": period.method.value,
        "startDate": period.period_start.isoformat(),
        "endDate": period.period_end.isoformat(),
        "receiptNumber": period.receipt_number,
        "isActive": period.is_active,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payments", methods=["POST"], endpoint="api_create_payment")
    def create_payment():
        data = request.get_json(silent=True) or {}
        period = container.payment_ledger.add_period(
            parse_int(data.get("memberId"), "memberId"),
            amount=data.get("amount"),
            duration_months=parse_int(data.get("duration"), "duration"),
            method=data.get("paymentMethod") or PaymentMethod.CASH.value,
            explicit_start=parse_optional_date(data.get("startDate"), "startDate"),
        )
        return jsonify({"success": True, "payment": period_to_dict(period)}), 201

    @app.route("/api/payments/<int:payment_id>", methods=["DELETE"], endpoint="api_retract_payment")
    def retract_payment(payment_id: int):
        member = container.payment_ledger.retract_period(payment_id)
        return jsonify(
            {
                "success": True,
                "message": "Payment deleted and membership recalculated",
                "member": member_to_dict(member, today=container.clock.today()),
            }
        )

    @app.route("/api/members/<int:member_id>/payments", methods=["GET"], endpoint="api_member_payments")
    def member_payments(member_id: int):
        container.member_service.get(member_id)
        periods = container.payment_ledger.list_active(member_id)
        return jsonify({"success": True, "payments": [period_to_dict(p) for p in periods]})

    @app.route("/api/payments/stats/overview", methods=["GET"], endpoint="api_payment_stats")
    def payment_stats():
        overview = container.payment_ledger.overview(
            start=parse_optional_date(request.args.get("startDate"), "startDate"),
            end=parse_optional_date(request.args.get("endDate"), "endDate"),
        )
        return jsonify(
            {
                "success": True,
                "stats": {"totalPayments": overview.total_payments, "totalAmount": str(overview.total_amount)},
            }
        )
