from __future__ import annotations

import math

import pytest

from gym_membership.core.constants import EARTH_RADIUS_METERS
from gym_membership.main import create_app

from tests.fakes import FACILITY, make_member


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _checkin_body(meters: float = 0.0) -> dict:
    return {
        "phone": "9876500001",
        "email": "Member1@Example.com",
        "latitude": FACILITY.latitude + math.degrees(meters / EARTH_RADIUS_METERS),
        "longitude": FACILITY.longitude,
    }


def test_self_checkin_success(client, members):
    members.add(make_member(1))

    response = client.post("/api/public/self-checkin", json=_checkin_body(12))

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["status"] == "present"
    assert body["data"]["batchName"] == "Morning"
    assert body["data"]["distance"] == 12
    assert body["data"]["checkInTime"] == "07:15 AM"


def test_self_checkin_with_text_coordinates(client, members):
    members.add(make_member(1))
    body = {key: str(value) for key, value in _checkin_body(5).items()}

    response = client.post("/api/public/self-checkin", json=body)

    assert response.status_code == 201
    assert response.get_json()["data"]["distance"] == 5


def test_self_checkin_rejection_maps_to_status(client, members):
    members.add(make_member(1))

    response = client.post("/api/public/self-checkin", json=_checkin_body(60))

    assert response.status_code == 403
    body = response.get_json()
    assert body["success"] is False
    assert "60 meters away" in body["message"]

    client.post("/api/public/self-checkin", json=_checkin_body(0))
    duplicate = client.post("/api/public/self-checkin", json=_checkin_body(0))
    assert duplicate.status_code == 409


def test_payment_freeze_roundtrip(client, members):
    members.add(make_member(1))

    created = client.post("/api/payments", json={"memberId": 1, "amount": 1200, "duration": 1})
    assert created.status_code == 201
    payment_id = created.get_json()["payment"]["paymentId"]

    frozen = client.post("/api/members/1/freeze", json={"reason": "Travel"})
    assert frozen.get_json()["member"]["status"] == "frozen"

    blocked = client.delete(f"/api/payments/{payment_id}")
    assert blocked.status_code == 409

    resumed = client.post("/api/members/1/unfreeze", json={"extensionDays": 2})
    assert resumed.status_code == 200
    assert resumed.get_json()["member"]["status"] == "active"

    retracted = client.delete(f"/api/payments/{payment_id}")
    assert retracted.status_code == 200


def test_member_endpoints(client, members):
    members.add(make_member(1))

    assert client.get("/api/members/1").get_json()["member"]["status"] == "active"
    assert client.get("/api/members/2").status_code == 404
    stats = client.get("/api/members/stats/overview").get_json()["stats"]
    assert stats["active"] == 1


def test_bad_input_is_400(client, members):
    members.add(make_member(1))

    response = client.post("/api/payments", json={"memberId": 1, "amount": 100, "duration": "soon"})

    assert response.status_code == 400


def test_auto_mark_absent_and_stats(client, members):
    members.add(make_member(1))
    members.add(make_member(2))

    response = client.post("/api/attendance/auto-mark-absent", json={})

    assert response.status_code == 200
    assert response.get_json()["data"]["markedAbsent"] == 2
    stats = client.get("/api/attendance/stats/overview").get_json()["stats"]
    assert stats["absent"] == 2
    assert stats["attendanceRate"] == 0.0


def test_member_attendance_history(client, members):
    members.add(make_member(1))
    client.post("/api/public/self-checkin", json=_checkin_body(0))

    response = client.get("/api/members/1/attendance?limit=5")

    assert response.status_code == 200
    (record,) = response.get_json()["records"]
    assert record["status"] == "present"
    assert record["markedBy"] == "self"
    assert client.get("/api/members/1/attendance?limit=lots").status_code == 400


def test_batch_endpoints(client, members):
    created = client.post(
        "/api/batches",
        json={"name": "Noon", "startTime": "12:00", "endTime": "13:00", "capacity": 1},
    )
    assert created.status_code == 201
    batch_id = created.get_json()["batch"]["batchId"]
    assert created.get_json()["batch"]["displayTime"] == "12:00 PM - 01:00 PM"

    assert client.post("/api/batches", json={"name": "Noon", "startTime": "14:00", "endTime": "15:00"}).status_code == 409
    assert client.post("/api/batches", json={"name": "Late", "startTime": "noon", "endTime": "13:00"}).status_code == 400

    members.add(make_member(1))
    members.add(make_member(2))
    assigned = client.post(f"/api/batches/{batch_id}/assign-member", json={"memberId": 1})
    assert assigned.get_json()["member"]["batchId"] == batch_id
    full = client.post(f"/api/batches/{batch_id}/assign-member", json={"memberId": 2})
    assert full.status_code == 400
    assert full.get_json()["message"] == "Batch is at full capacity"

    listed = {b["name"]: b for b in client.get("/api/batches").get_json()["batches"]}
    assert listed["Noon"]["currentMemberCount"] == 1
    assert [m["memberId"] for m in client.get(f"/api/batches/{batch_id}/members").get_json()["members"]] == [1]

    assert client.delete(f"/api/batches/{batch_id}").status_code == 400
    updated = client.put(f"/api/batches/{batch_id}", json={"capacity": 2, "endTime": "13:30"})
    assert updated.get_json()["batch"]["endTime"] == "13:30"
    assert client.post(f"/api/batches/{batch_id}/assign-member", json={"memberId": 2}).status_code == 200
