from datetime import date, datetime
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from shiftboard.main import app
from shiftboard.routers.schedule import get_gateway
from shiftboard.scheduling.domain import Employee
from shiftboard.services.changes import ChangeHooks

from factories import MON, TUE, at, avail, make_shift, vacation

ORG_ID = str(uuid4())
ANA = "e1"


def instant(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def body(day: date, start: str, end: str, employee_id=ANA, **kw):
    return {"employee_id": employee_id, "shift_date": str(day), "start_time": start, "end_time": end, **kw}


@pytest.fixture
def client(gateway):
    gateway.employees = [Employee(id=ANA, full_name="Ana")]
    gateway.availability = [avail(ANA, d, "08:00", "20:00") for d in range(1, 6)]
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def shift_id(gateway):
    sid = str(uuid4())
    gateway.seed(make_shift(sid, ANA, MON, "09:00", "17:00", break_minutes=30))
    return sid


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_week_view(client, shift_id):
    res = client.get(f"/schedules/{ORG_ID}/week", params={"day": "2024-04-03"})
    assert res.status_code == 200
    data = res.json()
    assert data["week_start"] == "2024-04-01"
    assert data["week_end"] == "2024-04-07"
    assert data["timezone"] == "UTC"
    assert [s["id"] for s in data["shifts"]] == [shift_id]
    assert data["worked_minutes"] == {ANA: 450}


def test_create_shift(client, gateway):
    res = client.post(f"/schedules/{ORG_ID}/shifts", json=body(MON, "09:00", "13:00"))
    assert res.status_code == 200
    data = res.json()
    assert data["state"] == "committed"
    assert data["message"] == "Shift created"
    assert data["overridden"] is None
    assert instant(data["shift"]["starts_at"]) == at(MON, "09:00")
    assert data["shift"]["id"] in gateway.shifts


def test_soft_conflict_needs_override(client, gateway):
    gateway.time_off = [vacation(ANA, TUE, TUE)]
    res = client.post(f"/schedules/{ORG_ID}/shifts", json=body(TUE, "09:00", "13:00"))
    assert res.status_code == 409
    assert res.json() == {
        "detail": "This employee has approved time off • vacation on Apr 2. Create shift anyway?",
        "requires_override": True,
    }
    assert gateway.shifts == {}

    res = client.post(f"/schedules/{ORG_ID}/shifts", json=body(TUE, "09:00", "13:00", override=True))
    assert res.status_code == 200
    assert res.json()["overridden"].startswith("This employee has approved time off")


def test_overlap_is_a_conflict_even_with_override(client, shift_id):
    res = client.post(f"/schedules/{ORG_ID}/shifts", json=body(MON, "16:00", "20:00", override=True))
    assert res.status_code == 409
    assert res.json()["detail"] == "Overlap detected: conflicts with another shift."


def test_inverted_times_are_unprocessable(client):
    res = client.post(f"/schedules/{ORG_ID}/shifts", json=body(MON, "17:00", "09:00"))
    assert res.status_code == 422
    assert res.json()["detail"] == "End must be after start."


def test_update_shift(client, gateway, shift_id):
    res = client.put(f"/schedules/{ORG_ID}/shifts/{shift_id}", json=body(MON, "10:00", "18:00"))
    assert res.status_code == 200
    assert res.json()["message"] == "Shift saved"
    assert gateway.shifts[shift_id].starts_at == at(MON, "10:00")


def test_update_unknown_shift(client):
    res = client.put(f"/schedules/{ORG_ID}/shifts/{uuid4()}", json=body(MON, "10:00", "18:00"))
    assert res.status_code == 404
    assert res.json()["detail"] == "Scheduled shift not found"


def test_malformed_ids_are_rejected(client):
    assert client.delete(f"/schedules/{ORG_ID}/shifts/nope").status_code == 422
    assert client.get("/schedules/nope/week").status_code == 422


def test_move_shift(client, gateway, shift_id):
    res = client.post(f"/schedules/{ORG_ID}/shifts/{shift_id}/move", json={"employee_id": ANA, "target_date": "2024-04-02"})
    assert res.status_code == 200
    moved = res.json()["shift"]
    assert instant(moved["starts_at"]) == at(TUE, "09:00")
    assert instant(moved["ends_at"]) == at(TUE, "17:00")


def test_move_into_next_week(client, gateway, shift_id):
    res = client.post(f"/schedules/{ORG_ID}/shifts/{shift_id}/move", json={"employee_id": "OPEN", "target_date": "2024-04-09"})
    assert res.status_code == 200
    moved = gateway.shifts[shift_id]
    assert moved.is_open
    assert moved.starts_at == at(date(2024, 4, 9), "09:00")


def test_failed_move_reports_bad_gateway(client, gateway, shift_id):
    gateway.fail_with = "connection reset"
    res = client.post(f"/schedules/{ORG_ID}/shifts/{shift_id}/move", json={"employee_id": ANA, "target_date": "2024-04-02"})
    assert res.status_code == 502
    assert res.json()["detail"] == "Failed to move shift: connection reset"
    assert gateway.shifts[shift_id].starts_at == at(MON, "09:00")


def test_delete_shift(client, gateway, shift_id):
    res = client.delete(f"/schedules/{ORG_ID}/shifts/{shift_id}")
    assert res.status_code == 200
    assert res.json()["state"] == "committed"
    assert gateway.shifts == {}


def test_publish_week(client, gateway, shift_id):
    gateway.seed(make_shift(str(uuid4()), ANA, date(2024, 4, 8), "09:00", "10:00"))
    res = client.post(f"/schedules/{ORG_ID}/publish", params={"day": "2024-04-04"})
    assert res.status_code == 200
    assert res.json() == {"week_start": "2024-04-01", "published": 1}
    assert gateway.shifts[shift_id].status == "published"


def test_publish_failure(client, gateway):
    gateway.fail_with = "read only"
    res = client.post(f"/schedules/{ORG_ID}/publish", params={"day": "2024-04-04"})
    assert res.status_code == 502
    assert res.json()["detail"] == "Failed to publish schedule: read only"


def test_startup_leaves_session_events_alone(monkeypatch):
    def refuse(self):
        raise AssertionError("app must not install change hooks")

    monkeypatch.setattr(ChangeHooks, "install", refuse)
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
