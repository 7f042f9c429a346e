from __future__ import annotations

from pathlib import Path

import pytest

from shiftplan_web import create_app

WEEK = "2024-01-01"


def make_app(db_path: Path):
    return create_app({
        "TESTING": True,
        "DATABASE": str(db_path),
        "AUTOSAVE_TIMERS": False,
    })


@pytest.fixture()
def app(tmp_path: Path):
    return make_app(tmp_path / "test.sqlite")


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        client.post("/api/employees", json={"id": "E1", "name": "Ana", "contract_start": "2023-01-01", "position": "Serveur"})
        client.post("/api/employees", json={"id": "E2", "name": "Léo", "contract_start": "2024-01-04"})
        yield client


def add_shift(client, **record):
    record.setdefault("employee_id", "E1")
    return client.post(f"/api/weeks/{WEEK}/shifts", json=record)


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.data == b"OK"


def test_employees_and_roster(client):
    employees = client.get("/api/employees").get_json()["employees"]
    assert [e["id"] for e in employees] == ["E1", "E2"]
    assert employees[0]["weekly_hours_target"] == 35.0

    roster = client.get("/api/employees?week=2023-12-25").get_json()["employees"]
    assert [e["id"] for e in roster] == ["E1"]

    assert client.post("/api/employees", json={"id": "E3"}).status_code == 400
    assert client.get("/api/employees/E9").status_code == 404


def test_create_shift_and_summaries(client):
    first = add_shift(client, id="a", day=0, start="09:00", end="14:00")
    assert first.status_code == 201
    assert first.get_json()["version"] == 1
    assert add_shift(client, id="b", day=0, start="17:00", end="23:00").status_code == 201

    listing = client.get(f"/api/weeks/{WEEK}/shifts").get_json()
    assert [s["id"] for s in listing["shifts"]] == ["a", "b"]

    summaries = {row["employee_id"]: row for row in client.get(f"/api/weeks/{WEEK}/summaries").get_json()["summaries"]}
    assert summaries["E1"]["total_worked_hours"] == 14.0
    assert summaries["E1"]["diff_label"] == "-21.0h"
    assert summaries["E2"]["pro_rated_contract_hours"] == 20.0


def test_rejections_map_to_http_status(client):
    add_shift(client, id="a", day=0, start="09:00", end="14:00")

    overlap = add_shift(client, id="b", day=0, start="13:00", end="18:00")
    assert overlap.status_code == 409
    assert overlap.get_json()["error"]["code"] == "overlap"

    out_of_contract = add_shift(client, employee_id="E2", day=0, start="09:00", end="14:00")
    assert out_of_contract.status_code == 409
    assert out_of_contract.get_json()["error"]["code"] == "out_of_contract"

    unknown = add_shift(client, employee_id="E9", day=0, start="09:00", end="14:00")
    assert unknown.status_code == 404

    invalid = add_shift(client, day=0, start="09:00", end="09:00")
    assert invalid.status_code == 400
    assert invalid.get_json()["error"]["code"] == "invalid_shift"

    assert client.get("/api/weeks/2024-01-03/shifts").status_code == 400

    stale = add_shift(client, day=2, start="09:00", end="14:00", expected_version=0)
    assert stale.status_code == 409
    assert stale.get_json()["error"]["code"] == "version_conflict"


def test_update_and_delete(client):
    add_shift(client, id="a", day=0, start="09:00", end="14:00")
    updated = client.put(f"/api/weeks/{WEEK}/shifts/a", json={"employee_id": "E1", "day": 1, "start": "10:00", "end": "15:00"})
    assert updated.status_code == 200
    assert updated.get_json()["shift"]["day"] == 1

    assert client.delete(f"/api/weeks/{WEEK}/shifts/a").status_code == 200
    assert client.delete(f"/api/weeks/{WEEK}/shifts/a").status_code == 404


def test_status_replaces_day(client):
    add_shift(client, id="a", day=0, start="09:00", end="14:00")
    response = add_shift(client, id="s", day=0, status="PAID_LEAVE")
    assert response.status_code == 201
    assert response.get_json()["superseded"] == ["a"]

    shifts = client.get(f"/api/weeks/{WEEK}/shifts").get_json()["shifts"]
    assert [s["id"] for s in shifts] == ["s"]
    summary = client.get(f"/api/weeks/{WEEK}/summaries").get_json()["summaries"][0]
    assert summary["total_assimilated_hours"] == 7.0


def test_conflicts_from_availability_and_preferences(client):
    added = client.post(
        "/api/employees/E1/availability",
        json={"type": "UNAVAILABLE", "start": "12:00", "end": "13:00", "recurrence": "WEEKLY", "day_of_week": 0},
    )
    assert added.status_code == 201
    assert client.put("/api/employees/E1/preferences", json={"preferred_days": [0], "preferred_positions": ["Cuisine"]}).status_code == 200
    add_shift(client, id="a", day=0, start="09:00", end="14:00")

    conflicts = client.get(f"/api/weeks/{WEEK}/conflicts").get_json()["conflicts"]
    assert sorted((c["kind"], c["severity"]) for c in conflicts) == [
        ("POSITION_PREFERENCE", "info"),
        ("UNAVAILABLE", "high"),
    ]
    assert client.post("/api/employees/E1/availability", json={"start": "12:00"}).status_code == 400


def test_duplicate_week(client):
    add_shift(client, id="a", day=0, start="09:00", end="14:00")
    report = client.post(f"/api/weeks/{WEEK}/duplicate").get_json()
    assert report["target_week"] == "2024-01-08"
    assert len(report["copied"]) == 1
    shifts = client.get("/api/weeks/2024-01-08/shifts").get_json()["shifts"]
    assert shifts[0]["start"] == "09:00"


def test_force_save_persists_across_restart(app, client, tmp_path):
    add_shift(client, id="a", day=0, start="09:00", end="14:00")
    saved = client.post("/api/save").get_json()
    assert saved == {"ok": True, "saved": 1, "failed": 0}

    restarted = make_app(Path(app.config["DATABASE"]))
    with restarted.test_client() as other:
        shifts = other.get(f"/api/weeks/{WEEK}/shifts").get_json()["shifts"]
        assert [s["id"] for s in shifts] == ["a"]
        assert [e["id"] for e in other.get("/api/employees").get_json()["employees"]] == ["E1", "E2"]


def test_init_db_command(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["init-db", "--force"])
    assert "Database initialized." in result.output


def test_stored_rows_breaking_lowered_limit_are_reported(tmp_path):
    db_path = tmp_path / "limits.sqlite"
    loose = create_app({
        "TESTING": True,
        "DATABASE": str(db_path),
        "AUTOSAVE_TIMERS": False,
        "SHIFTPLAN_SETTINGS": {"max_shifts_per_day": 3},
    })
    with loose.test_client() as client:
        client.post("/api/employees", json={"id": "E1", "contract_start": "2023-01-01"})
        for shift_id, start, end in (("a", "07:00", "09:00"), ("b", "11:00", "14:00"), ("c", "18:00", "22:00")):
            assert add_shift(client, id=shift_id, day=0, start=start, end=end).status_code == 201
        assert client.post("/api/save").get_json()["saved"] == 3

    with make_app(db_path).test_client() as client:
        response = client.get(f"/api/weeks/{WEEK}/summaries")
        assert response.status_code == 409
        assert response.get_json()["error"]["code"] == "max_shifts_exceeded"
