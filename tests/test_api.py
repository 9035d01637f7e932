from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from fitness_sync import FitnessDataSync
from main import app, get_database, get_fitness_sync
from schemas import FitnessData


class StubSync(FitnessDataSync):
    def __init__(self, data: FitnessData | None) -> None:
        self._data = data

    @property
    def can_sync(self) -> bool:
        return self._data is not None

    def sync_day(self, day: date) -> FitnessData:
        return self._data


@pytest.fixture
def client(db):
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_fitness_sync] = lambda: StubSync(None)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_root(client) -> None:
    assert client.get("/").json() == {"message": "Fitness Check API running"}


def test_profile_roundtrip(client) -> None:
    assert client.get("/api/profile").json()["name"] == "Brenda"

    resp = client.put("/api/profile", json={"name": "Alex", "water_goal_liters": 2.5})
    assert resp.status_code == 200
    assert resp.json()["goals"]["water_goal_liters"] == 2.5

    resp = client.put("/api/profile", json={"step_goal": 0})
    assert resp.status_code == 422
    assert "step_goal" in resp.json()["detail"]

    assert client.post("/api/profile/reset").json()["name"] == "Brenda"


def test_tracking_day_view(client) -> None:
    resp = client.put(
        "/api/tracking/2026-03-01",
        json={"steps": 10000, "water_liters": 1.8, "sleep_hours": 8.0},
    )
    body = resp.json()

    assert resp.status_code == 200
    assert body["status"]["water_achieved"] is False
    assert body["completion_ratio"] == pytest.approx(2 / 3)
    assert body["perfect_day"] is False
    assert client.get("/api/tracking/2026-03-01").json()["measurement"]["steps"] == 10000

    assert client.put("/api/tracking/2026-03-01", json={"mood_score": 12}).status_code == 422


def test_dashboard_and_calendar(client) -> None:
    for day in ("2026-03-09", "2026-03-10"):
        client.put(f"/api/tracking/{day}", json={"steps": 12000, "water_liters": 2, "sleep_hours": 8})

    dash = client.get("/api/dashboard", params={"day": "2026-03-10"}).json()
    assert dash["streak"] == 2
    assert dash["progress_pct"]["steps"] == pytest.approx(120.0)

    cal = client.get("/api/calendar", params={"end": "2026-03-10", "days": 6}).json()
    assert len(cal["days"]) == 7
    assert cal["days"][0]["completion"] == "no_data"
    assert cal["summary"]["perfect_days"] == 2
    assert cal["summary"]["completion_rate_percent"] == 100

    assert client.get("/api/calendar", params={"days": 400}).status_code == 400


def test_challenge_lifecycle(client) -> None:
    resp = client.post(
        "/api/challenges",
        json={
            "title": "Weekend Warriors",
            "description": "Walk 20,000 steps this weekend",
            "type": "STEPS",
            "duration_label": "2 days",
            "participant_ids": ["1", "2"],
        },
    )
    created = resp.json()
    assert created["emoji"] == "🚶"
    assert created["status"] == "active"
    cid = created["id"]

    client.post(f"/api/challenges/{cid}/progress", json={"delta": 65})
    done = client.post(f"/api/challenges/{cid}/progress", json={"delta": 50}).json()
    assert done["progress"] == 100
    assert done["completion_pct"] == 100
    assert done["status"] == "completed"

    client.put(f"/api/challenges/{cid}/active", json={"active": False})
    assert client.get("/api/challenges", params={"active_only": True}).json()["items"] == []

    assert client.delete(f"/api/challenges/{cid}").json() == {"deleted": True}
    missing = client.delete(f"/api/challenges/{cid}")
    assert missing.status_code == 404
    assert cid in missing.json()["detail"]


def test_blank_challenge_title_is_rejected(client) -> None:
    resp = client.post(
        "/api/challenges",
        json={"title": " ", "description": "x", "type": "WATER", "duration_label": "7 days"},
    )
    assert resp.status_code == 422


def test_leaderboard(client) -> None:
    participants = [
        {"id": "1", "display_name": "Alex", "primary_score": 8750, "streak_length": 15},
        {"id": "2", "display_name": "Sam", "primary_score": 12340, "streak_length": 8},
    ]
    items = client.post("/api/leaderboard", json={"participants": participants}).json()["items"]
    assert [(i["participant_id"], i["rank"]) for i in items] == [("2", 1), ("1", 2)]


def test_achievements_and_meditation(client) -> None:
    assert len(client.get("/api/achievements").json()["items"]) == 6

    client.put("/api/tracking/2026-03-01", json={"steps": 10500})
    unlocked = client.post("/api/achievements/evaluate", params={"as_of": "2026-03-02"}).json()["unlocked"]
    assert [a["id"] for a in unlocked] == ["step_master"]
    assert unlocked[0]["completed_date"] == "2026-03-01"

    again = client.post("/api/achievements/evaluate", params={"as_of": "2026-03-02"}).json()
    assert again["unlocked"] == []

    session = client.post("/api/meditation/sessions", json={"duration_minutes": 10}).json()
    done = client.post(f"/api/meditation/sessions/{session['id']}/complete").json()
    assert done["completed"] is True
    items = client.get("/api/meditation/sessions").json()["items"]
    assert [s["id"] for s in items] == [session["id"]]
    assert client.post("/api/meditation/sessions/nope/complete").status_code == 404


def test_sync_without_permission_leaves_tracking_alone(client) -> None:
    client.put("/api/tracking/2026-03-01", json={"steps": 4321})

    body = client.post("/api/sync", params={"day": "2026-03-01"}).json()

    assert body["synced"] is None
    assert body["measurement"]["steps"] == 4321


def test_sync_merges_fitness_data(client) -> None:
    day = date(2026, 3, 1)
    app.dependency_overrides[get_fitness_sync] = lambda: StubSync(
        FitnessData(day=day, steps=9100, calories=250.0, distance_meters=6400.0)
    )

    body = client.post("/api/sync", params={"day": day.isoformat()}).json()

    assert body["synced"]["steps"] == 9100
    assert body["distance_km"] == pytest.approx(6.4)
    assert client.get("/api/tracking/2026-03-01").json()["measurement"]["steps"] == 9100


def _create_challenge(client) -> str:
    resp = client.post(
        "/api/challenges",
        json={"title": "Steps", "description": "Walk", "type": "STEPS", "duration_label": "7 days"},
    )
    return resp.json()["id"]


def test_non_finite_numbers_are_rejected(client) -> None:
    cid = _create_challenge(client)
    client.post(f"/api/challenges/{cid}/progress", json={"delta": 30})

    resp = client.post(
        f"/api/challenges/{cid}/progress",
        content='{"delta": NaN}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422

    resp = client.put(
        "/api/profile",
        content='{"water_goal_liters": Infinity}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422

    items = client.get("/api/challenges").json()["items"]
    assert [c["progress"] for c in items] == [30]
    assert client.get("/api/profile").json()["goals"]["water_goal_liters"] == 2.0


def test_dashboard_streak_ends_when_days_are_missed(client) -> None:
    for n in range(1, 6):
        client.put(
            f"/api/tracking/2026-03-0{n}",
            json={"steps": 12000, "water_liters": 2, "sleep_hours": 8},
        )

    assert client.get("/api/dashboard", params={"day": "2026-03-20"}).json()["streak"] == 0
    assert client.get("/api/dashboard", params={"day": "2026-03-06"}).json()["streak"] == 5


def test_get_database_returns_the_shared_handle(monkeypatch, db) -> None:
    import main

    monkeypatch.setattr(main, "get_db", lambda: db)
    assert get_database() is db
