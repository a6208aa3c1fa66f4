"""
Flask JSON API: new game, guarded actions, autosave and load.

Usage:
    pytest test_app.py
"""
import pytest

import app as app_module
from app import app
from db import DEFAULT_SLOT
from models import ActionResult


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("OICOACH_DB_PATH", str(tmp_path / "game.db"))
    monkeypatch.setattr(app_module, "_game", {"state": None, "slot": DEFAULT_SLOT, "recorded": False})
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def _start(client, **body):
    body.setdefault("seed", 11)
    return client.post("/api/new-game", json=body)


def test_state_before_new_game_is_404(client):
    resp = client.get("/api/state")
    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


def test_new_game_returns_state(client):
    resp = _start(client, difficulty=1, province=2, student_count=3)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert data["state"]["week"] == 1
    assert len(data["state"]["students"]) == 3
    assert data["state"]["province"]["id"] == 2

    state = client.get("/api/state").get_json()
    assert len(state["schedule"]) == 10


def test_new_game_rejects_bad_input(client):
    assert _start(client, difficulty=7).status_code == 400
    assert _start(client, student_count="many").status_code == 400


def test_train_preview_and_train(client):
    state = _start(client).get_json()["state"]
    task = state["weekly_tasks"][0]["name"]

    preview = client.get("/api/train/preview", query_string={"task": task, "intensity": "2"})
    assert preview.status_code == 200
    assert set(preview.get_json()) == {"has_quit_risk", "has_high_pressure"}
    assert client.get("/api/train/preview", query_string={"task": "nope"}).status_code == 404

    resp = client.post("/api/train", json={"task": task, "intensity": 1})
    data = resp.get_json()
    if resp.status_code == 200:
        assert data["state"]["week"] >= 2
    else:
        assert data["ok"] is False


def test_rejection_is_400_and_keeps_state(client):
    _start(client)
    resp = client.post("/api/train", json={"task": "Not On The List", "intensity": 1})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["ok"] is False
    assert body["state"]["week"] == 1


def test_advance_rejects_bad_weeks(client):
    _start(client)
    assert client.post("/api/advance", json={"weeks": "x"}).status_code == 400
    assert client.post("/api/advance", json={"weeks": 0}).status_code == 400


def test_resign_records_summary_and_autosaves(client):
    _start(client)
    assert client.get("/api/summary").status_code == 409
    resp = client.post("/api/resign")
    assert resp.status_code == 200
    summary = client.get("/api/summary").get_json()
    assert summary["ending_reason"] == "resigned"

    saves = client.get("/api/saves").get_json()
    assert [s["slot"] for s in saves["saves"]] == [DEFAULT_SLOT]
    assert saves["history"][0]["ending_reason"] == "resigned"

    assert client.post("/api/resign").status_code == 400


def test_save_and_load_slot(client):
    _start(client)
    assert client.post("/api/save", json={"slot": "mine"}).status_code == 200
    # a fresh game autosaves to the default slot, leaving "mine" untouched
    _start(client, seed=12)
    client.post("/api/resign")

    loaded = client.post("/api/load", json={"slot": "mine"})
    assert loaded.status_code == 200
    assert loaded.get_json()["state"]["phase"] == "active"
    assert client.post("/api/load", json={"slot": "nothing-here"}).status_code == 404


def test_outing_quote(client):
    state = _start(client).get_json()["state"]
    name = state["students"][0]["name"]
    resp = client.post("/api/outing?quote=1", json={"difficulty": 1, "region": 3, "students": [name]})
    assert resp.status_code == 200
    quote = resp.get_json()["quote"]
    assert quote["participants"] == [name]
    assert quote["total"] > 0
    bad = client.post("/api/outing?quote=1", json={"difficulty": 1, "region": 3, "students": "everyone"})
    assert bad.status_code == 400


def test_unknown_facility_upgrade(client):
    _start(client)
    assert client.post("/api/facilities/pool/upgrade").status_code == 400


def test_turn_runs_and_serializes_under_the_lock(client, monkeypatch):
    _start(client)
    held = []

    def fake_advance(state, weeks):
        held.append(app_module._turn_lock.locked())
        state.week += weeks
        return ActionResult.accept("moved", weeks=weeks)

    monkeypatch.setattr(app_module, "advance_weeks", fake_advance)
    resp = client.post("/api/advance", json={"weeks": 2})
    assert resp.status_code == 200
    assert held == [True]
    assert resp.get_json()["state"]["week"] == 3
    assert not app_module._turn_lock.locked()
