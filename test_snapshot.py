"""
Snapshot/restore and the SQLite save slots.

Usage:
    pytest test_snapshot.py
"""
import json
import logging

import pytest

from db import delete_save, get_connection, get_season_history, init_db, list_saves, load_game, record_season_result, save_game
from generation import new_game
from models import EventOption, SnapshotError
from models.constants import PROVINCES, STARTING_REPUTATION
from simulation.events import push_game_event
from simulation.season import advance_weeks, resign
from simulation.snapshot import dumps, loads, restore, snapshot


def test_restore_continues_the_same_random_stream(no_events):
    state = new_game(seed=5)
    copy = loads(dumps(state))
    advance_weeks(state, 2)
    advance_weeks(copy, 2)
    assert dumps(state) == dumps(copy)


def test_pending_choice_survives_round_trip(make_state):
    state = make_state()
    event = push_game_event(state, "Sponsor offer", "money", event_id="sponsor",
                            options=[EventOption("accept", "Accept"), EventOption("decline", "Decline")],
                            definition_id="sponsor_offer", payload={"amount": 20000})
    copy = loads(dumps(state))
    restored = copy.recent_events[0]
    assert restored.uid == event.uid
    assert restored.is_pending
    assert restored.payload == {"amount": 20000}
    assert copy.next_event_uid == state.next_event_uid


def test_missing_week_is_fatal(make_state):
    data = snapshot(make_state())
    del data["week"]
    with pytest.raises(SnapshotError):
        restore(data)


def test_missing_students_is_fatal(make_state):
    data = snapshot(make_state())
    data["students"] = None
    with pytest.raises(SnapshotError):
        restore(data)


def test_duplicate_active_names_are_fatal(make_state):
    data = snapshot(make_state())
    data["students"][1]["name"] = data["students"][0]["name"]
    with pytest.raises(SnapshotError):
        restore(data)


def test_corrupt_json_is_fatal():
    with pytest.raises(SnapshotError):
        loads("{not json")


def test_missing_budget_and_reputation_get_defaults(make_state, caplog):
    data = snapshot(make_state(province_id=1))
    del data["budget"]
    data["reputation"] = "lots"
    with caplog.at_level(logging.WARNING, logger="simulation.snapshot"):
        state = restore(data)
    assert state.budget == PROVINCES[1]["base_budget"]
    assert state.reputation == STARTING_REPUTATION
    assert "budget" in caplog.text


def test_snapshot_is_json_serializable(make_state):
    state = make_state()
    state.qualified_for("CSP-S1", 1).add("Alice")
    data = json.loads(dumps(state))
    assert data["qualification"][0]["CSP-S1"] == ["Alice"]
    assert restore(data).qualified_for("CSP-S1", 1) == {"Alice"}


def test_save_load_and_history(tmp_path):
    conn = get_connection(tmp_path / "saves.db")
    try:
        init_db(conn)
        state = new_game(seed=9)
        save_game(conn, state, "slot-a")
        save_game(conn, state, "slot-a")
        assert [row["slot"] for row in list_saves(conn)] == ["slot-a"]

        loaded = load_game(conn, "slot-a")
        assert dumps(loaded) == dumps(state)
        assert load_game(conn, "empty") is None

        with pytest.raises(ValueError):
            record_season_result(conn, state, "slot-a")
        resign(state)
        record_season_result(conn, state, "slot-a")
        history = get_season_history(conn, "slot-a")
        assert len(history) == 1
        assert history[0]["ending_reason"] == "resigned"

        assert delete_save(conn, "slot-a")
        assert not delete_save(conn, "slot-a")
    finally:
        conn.close()


def test_unknown_snapshot_keys_are_ignored(make_state):
    state = make_state()
    data = snapshot(state)
    data["extra_training_week"] = 1
    data["weeks_since_entertainment"] = 3
    restored = restore(data)
    assert dumps(restored) == dumps(state)
    assert "weeks_since_entertainment" not in snapshot(restored)
