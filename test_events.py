"""
Events: buffer ordering and capacity, dedupe, choice gating and one-shot resolution.

Usage:
    pytest test_events.py
"""
import pytest

from conftest import EASY_TASK, make_student
from models import EventOption
from models.constants import RECENT_EVENTS_CAPACITY
from simulation.activities import entertainment, evict_student, part_time_job, take_vacation, upgrade_facility
from simulation.competition import hold_competition
from simulation.events import (
    EventDefinition,
    check_random_events,
    push_game_event,
    register_event,
    resolve_choice,
)
from simulation.outing import outing_training, overseas_training
from simulation.season import advance_weeks, choose_event_option
from simulation.snapshot import dumps
from simulation.training import extra_train_students_with_task, train_students_with_task


def _choice_definition(log):
    def _pick(state, event):
        log.append(event.uid)
        state.change_reputation(5)
        return "picked"

    return register_event(EventDefinition("test_choice", lambda state: None, {"yes": _pick, "no": lambda s, e: "no"}))


def _push_choice(state, event_id="c1"):
    return push_game_event(
        state, "Test choice", "pick one", event_id=event_id,
        options=[EventOption("yes", "Yes"), EventOption("no", "No")],
        definition_id="test_choice",
    )


def test_buffer_is_most_recent_first_and_bounded(make_state):
    state = make_state()
    for i in range(RECENT_EVENTS_CAPACITY + 5):
        push_game_event(state, "Note", f"note {i}", event_id=str(i))
    assert len(state.recent_events) == RECENT_EVENTS_CAPACITY
    assert state.recent_events[0].description == f"note {RECENT_EVENTS_CAPACITY + 4}"
    uids = [e.uid for e in state.recent_events]
    assert uids == sorted(uids, reverse=True)


def test_duplicate_event_is_suppressed(make_state):
    state = make_state()
    assert push_game_event(state, "Illness", "Alice fell ill", event_id="sick:Alice") is not None
    assert push_game_event(state, "Illness", "Alice fell ill", event_id="sick:Alice") is None
    assert len(state.recent_events) == 1
    state.week = 2
    assert push_game_event(state, "Illness", "Alice fell ill", event_id="sick:Alice") is not None


@pytest.mark.parametrize("action", [
    lambda s: advance_weeks(s, 1),
    lambda s: train_students_with_task(s, EASY_TASK.name, 1),
    lambda s: extra_train_students_with_task(s, EASY_TASK.name, 1),
    lambda s: outing_training(s, 1, 3, ["Alice"]),
    lambda s: overseas_training(s, 1, 1, ["Alice"]),
    lambda s: hold_competition(s),
    lambda s: entertainment(s, "rest"),
    lambda s: take_vacation(s, 7),
    lambda s: part_time_job(s, ["Bob"]),
    lambda s: upgrade_facility(s, "computer"),
    lambda s: evict_student(s, "Bob"),
])
def test_pending_choice_blocks_every_advancing_action(make_state, no_events, action):
    log = []
    _choice_definition(log)
    state = make_state()
    _push_choice(state)
    before = dumps(state)

    assert not action(state).ok
    assert dumps(state) == before
    assert log == []


def test_choice_resolves_exactly_once(make_state, no_events):
    log = []
    _choice_definition(log)
    state = make_state()
    event = _push_choice(state)
    rep = state.reputation

    assert not resolve_choice(state, event.uid, "maybe").ok
    assert event.is_pending

    result = choose_event_option(state, event.uid, "yes")
    assert result.ok
    assert event.handled and event.chosen == "yes"
    assert state.reputation == rep + 5

    again = resolve_choice(state, event.uid, "no")
    assert not again.ok
    assert log == [event.uid]
    assert state.reputation == rep + 5
    assert advance_weeks(state, 1).ok


def test_resolve_rejects_unknown_and_plain_events(make_state, no_events):
    state = make_state()
    plain = push_game_event(state, "Note", "nothing to choose")
    assert not resolve_choice(state, 999, "yes").ok
    assert not resolve_choice(state, plain.uid, "yes").ok


def test_choice_without_registered_effect_stays_pending(make_state, no_events):
    state = make_state()
    event = push_game_event(state, "Orphan", "no handler", options=[EventOption("yes", "Yes")], definition_id="missing")
    assert not resolve_choice(state, event.uid, "yes").ok
    assert event.is_pending


def test_weekly_pass_runs_registered_triggers(make_state, no_events):
    def _always(state):
        push_game_event(state, "Weekly", "tick", event_id=str(state.week))

    register_event(EventDefinition("test_weekly", _always))
    state = make_state()
    added = check_random_events(state)
    assert [e.name for e in added] == ["Weekly"]
    assert check_random_events(state) == []


def test_sustained_pressure_builds_quit_tendency(make_state):
    import simulation.events as events_module

    s = make_student("Alice", pressure=95.0)
    state = make_state(students=[s, make_student("Bob")])
    events_module._quit_risk_trigger(state)
    # one week over the line is not enough to roll
    assert s.quit_tendency_weeks == 1
    assert s.active
    s.pressure = 40.0
    events_module._quit_risk_trigger(state)
    assert s.quit_tendency_weeks == 0


def test_free_spirit_quits_under_pressure(make_state):
    import random

    import simulation.events as events_module

    s = make_student("Alice", pressure=99.0, talents=["Free Spirit"])
    state = make_state(students=[s, make_student("Bob")])
    rep = state.reputation
    for seed in range(50):
        state.rng = random.Random(seed)
        events_module._quit_risk_trigger(state)
        if not s.active:
            break
    assert not s.active
    assert s.departure_reason == "quit"
    assert state.reputation == rep - 5
