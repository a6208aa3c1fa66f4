"""
Training: pressure bounds, quit-risk preview, extra training and the weekly advance.

Usage:
    pytest test_training.py
"""
import pytest

from conftest import EASY_TASK, HARD_TASK, make_student
from simulation.training import (
    Intensity,
    calculate_boost_multiplier,
    estimate_training_pressure,
    extra_train_students_with_task,
    train_student,
    train_students_with_task,
)


def test_heavy_training_far_above_ability_reaches_quit_risk(make_state):
    s = make_student("Alice", thinking=20.0, coding=20.0, pressure=85.0)
    state = make_state(students=[s])

    estimate = estimate_training_pressure(state, HARD_TASK, Intensity.HEAVY)
    assert estimate.has_quit_risk

    train_student(state, s, HARD_TASK, Intensity.HEAVY)
    assert s.pressure >= 90
    assert s.pressure <= 100


def test_preview_does_not_touch_state(make_state):
    s = make_student("Alice", talents=["Slacker"])
    state = make_state(students=[s])
    rng_before = state.rng.getstate()
    pressure_before = s.pressure
    log_before = list(state.log_lines)
    estimate_training_pressure(state, HARD_TASK, "heavy")
    assert state.rng.getstate() == rng_before
    assert s.pressure == pressure_before
    assert state.log_lines == log_before


def test_light_easy_training_is_calm(make_state):
    s = make_student("Bob", thinking=40.0, coding=40.0, pressure=10.0)
    state = make_state(students=[s])
    estimate = estimate_training_pressure(state, EASY_TASK, 1)
    assert not estimate.has_quit_risk
    assert not estimate.has_high_pressure


def test_pressure_never_negative_and_modifier_consumed(make_state):
    s = make_student("Cara", pressure=0.0, pressure_modifier=-50.0)
    state = make_state(students=[s])
    outcome = train_student(state, s, EASY_TASK, Intensity.LIGHT)
    assert s.pressure == 0.0
    assert s.pressure_modifier == 0.0
    assert outcome.pressure_delta < 0


def test_training_adds_knowledge_and_ability(make_state):
    s = make_student("Dan")
    state = make_state(students=[s])
    before_ds = s.knowledge_ds
    before_ability = s.ability_avg()
    outcome = train_student(state, s, EASY_TASK, Intensity.MEDIUM)
    assert s.knowledge_ds == before_ds + outcome.knowledge["ds"]
    assert outcome.knowledge["ds"] >= 1
    assert s.ability_avg() > before_ability


def test_inactive_student_is_untouched(make_state):
    s = make_student("Eve")
    s.depart("evicted")
    state = make_state(students=[s, make_student("Finn")])
    before = s.to_dict()
    train_student(state, s, HARD_TASK, Intensity.HEAVY)
    assert s.to_dict() == before


def test_boost_multiplier_peaks_at_matching_difficulty():
    assert calculate_boost_multiplier(50, 50) > calculate_boost_multiplier(50, 90)
    assert calculate_boost_multiplier(50, 50) > calculate_boost_multiplier(50, 10)
    assert calculate_boost_multiplier(0, 1000) >= 0.3


def test_intensity_parse():
    assert Intensity.parse(3) is Intensity.HEAVY
    assert Intensity.parse("2") is Intensity.MEDIUM
    assert Intensity.parse("Light") is Intensity.LIGHT
    with pytest.raises(ValueError):
        Intensity.parse("brutal")


def test_training_consumes_the_week(make_state, no_events):
    state = make_state()
    result = train_students_with_task(state, EASY_TASK.name, "light")
    assert result.ok
    assert state.week == 2
    assert state.weekly_tasks


def test_unknown_task_is_rejected_without_change(make_state, no_events):
    state = make_state()
    budget = state.budget
    result = train_students_with_task(state, "Not A Task", "light")
    assert not result.ok
    assert state.week == 1
    assert state.budget == budget


def test_extra_training_repeats_within_a_week(make_state, no_events, monkeypatch):
    monkeypatch.setattr("simulation.training.try_acquire_talent", lambda *args, **kwargs: None)
    state = make_state(students=[make_student("Alice", pressure=10.0)])
    twin = make_state(students=[make_student("Alice", pressure=10.0)])
    alice = state.find_student("Alice")
    mirror = twin.find_student("Alice")

    for _ in range(2):
        mirror.thinking, mirror.coding, mirror.pressure = alice.thinking, alice.coding, alice.pressure
        twin.rng.setstate(state.rng.getstate())
        result = extra_train_students_with_task(state, EASY_TASK.name, "light")
        assert result.ok
        plain = train_student(twin, mirror, EASY_TASK, Intensity.LIGHT)
        assert result.details["outcomes"][0]["pressure_delta"] == pytest.approx(plain.pressure_delta * 1.5, abs=0.01)

    assert state.week == 1
