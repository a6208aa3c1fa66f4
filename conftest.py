"""
Shared pytest fixtures: hand-built seasons with a fixed RNG, an empty event pool,
and throwaway talents that are unregistered after each test.
"""
import random

import pytest

import simulation.events as events_module
from models import Facilities, GameState, Student, Talent, Task, TaskBoost
from simulation.talents import register_talent, unregister_talent

EASY_TASK = Task("Prefix Sums", 20, [TaskBoost("ds", 6)])
HARD_TASK = Task("Tree DP on Cactus", 120, [TaskBoost("dp", 10), TaskBoost("graph", 6)])


def make_student(name: str, **overrides) -> Student:
    fields = dict(thinking=30.0, coding=30.0, pressure=20.0, mental=70.0)
    fields.update(overrides)
    return Student(name=name, **fields)


@pytest.fixture
def make_state():
    """Factory for a mid-sized, temperate season on a fixed seed."""

    def _make(students=None, **overrides) -> GameState:
        fields = dict(
            week=1,
            budget=200000,
            reputation=30,
            difficulty=2,
            province_id=3,
            province_name="Test Province",
            province_type="normal",
            base_comfort=55.0,
            mean_temperature=20.0,
            temperature=20.0,
            weather="cloudy",
            facilities=Facilities(),
            weekly_tasks=[EASY_TASK, HARD_TASK],
            seed=7,
            rng=random.Random(7),
        )
        fields.update(overrides)
        if students is None:
            students = [make_student("Alice"), make_student("Bob")]
        return GameState(students=list(students), **fields)

    return _make


@pytest.fixture
def no_events(monkeypatch):
    """Empty the event pool so weekly ticks are free of stochastic events.
    register_event inside a test adds to the emptied pool only."""
    monkeypatch.setattr(events_module, "_DEFINITIONS", {})
    return events_module


@pytest.fixture
def talent():
    """Register throwaway talents for one test: talent(name, {trigger: resolver}, hidden=False)."""
    registered = []

    def _register(name: str, handlers: dict, hidden: bool = False) -> Talent:
        t = register_talent(Talent(name, f"test talent {name}", hidden=hidden, handlers=handlers))
        registered.append(name)
        return t

    yield _register
    for name in registered:
        unregister_talent(name)
