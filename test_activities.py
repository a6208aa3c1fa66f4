"""
Coach activities: entertainment, vacation, part-time work, facility upgrades and evictions.

Usage:
    pytest test_activities.py
"""
from conftest import make_student
from models import Facilities
from models.constants import EVICT_REPUTATION_COST
from models.game_state import ENDING_NO_STUDENTS
from models.student import DEPARTURE_EVICTED, DEPARTURE_PART_TIME
from simulation.activities import (
    entertainment,
    evict_student,
    part_time_earnings,
    part_time_job,
    take_vacation,
    upgrade_facility,
)


def test_rest_lowers_pressure_and_consumes_week(make_state, no_events):
    state = make_state(students=[make_student("Alice", pressure=80.0)])
    result = entertainment(state, "rest")
    assert result.ok
    assert state.week == 2
    assert state.find_student("Alice").pressure < 80.0 - 30 + 1


def test_gaming_needs_computers(make_state, no_events):
    state = make_state()
    assert not entertainment(state, "gaming").ok
    assert state.week == 1
    state.facilities = Facilities(computer=3)
    assert entertainment(state, "gaming").ok


def test_meal_costs_money(make_state, no_events):
    state = make_state()
    result = entertainment(state, "meal")
    assert result.ok
    assert result.details["cost"] == 3000


def test_unknown_entertainment_rejected(make_state):
    state = make_state()
    assert not entertainment(state, "karaoke").ok


def test_dreamer_only_gets_half_the_rest(make_state, no_events):
    import random

    plain = make_state(students=[make_student("Alice", pressure=90.0)])
    dreamer = make_state(students=[make_student("Alice", pressure=90.0, talents=["Dreamer"])])
    plain.rng = random.Random(3)
    dreamer.rng = random.Random(3)
    entertainment(plain, "sports")
    entertainment(dreamer, "sports")
    assert dreamer.find_student("Alice").pressure > plain.find_student("Alice").pressure


def test_vacation_skips_weeks(make_state, no_events):
    state = make_state()
    result = take_vacation(state, 10)
    assert result.ok
    assert state.week == 3
    assert result.details["weeks"] == 2


def test_vacation_bounds(make_state):
    state = make_state()
    assert not take_vacation(state, 0).ok
    assert not take_vacation(state, 15).ok
    assert state.week == 1


def test_part_time_earnings_formula():
    s = make_student("Alice", thinking=10.0, coding=20.0, mental=80.0)
    assert part_time_earnings(s) == 2000 + 30 * 20 + 200


def test_part_time_overload_departs(make_state, no_events):
    tired = make_student("Alice", pressure=99.0)
    state = make_state(students=[tired, make_student("Bob", pressure=10.0)])
    rep = state.reputation
    budget = state.budget
    result = part_time_job(state, ["Alice", "Bob"])
    assert result.ok
    assert result.details["quit"] == ["Alice"]
    assert tired.departure_reason == DEPARTURE_PART_TIME
    assert state.reputation == rep - 5
    assert state.budget > budget - state.get_weekly_cost() * 2


def test_upgrade_does_not_consume_week(make_state):
    state = make_state()
    budget = state.budget
    result = upgrade_facility(state, "library")
    assert result.ok
    assert state.facilities.library == 2
    assert state.budget == budget - result.details["cost"]
    assert state.week == 1


def test_upgrade_rejections(make_state):
    state = make_state(facilities=Facilities(ac=3))
    assert not upgrade_facility(state, "ac").ok
    assert not upgrade_facility(state, "pool").ok
    poor = make_state(budget=10)
    assert not upgrade_facility(poor, "computer").ok
    assert poor.budget == 10


def test_evict_reputation_floor(make_state):
    state = make_state(reputation=4)
    result = evict_student(state, "Alice")
    assert result.ok
    assert state.reputation == max(0, 4 - EVICT_REPUTATION_COST)
    alice = state.find_student("Alice", active_only=False)
    assert alice.departure_reason == DEPARTURE_EVICTED
    assert not evict_student(state, "Alice").ok


def test_evicting_last_student_ends_season(make_state):
    state = make_state(students=[make_student("Alice")])
    evict_student(state, "Alice")
    assert state.ending_reason == ENDING_NO_STUDENTS
