"""
Talent dispatch: acquisition-order folding, fault isolation, comfort and acquisition.

Usage:
    pytest test_talents.py
"""
import logging
import random

from conftest import make_student
from models import TalentAction, TalentResult
from simulation.talents import (
    COMFORT_CALCULATE,
    PRESSURE_CHANGE,
    WEEK_END,
    fold_pressure,
    get_talent,
    grant_random_talent,
    iter_talent_triggers,
    personal_comfort,
    trigger_talents,
    try_acquire_talent,
)


def _double(student, ctx):
    return TalentResult(TalentAction.DOUBLE_PRESSURE)


def _halve(student, ctx):
    return TalentResult(TalentAction.HALVE_PRESSURE)


def _halve_above_15(student, ctx):
    if ctx["amount"] > 15:
        return TalentResult(TalentAction.HALVE_PRESSURE)
    return None


def test_double_then_halve_applies_to_running_value(make_state, talent):
    talent("T Double", {PRESSURE_CHANGE: _double})
    talent("T Halve", {PRESSURE_CHANGE: _halve})
    state = make_state()
    s = make_student("Cara", talents=["T Double", "T Halve"])
    assert fold_pressure(s, 10, {"state": state}) == 10


def test_fold_depends_on_acquisition_order(make_state, talent):
    talent("T Double", {PRESSURE_CHANGE: _double})
    talent("T Calm", {PRESSURE_CHANGE: _halve_above_15})
    state = make_state()
    double_first = make_student("Dan", talents=["T Double", "T Calm"])
    calm_first = make_student("Eve", talents=["T Calm", "T Double"])
    assert fold_pressure(double_first, 10, {"state": state}) == 10
    assert fold_pressure(calm_first, 10, {"state": state}) == 20


def test_failing_resolver_is_isolated(make_state, talent, caplog):
    def _boom(student, ctx):
        raise RuntimeError("broken talent")

    talent("T Broken", {PRESSURE_CHANGE: _boom})
    talent("T Halve", {PRESSURE_CHANGE: _halve})
    state = make_state()
    s = make_student("Finn", talents=["T Broken", "T Halve"])
    with caplog.at_level(logging.ERROR, logger="simulation.talents"):
        triggers = trigger_talents(s, PRESSURE_CHANGE, {"state": state, "amount": 8})
    assert [t.talent_name for t in triggers] == ["T Broken", "T Halve"]
    assert triggers[0].result is None
    assert triggers[1].result.action is TalentAction.HALVE_PRESSURE
    assert "T Broken" in caplog.text
    assert fold_pressure(s, 8, {"state": state}) == 4


def test_malformed_resolver_result_is_ignored(make_state, talent, caplog):
    talent("T Sloppy", {PRESSURE_CHANGE: lambda student, ctx: "halve_pressure"})
    talent("T Double", {PRESSURE_CHANGE: _double})
    state = make_state()
    s = make_student("Finn", talents=["T Sloppy", "T Double"])
    with caplog.at_level(logging.ERROR, logger="simulation.talents"):
        assert fold_pressure(s, 8, {"state": state}) == 16
    assert "T Sloppy" in caplog.text


def test_unregistered_and_unrelated_talents_are_skipped(make_state, talent):
    talent("T Halve", {PRESSURE_CHANGE: _halve})
    state = make_state()
    s = make_student("Gus", talents=["No Such Talent", "Night Owl", "T Halve"])
    triggers = trigger_talents(s, PRESSURE_CHANGE, {"state": state})
    assert [t.talent_name for t in triggers] == ["T Halve"]


def test_dispatch_is_lazy(make_state, talent):
    calls = []

    def _record(student, ctx):
        calls.append(student.name)
        return TalentResult(TalentAction.MESSAGE, message="hi")

    talent("T Record", {WEEK_END: _record})
    state = make_state()
    s = make_student("Hana", talents=["T Record"])
    gen = iter_talent_triggers(s, WEEK_END, {"state": state})
    assert calls == []
    next(gen)
    assert calls == ["Hana"]


def test_context_receives_state_rng(make_state, talent):
    seen = {}

    def _peek(student, ctx):
        seen["rng"] = ctx["rng"]
        return None

    talent("T Peek", {WEEK_END: _peek})
    state = make_state()
    trigger_talents(make_student("Ivy", talents=["T Peek"]), WEEK_END, {"state": state})
    assert seen["rng"] is state.rng


def test_preview_fold_does_not_log(make_state):
    state = make_state()
    s = make_student("Jin", talents=["Steady"])
    before = len(state.log_lines)
    assert fold_pressure(s, 40, {"state": state, "preview": True}) == 20
    assert len(state.log_lines) == before
    fold_pressure(s, 40, {"state": state})
    assert len(state.log_lines) == before + 1


def test_personal_comfort_clamps_and_consumes_nothing(make_state, talent):
    talent("T Cozy", {COMFORT_CALCULATE: lambda s, ctx: TalentResult(TalentAction.ADJUST_COMFORT, amount=500)})
    state = make_state()
    s = make_student("Kai", talents=["T Cozy"], comfort_modifier=-20)
    # +500 clamps to 100 before the one-shot modifier applies
    assert personal_comfort(state, s, 50) == 80
    assert s.comfort_modifier == -20


def test_default_talents_registered():
    assert get_talent("Steady") is not None
    assert get_talent("Polyglot").hidden
    assert not get_talent("Networker").hidden


def test_try_acquire_talent_respects_chance(make_state):
    state = make_state()
    s = make_student("Lin")
    state.rng = random.Random(1)
    assert try_acquire_talent(state, s, 0.0) is None
    assert s.talents == []


def test_grant_random_talent_never_duplicates(make_state):
    state = make_state()
    s = make_student("Mo")
    names = set()
    for _ in range(40):
        name = grant_random_talent(state, s)
        if name is None:
            break
        names.add(name)
    assert len(s.talents) == len(set(s.talents)) == len(names)
    assert all(not get_talent(n).hidden for n in s.talents)
