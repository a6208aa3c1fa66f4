"""
Outing and overseas trips: pricing, talent discounts, budget checks and mismatch.

Usage:
    pytest test_outing.py
"""
import math

import pytest

from conftest import make_student
from models import ActionResult, TalentAction, TalentResult
from models.constants import (
    MISMATCH_ABILITY_MODIFIER,
    MISMATCH_KNOWLEDGE_MODIFIER,
    MISMATCH_PRESSURE_MULTIPLIER,
    MISMATCH_THRESHOLD,
    OUTING_MAX_DISCOUNT,
    PROVINCE_NORMAL,
    PROVINCE_STRONG,
)
from simulation.outing import (
    TripQuote,
    compute_outing_cost,
    outing_training,
    overseas_training,
    quote_trip,
    reputation_discount,
)
from simulation.talents import OUTING_COST_CALCULATE, OVERSEAS_COST_CALCULATE


def test_insufficient_budget_rejects_without_charging(make_state, no_events):
    state = make_state(budget=1000)
    result = outing_training(state, 1, 3, ["Alice"])
    assert not result.ok
    assert state.budget == 1000
    assert state.week == 1
    assert state.total_expenses == 0


def test_cost_formula_without_reputation():
    assert compute_outing_cost(1, PROVINCE_NORMAL, 1, 0) == 10000 + 18000 + 100
    assert compute_outing_cost(2, PROVINCE_STRONG, 2, 0) == 30000 + 36000 + 300


def test_reputation_discount_is_capped():
    assert reputation_discount(0) == 0
    assert reputation_discount(10**6) <= OUTING_MAX_DISCOUNT
    assert compute_outing_cost(3, PROVINCE_NORMAL, 3, 100) >= compute_outing_cost(3, PROVINCE_NORMAL, 3, 0) * (1 - OUTING_MAX_DISCOUNT)


def test_talent_reductions_are_summed_and_floored_at_zero(make_state, talent):
    talent("T Fixer", {OUTING_COST_CALCULATE: lambda s, ctx: TalentResult(TalentAction.REDUCE_OUTING_COST, amount=10**7)})
    state = make_state(students=[make_student("Alice", talents=["T Fixer"]), make_student("Bob")])
    quote = quote_trip(state, 1, 3, ["Alice", "Bob"])
    assert isinstance(quote, TripQuote)
    assert quote.total == 0
    assert quote.talent_reduction == quote.base_cost


def test_networker_discounts_domestic_and_overseas(make_state):
    state = make_state(reputation=0, students=[make_student("Alice", talents=["Networker"])])
    domestic = quote_trip(state, 1, 3, ["Alice"])
    assert domestic.talent_reduction == 5000
    assert domestic.total == domestic.base_cost - 5000
    abroad = quote_trip(state, 1, 3, ["Alice"], overseas=True)
    assert abroad.talent_reduction == 8000


def test_overseas_reduction_ignores_outing_talents(make_state, talent):
    talent("T Local", {OUTING_COST_CALCULATE: lambda s, ctx: TalentResult(TalentAction.REDUCE_OUTING_COST, amount=999)})
    talent("T Wrong", {OVERSEAS_COST_CALCULATE: lambda s, ctx: TalentResult(TalentAction.REDUCE_OUTING_COST, amount=999)})
    state = make_state(students=[make_student("Alice", talents=["T Local", "T Wrong"])])
    quote = quote_trip(state, 1, 1, ["Alice"], overseas=True)
    assert quote.talent_reduction == 0


def test_quote_rejections(make_state):
    state = make_state()
    assert isinstance(quote_trip(state, 9, 3, ["Alice"]), ActionResult)
    assert isinstance(quote_trip(state, 1, 99, ["Alice"]), ActionResult)
    assert isinstance(quote_trip(state, 1, 3, []), ActionResult)
    assert isinstance(quote_trip(state, 1, 3, ["Alice", "Nobody"]), ActionResult)
    # hidden talents can only be inspired abroad
    assert isinstance(quote_trip(state, 1, 3, ["Alice"], inspire_talents=["Polyglot"]), ActionResult)
    assert isinstance(quote_trip(state, 1, 1, ["Alice"], inspire_talents=["Polyglot"], overseas=True), TripQuote)


def test_inspire_fee_is_added(make_state):
    state = make_state(reputation=0)
    plain = quote_trip(state, 1, 3, ["Alice"])
    inspired = quote_trip(state, 1, 3, ["Alice"], inspire_talents=["Optimist", "Steady"])
    assert inspired.total - plain.total == 2 * 12000


def test_outing_charges_and_consumes_week(make_state, no_events):
    state = make_state(reputation=0)
    quote = quote_trip(state, 1, 3, ["Alice"])
    budget = state.budget
    result = outing_training(state, 1, 3, ["Alice"])
    assert result.ok
    assert state.week == 2
    assert state.total_expenses >= quote.total
    assert state.budget < budget - quote.total + 1
    alice = state.find_student("Alice")
    assert alice.hidden_mock_score is not None
    assert 0 <= alice.hidden_mock_score <= 400
    assert result.details["results"][0]["mismatch"] == (alice.hidden_mock_score < 200)


def test_weak_student_on_hard_trip_is_a_mismatch(make_state, no_events):
    weak = make_student("Alice", thinking=1.0, coding=1.0, mental=40.0)
    state = make_state(students=[weak])
    result = overseas_training(state, 3, 1, ["Alice"])
    assert result.ok
    row = result.details["results"][0]
    assert row["mismatch"]
    assert any(e.name == "Trip mismatch" for e in state.recent_events)


def _trip_row(make_state, monkeypatch, mock_score):
    monkeypatch.setattr("simulation.outing.simulate_hidden_mock_score", lambda *args: mock_score)
    state = make_state(students=[make_student("Alice")])
    result = outing_training(state, 1, 3, ["Alice"])
    assert result.ok
    return result.details["results"][0]


def test_mismatch_cuts_gains_and_doubles_pressure(make_state, no_events, monkeypatch):
    suited = _trip_row(make_state, monkeypatch, MISMATCH_THRESHOLD + 10)
    mismatched = _trip_row(make_state, monkeypatch, MISMATCH_THRESHOLD - 10)
    assert not suited["mismatch"]
    assert mismatched["mismatch"]
    assert mismatched["knowledge_gain"] == math.floor(suited["knowledge_gain"] * MISMATCH_KNOWLEDGE_MODIFIER)
    assert mismatched["ability_gain"] == pytest.approx(suited["ability_gain"] * MISMATCH_ABILITY_MODIFIER, abs=0.001)
    assert mismatched["pressure_delta"] == suited["pressure_delta"] * MISMATCH_PRESSURE_MULTIPLIER


@pytest.mark.parametrize("overseas", [False, True])
def test_trip_blocked_while_choice_pending(make_state, no_events, overseas):
    from models import EventOption
    from simulation.events import push_game_event

    state = make_state()
    push_game_event(state, "Card", "pick one", options=[EventOption("a", "A")], definition_id="x")
    action = overseas_training if overseas else outing_training
    result = action(state, 1, 1, ["Alice"])
    assert not result.ok
    assert state.budget == 200000
