"""
Outing (domestic) and overseas training trips.

Cost: region-adjusted base + 18000 per participant + difficulty penalty, less a
reputation discount capped at 50%. Overseas trips cost x1.5. Talent inspiration adds a
flat fee per requested talent; talent cost reductions (outing_cost_calculate /
overseas_cost_calculate) are summed and subtracted, never below zero. The budget check
happens before anything is charged.

Each participant sits a hidden 4-problem mock. Below 200 the trip is a mismatch:
knowledge x0.2, ability x0.5, pressure x2.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from models import ActionResult, GameState, Student, TalentAction
from models.constants import (
    PROVINCES,
    COUNTRIES,
    PROVINCE_STRONG,
    PROVINCE_WEAK,
    KNOWLEDGE_KEYS,
    OUTING_BASE_COST,
    OUTING_COST_PER_PARTICIPANT,
    OUTING_DIFFICULTY_PENALTY,
    STRONG_PROVINCE_COST_MULTIPLIER,
    WEAK_PROVINCE_COST_MULTIPLIER,
    OUTING_REPUTATION_DISCOUNT,
    OUTING_REPUTATION_DISCOUNT_MULTIPLIER,
    OUTING_MAX_DISCOUNT,
    OVERSEAS_COST_MULTIPLIER,
    OVERSEAS_GAIN_MULTIPLIER,
    OUTING_KNOWLEDGE_BASE,
    OUTING_ABILITY_BASE,
    OUTING_PRESSURE,
    OUTING_COMFORT_DROP,
    OUTING_INSPIRE_COST,
    OVERSEAS_INSPIRE_COST,
    OUTING_INSPIRE_CHANCE,
    OVERSEAS_HIDDEN_INSPIRE_CHANCE,
    MOCK_CONTEST_DIFF_VALUES,
    OUTING_HIDDEN_DIFF_INDEX,
    HIDDEN_MOCK_PROBLEMS,
    MISMATCH_THRESHOLD,
    MISMATCH_KNOWLEDGE_MODIFIER,
    MISMATCH_ABILITY_MODIFIER,
    MISMATCH_PRESSURE_MULTIPLIER,
)
from .competition import simulate_problem_ratio
from .events import push_game_event
from .season import guard_action, run_weeks
from .talents import (
    OUTING_COST_CALCULATE,
    OVERSEAS_COST_CALCULATE,
    fold_pressure,
    get_talent,
    iter_talent_triggers,
    try_acquire_talent,
)

logger = logging.getLogger(__name__)


@dataclass
class TripQuote:
    destination: str
    region_type: str
    participants: List[str]
    base_cost: int
    inspire_cost: int
    talent_reduction: int
    total: int
    reductions: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "destination": self.destination,
            "region_type": self.region_type,
            "participants": list(self.participants),
            "base_cost": self.base_cost,
            "inspire_cost": self.inspire_cost,
            "talent_reduction": self.talent_reduction,
            "total": self.total,
            "reductions": list(self.reductions),
        }


def reputation_discount(reputation: float) -> float:
    rep = max(0.0, min(100.0, float(reputation)))
    return min(OUTING_MAX_DISCOUNT, rep / 100.0 * OUTING_REPUTATION_DISCOUNT * OUTING_REPUTATION_DISCOUNT_MULTIPLIER)


def compute_outing_cost(difficulty: int, region_type: str, participant_count: int, reputation: float) -> int:
    base = OUTING_BASE_COST.get(difficulty, OUTING_BASE_COST[1])
    if region_type == PROVINCE_STRONG:
        base = math.floor(base * STRONG_PROVINCE_COST_MULTIPLIER)
    elif region_type == PROVINCE_WEAK:
        base = math.floor(base * WEAK_PROVINCE_COST_MULTIPLIER)
    n = max(0, int(participant_count))
    raw = max(0, math.floor(base + OUTING_COST_PER_PARTICIPANT * n + OUTING_DIFFICULTY_PENALTY.get(difficulty, 100)))
    return max(0, math.floor(raw * (1.0 - reputation_discount(reputation))))


def simulate_hidden_mock_score(state: GameState, student: Student, difficulty: int) -> int:
    """0-400: four problems, each scored down to the nearest 10."""
    proxy = MOCK_CONTEST_DIFF_VALUES[OUTING_HIDDEN_DIFF_INDEX.get(difficulty, 0)]
    total = 0
    for _ in range(HIDDEN_MOCK_PROBLEMS):
        ratio = simulate_problem_ratio(state.rng, student, proxy)
        total += max(0, min(100, math.floor(ratio * 10) * 10))
    return total


def _destination(overseas: bool, region_id: int) -> Dict | None:
    table = COUNTRIES if overseas else PROVINCES
    return table.get(region_id)


def quote_trip(
    state: GameState,
    difficulty: int,
    region_id: int,
    names: Sequence[str],
    inspire_talents: Sequence[str] = (),
    overseas: bool = False,
) -> TripQuote | ActionResult:
    """Price a trip without charging it. Returns a rejection for invalid selections."""
    if difficulty not in OUTING_BASE_COST:
        return ActionResult.reject(f"Unknown trip difficulty: {difficulty}")
    target = _destination(overseas, region_id)
    if target is None:
        return ActionResult.reject(f"Unknown {'country' if overseas else 'province'}: {region_id}")
    participants = [s for s in state.active_students() if s.name in set(names)]
    if not participants:
        return ActionResult.reject("No participants selected")
    unknown = sorted(set(names) - {s.name for s in participants})
    if unknown:
        return ActionResult.reject(f"Not on the active roster: {', '.join(unknown)}")
    for talent_name in inspire_talents:
        talent = get_talent(talent_name)
        if talent is None or (talent.hidden and not overseas):
            return ActionResult.reject(f"Talent {talent_name!r} cannot be inspired on this trip")

    base = compute_outing_cost(difficulty, target["type"], len(participants), state.reputation)
    if overseas:
        base = math.floor(base * OVERSEAS_COST_MULTIPLIER)
    inspire_cost = len(inspire_talents) * (OVERSEAS_INSPIRE_COST if overseas else OUTING_INSPIRE_COST)
    total = base + inspire_cost

    trigger = OVERSEAS_COST_CALCULATE if overseas else OUTING_COST_CALCULATE
    wanted = TalentAction.REDUCE_OVERSEAS_COST if overseas else TalentAction.REDUCE_OUTING_COST
    reduction_total = 0.0
    reductions: List[Dict] = []
    for s in participants:
        ctx = {"state": state, "destination": target["name"], "difficulty": difficulty, "participant_count": len(participants)}
        for trig in iter_talent_triggers(s, trigger, ctx):
            out = trig.result
            if out is not None and out.action is wanted and out.amount:
                reduction_total += out.amount
                reductions.append({"student": s.name, "talent": trig.talent_name, "amount": out.amount})
    applied = min(total, math.floor(reduction_total)) if reduction_total > 0 else 0
    total = max(0, total - applied)

    return TripQuote(
        destination=target["name"],
        region_type=target["type"],
        participants=[s.name for s in participants],
        base_cost=base,
        inspire_cost=inspire_cost,
        talent_reduction=applied,
        total=total,
        reductions=reductions,
    )


def _train_participant(state: GameState, s: Student, difficulty: int, quality: float, overseas: bool) -> Dict:
    hidden = simulate_hidden_mock_score(state, s, difficulty)
    mismatch = hidden < MISMATCH_THRESHOLD

    knowledge_base = OUTING_KNOWLEDGE_BASE[difficulty]
    ability_base = OUTING_ABILITY_BASE[difficulty]
    if overseas:
        knowledge_base *= OVERSEAS_GAIN_MULTIPLIER
        ability_base *= OVERSEAS_GAIN_MULTIPLIER
    k_min = math.floor(knowledge_base * quality)
    k_max = math.floor(knowledge_base * quality * 1.8)
    a_min = ability_base * quality
    a_max = ability_base * quality * 2.0

    k_mod = MISMATCH_KNOWLEDGE_MODIFIER if mismatch else 1.0
    a_mod = MISMATCH_ABILITY_MODIFIER if mismatch else 1.0
    p_mult = MISMATCH_PRESSURE_MULTIPLIER if mismatch else 1.0

    knowledge_gain = math.floor(state.rng.randint(k_min, k_max) * k_mod)
    for key in KNOWLEDGE_KEYS:
        s.add_knowledge(key, knowledge_gain)
    ability_gain = state.rng.uniform(a_min, a_max) * a_mod
    s.thinking += ability_gain
    s.coding += ability_gain
    s.mental += ability_gain * 0.5

    pressure = math.floor(OUTING_PRESSURE[difficulty] * p_mult)
    ctx = {"state": state, "source": "overseas" if overseas else "outing", "difficulty": difficulty}
    delta = fold_pressure(s, pressure, ctx)
    s.pressure += delta
    s.comfort -= OUTING_COMFORT_DROP
    s.hidden_mock_score = hidden
    s.clamp_state()

    if mismatch:
        push_game_event(state, "Trip mismatch",
                        f"The trip did not suit {s.name}: more pressure, smaller gains",
                        event_id=f"mismatch:{s.name}")
    return {
        "name": s.name,
        "hidden_mock_score": hidden,
        "mismatch": mismatch,
        "knowledge_gain": knowledge_gain,
        "ability_gain": round(ability_gain, 3),
        "pressure_delta": delta,
    }


def _inspire(state: GameState, s: Student, inspire_talents: Sequence[str], overseas: bool) -> List[str]:
    gained: List[str] = []
    for talent_name in inspire_talents:
        talent = get_talent(talent_name)
        chance = OVERSEAS_HIDDEN_INSPIRE_CHANCE if talent is not None and talent.hidden else OUTING_INSPIRE_CHANCE
        if state.rng.random() < chance and s.add_talent(talent_name):
            gained.append(talent_name)
            push_game_event(state, "Talent inspired", f"{s.name} gained talent {talent_name} during the trip",
                            event_id=f"inspire:{s.name}:{talent_name}")
    return gained


def _run_trip(
    state: GameState,
    difficulty: int,
    region_id: int,
    names: Sequence[str],
    inspire_talents: Sequence[str] | None,
    overseas: bool,
) -> ActionResult:
    rejection = guard_action(state)
    if rejection is not None:
        return rejection
    inspire_talents = list(dict.fromkeys(inspire_talents or []))
    quote = quote_trip(state, difficulty, region_id, names, inspire_talents, overseas=overseas)
    if isinstance(quote, ActionResult):
        logger.info("Trip rejected: %s", quote.message)
        return quote
    if state.budget < quote.total:
        logger.info("Trip rejected: cost %d exceeds budget %d", quote.total, state.budget)
        return ActionResult.reject(f"Insufficient budget: trip costs {quote.total}, budget is {state.budget}",
                                   quote=quote.to_dict())

    kind = "Overseas training" if overseas else "Outing"
    state.record_expense(quote.total, f"{kind}: {quote.destination}")
    if quote.talent_reduction:
        state.log(f"Talent discounts: -{quote.talent_reduction}")
    target = _destination(overseas, region_id)
    results = []
    for name in quote.participants:
        s = state.find_student(name)
        row = _train_participant(state, s, difficulty, target["training_quality"], overseas)
        try_acquire_talent(state, s, 1.0)
        row["inspired"] = _inspire(state, s, inspire_talents, overseas)
        results.append(row)
        state.log(f"  {name}: mock {row['hidden_mock_score']}/400{' (mismatch)' if row['mismatch'] else ''}")

    run_weeks(state, 1)
    return ActionResult.accept(f"{kind} to {quote.destination} finished", quote=quote.to_dict(), results=results)


def outing_training(state: GameState, difficulty: int, province_id: int, names: Sequence[str],
                    inspire_talents: Sequence[str] | None = None) -> ActionResult:
    return _run_trip(state, difficulty, province_id, names, inspire_talents, overseas=False)


def overseas_training(state: GameState, difficulty: int, country_id: int, names: Sequence[str],
                      inspire_talents: Sequence[str] | None = None) -> ActionResult:
    return _run_trip(state, difficulty, country_id, names, inspire_talents, overseas=True)
