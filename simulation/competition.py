"""
CompetitionEngine: contest calendar, qualification chain, contest resolution and
end-of-season contribution scoring.

Each half of the season runs CSP-S1 -> CSP-S2 -> NOIP -> ProvincialSelection -> NOI.
CSP-S1 is open to everyone; every later contest needs a pass in the previous one
within the same half. A contest key (half::name::week) resolves at most once.
"""
from __future__ import annotations

import logging
import math
import random
from typing import Dict, List

from models import ActionResult, ContestEntry, ContestRecord, GameState, Student
from models.constants import (
    WEEKS_PER_HALF,
    KNOWLEDGE_KEYS,
    COMPETITION_SCHEDULE,
    QUALIFICATION_CHAIN,
    CONTEST_VALUE_MAP,
    CONTEST_PRESSURE,
    CONTEST_REPUTATION_PER_PASS,
    MEDAL_LINES,
    MEDAL_REPUTATION,
    MEDAL_BUDGET_REWARD,
    SICK_CONTEST_PENALTY,
    NOI,
)
from models.game_state import ENDING_BUDGET, ENDING_NO_STUDENTS
from models.student import DEPARTURE_RETIRED
from .events import push_game_event, raise_national_team_invitation
from .talents import CONTEST_FINISHED, QUIT, fold_pressure, trigger_talents

logger = logging.getLogger(__name__)

ENDING_GLORY = "Glory"
ENDING_BUDGET_EXHAUSTED = "Budget exhausted"
ENDING_COLLAPSE = "Collapse"
ENDING_ORDINARY = "Ordinary"


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

def competition_schedule() -> List[Dict]:
    """Every contest of the season with its absolute week and half."""
    out: List[Dict] = []
    for half in (1, 2):
        for comp in COMPETITION_SCHEDULE:
            entry = dict(comp)
            entry["half"] = half
            entry["week"] = (half - 1) * WEEKS_PER_HALF + comp["week"]
            out.append(entry)
    return out


def contest_for_week(week: int) -> Dict | None:
    for comp in competition_schedule():
        if comp["week"] == week:
            return comp
    return None


def next_contest_week(after_week: int) -> int | None:
    """First contest week strictly after after_week."""
    weeks = [c["week"] for c in competition_schedule() if c["week"] > after_week]
    return min(weeks) if weeks else None


def contest_key(half: int, name: str, week: int) -> str:
    return f"{half}::{name}::{week}"


def has_unresolved_contest(state: GameState) -> bool:
    comp = contest_for_week(state.week)
    if comp is None:
        return False
    return contest_key(comp["half"], comp["name"], comp["week"]) not in state.completed_competitions


# ---------------------------------------------------------------------------
# Qualification chain
# ---------------------------------------------------------------------------

def previous_contest(name: str) -> str | None:
    idx = QUALIFICATION_CHAIN.index(name)
    return QUALIFICATION_CHAIN[idx - 1] if idx > 0 else None


def is_eligible(state: GameState, student: Student, contest_name: str, half: int | None = None) -> bool:
    prev = previous_contest(contest_name)
    if prev is None:
        return True
    return student.name in state.qualified_for(prev, half)


def next_contest_for_student(state: GameState) -> str | None:
    """Name of the next scheduled contest in the current half, or None when the half is done."""
    half = state.current_half()
    for comp in competition_schedule():
        if comp["half"] == half and comp["week"] > state.week:
            return comp["name"]
    return None


def is_qualified_for_next(state: GameState, student: Student) -> bool:
    nxt = next_contest_for_student(state)
    if nxt is None:
        return True
    return is_eligible(state, student, nxt)


def check_forced_retirement(state: GameState) -> List[str]:
    """
    Second half only: retire active students who can no longer enter their next contest.
    No reputation cost. Skipped on contest weeks and while a national team process is live.
    """
    if state.current_half() != 2 or state.national_team_active():
        return []
    if contest_for_week(state.week) is not None:
        return []
    retired: List[str] = []
    for s in state.active_students():
        if not is_qualified_for_next(state, s):
            s.depart(DEPARTURE_RETIRED)
            trigger_talents(s, QUIT, {"state": state, "reason": "qualification_lost"})
            retired.append(s.name)
    if retired:
        push_game_event(
            state,
            "Qualification chain broken",
            f"{', '.join(retired)} retired after losing qualification (no reputation cost)",
            event_id="retired:" + ",".join(retired),
        )
    return retired


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def _sigmoid(x: float) -> float:
    return 1.0 / (1.0 + math.exp(-x))


def simulate_problem_ratio(rng: random.Random, student: Student, difficulty: float) -> float:
    """
    Fraction of one problem solved (0-1). Samples 1-3 knowledge domains, blends their
    average with ability, then applies mental-driven stability and noise.
    """
    tags = rng.sample(KNOWLEDGE_KEYS, rng.randint(1, 3))
    avg_k = math.floor(sum(student.get_knowledge(t) for t in tags) / len(tags))
    ab = student.ability_avg()
    strength = ab + avg_k * 3.5
    perf = _sigmoid(strength / 15.0)
    stability = student.mental_index()
    sigma = (100 - student.mental) / 150.0 + 0.08
    ratio = perf * stability * (1 + rng.gauss(0, sigma)) * _sigmoid((strength - difficulty) / 10.0)
    return max(0.0, min(1.0, ratio))


def _medal_for(score: float, max_score: int) -> str | None:
    for medal, ratio in MEDAL_LINES:
        if score >= max_score * ratio:
            return medal
    return None


def hold_competition(state: GameState) -> ActionResult:
    """Resolve the contest scheduled for the current week. Does not advance the week."""
    if state.is_ended():
        return ActionResult.reject("The season has ended")
    if state.has_pending_choice():
        return ActionResult.reject("Resolve the pending event first")
    comp = contest_for_week(state.week)
    if comp is None:
        return ActionResult.reject(f"No contest is scheduled in week {state.week}")
    half, name = comp["half"], comp["name"]
    key = contest_key(half, name, comp["week"])
    if key in state.completed_competitions:
        return ActionResult.reject(f"{name} (week {state.week}) was already held")

    max_score = 100 * comp["num_problems"]
    record = ContestRecord(name=name, week=state.week, half=half, max_score=max_score,
                           pass_line=round(max_score * comp["pass_ratio"], 1))
    passed_names: List[str] = []
    gold_names: List[str] = []
    for s in state.active_students():
        if not is_eligible(state, s, name, half):
            record.entries.append(ContestEntry(name=s.name, score=0.0, eligible=False))
            continue
        score = 0.0
        for _ in range(comp["num_problems"]):
            score += math.floor(simulate_problem_ratio(state.rng, s, comp["difficulty"]) * 100)
        if s.is_sick():
            score = math.floor(score * SICK_CONTEST_PENALTY)
        passed = score >= record.pass_line
        medal = _medal_for(score, max_score) if name == NOI else None
        record.entries.append(ContestEntry(name=s.name, score=score, eligible=True, passed=passed, medal=medal))

        if passed:
            passed_names.append(s.name)
            state.qualified_for(name, half).add(s.name)
            s.mental += 3
        else:
            s.mental -= 3
        if medal is not None:
            state.change_reputation(MEDAL_REPUTATION[medal])
            state.add_funds(MEDAL_BUDGET_REWARD[medal], f"{s.name} NOI {medal} medal award")
            if medal == "gold":
                gold_names.append(s.name)

        delta = fold_pressure(s, CONTEST_PRESSURE.get(name, 0), {"state": state, "source": "contest", "contest": name})
        s.pressure += delta
        trigger_talents(s, CONTEST_FINISHED, {"state": state, "contest": name, "score": score, "passed": passed})
        s.clamp_state()

    state.change_reputation(CONTEST_REPUTATION_PER_PASS.get(name, 0) * len(passed_names))
    state.completed_competitions.add(key)
    state.career_competitions.append(record)
    state.log(f"{name} finished: {len(passed_names)} passed (line {record.pass_line}/{max_score})")
    for entry in record.entries:
        if entry.eligible:
            state.log(f"  {entry.name}: {entry.score:g}{' PASS' if entry.passed else ''}{' ' + entry.medal if entry.medal else ''}")
        else:
            state.log(f"  {entry.name}: not qualified")

    if gold_names and not state.national_team_member and not state.national_team_active():
        raise_national_team_invitation(state, gold_names)
    return ActionResult.accept(f"{name} held", record=record.to_dict())


def tick_national_team(state: GameState) -> None:
    if not state.in_national_team:
        return
    state.national_team_weeks_remaining = max(0, state.national_team_weeks_remaining - 1)
    if state.national_team_weeks_remaining == 0:
        state.in_national_team = False
        state.log("National team training finished")


# ---------------------------------------------------------------------------
# End-of-season reporting
# ---------------------------------------------------------------------------

def student_contribution(contest_name: str, entry: ContestEntry) -> float:
    if not entry.eligible:
        return 0.0
    return math.log10(max(1.0, entry.score + 10)) * CONTEST_VALUE_MAP.get(contest_name, 0)


def contest_performance_score(record: ContestRecord) -> float:
    return sum(student_contribution(record.name, e) for e in record.entries)


def calculate_performance_score(state: GameState) -> float:
    return sum(contest_performance_score(r) for r in state.career_competitions)


def student_contributions(state: GameState) -> Dict[str, float]:
    totals: Dict[str, float] = {s.name: 0.0 for s in state.students}
    for record in state.career_competitions:
        for entry in record.entries:
            totals[entry.name] = totals.get(entry.name, 0.0) + student_contribution(record.name, entry)
    return totals


def calculate_final_ending(state: GameState) -> str:
    noi_gold = any(
        e.medal == "gold"
        for r in state.career_competitions if r.name == NOI
        for e in r.entries
    )
    if state.national_team_member or noi_gold:
        return ENDING_GLORY
    if state.ending_reason == ENDING_BUDGET:
        return ENDING_BUDGET_EXHAUSTED
    if state.ending_reason == ENDING_NO_STUDENTS:
        return ENDING_COLLAPSE
    return ENDING_ORDINARY
