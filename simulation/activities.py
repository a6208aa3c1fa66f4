"""
Coach actions beyond training and trips: entertainment, vacation, part-time work,
facility upgrades and evicting a student. All are guarded like the weekly tick.
Entertainment, vacation and part-time work consume the week; upgrades and evictions do not.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, List, Sequence

from models import ActionResult, GameState, Student, TalentAction
from models.constants import (
    FACILITY_NAMES,
    FACILITY_LABELS,
    ENTERTAINMENT_COST_MEAL,
    ENTERTAINMENT_COST_GAMING,
    ENTERTAINMENT_GAMING_MIN_COMPUTER,
    VACATION_MAX_DAYS,
    PART_TIME_BASE_EARNINGS,
    PART_TIME_ABILITY_RATE,
    PART_TIME_QUIT_REPUTATION_COST,
    EVICT_REPUTATION_COST,
    WEATHER_RAIN,
    WEATHER_SNOW,
)
from models.student import DEPARTURE_ESPORTS, DEPARTURE_EVICTED, DEPARTURE_PART_TIME
from .events import push_game_event
from .season import check_and_trigger_ending, guard_action, run_weeks, weeks_for_days
from .talents import ENTERTAINMENT_FINISHED, VACATION_END, fold_pressure, iter_talent_triggers

logger = logging.getLogger(__name__)

ENTERTAINMENT_REST = "rest"
ENTERTAINMENT_MEAL = "meal"
ENTERTAINMENT_SPORTS = "sports"
ENTERTAINMENT_GAMING = "gaming"

ENTERTAINMENT_COSTS: Dict[str, int] = {
    ENTERTAINMENT_REST: 0,
    ENTERTAINMENT_MEAL: ENTERTAINMENT_COST_MEAL,
    ENTERTAINMENT_SPORTS: 0,
    ENTERTAINMENT_GAMING: ENTERTAINMENT_COST_GAMING,
}


def _apply_rest_talents(state: GameState, s: Student, trigger: str, ctx: Dict, old_pressure: float) -> None:
    """Handle quit_for_esports / vacation_half_minus5 after a rest-type activity."""
    for trig in iter_talent_triggers(s, trigger, ctx):
        out = trig.result
        if out is None:
            continue
        if out.action is TalentAction.QUIT_FOR_ESPORTS:
            s.depart(DEPARTURE_ESPORTS)
            push_game_event(state, "Student left for esports", f"{s.name} {out.message or 'left to play esports'}",
                            event_id=f"esports:{s.name}")
            break
        if out.action is TalentAction.VACATION_HALF_MINUS5:
            drop = max(0.0, old_pressure - s.pressure)
            s.pressure = min(100.0, s.pressure + drop * 0.5)
            state.log(f"{s.name}: {out.message or 'rest was only half as effective'}")
        elif out.action is TalentAction.MESSAGE and out.message:
            state.log(f"{s.name}: {out.message}")


def entertainment(state: GameState, activity: str) -> ActionResult:
    """One week of team entertainment; rest/sports are free, meal and gaming cost money."""
    rejection = guard_action(state)
    if rejection is not None:
        return rejection
    if activity not in ENTERTAINMENT_COSTS:
        return ActionResult.reject(f"Unknown entertainment: {activity!r}")
    if activity == ENTERTAINMENT_GAMING and state.facilities.computer < ENTERTAINMENT_GAMING_MIN_COMPUTER:
        return ActionResult.reject(f"Gaming needs computer level {ENTERTAINMENT_GAMING_MIN_COMPUTER} or higher")
    if not state.active_students():
        return ActionResult.reject("No active students")
    cost = int(round(ENTERTAINMENT_COSTS[activity] * state.get_expense_multiplier()))
    if state.budget < cost:
        return ActionResult.reject(f"Insufficient budget: {activity} costs {cost}, budget is {state.budget}")
    if cost:
        state.record_expense(cost, f"Entertainment: {activity}")

    rng = state.rng
    for s in state.active_students():
        old = s.pressure
        if activity == ENTERTAINMENT_REST:
            s.mental += rng.uniform(3, 7)
            s.pressure = max(0.0, s.pressure - rng.uniform(30, 45))
        elif activity == ENTERTAINMENT_MEAL:
            s.mental += rng.uniform(8, 20)
            s.pressure = max(0.0, s.pressure - rng.uniform(40, 55))
        elif activity == ENTERTAINMENT_SPORTS:
            wf = 1.0
            if state.weather == WEATHER_SNOW:
                wf = 2.0
            elif state.weather == WEATHER_RAIN and state.facilities.dorm < 2:
                wf = 0.5
            s.pressure = max(0.0, s.pressure - rng.uniform(20, 35) * wf)
            s.mental += rng.uniform(3, 8)
        else:
            s.mental += rng.uniform(1, 5)
            s.coding += rng.uniform(0.5, 1.0)
            s.pressure = max(0.0, s.pressure - rng.uniform(10, 20))
        s.clamp_state()
        _apply_rest_talents(state, s, ENTERTAINMENT_FINISHED, {"state": state, "activity": activity, "cost": cost}, old)
        s.clamp_state()

    state.log(f"Entertainment: {activity}")
    if not check_and_trigger_ending(state):
        run_weeks(state, 1)
    return ActionResult.accept(f"Entertainment ({activity}) finished", cost=cost, week=state.week)


def take_vacation(state: GameState, days: int) -> ActionResult:
    """1-14 days off; skips ceil(days/7) weeks."""
    rejection = guard_action(state)
    if rejection is not None:
        return rejection
    try:
        days = int(days)
    except (TypeError, ValueError):
        return ActionResult.reject(f"Invalid number of days: {days!r}")
    if not 1 <= days <= VACATION_MAX_DAYS:
        return ActionResult.reject(f"Vacation must be between 1 and {VACATION_MAX_DAYS} days")
    weeks = weeks_for_days(days)
    rng = state.rng
    for s in state.active_students():
        s.mental = min(100.0, s.mental + days * rng.uniform(3, 8))
        old = s.pressure
        s.pressure = max(0.0, s.pressure - rng.uniform(20, 40) * days / 7.0)
        _apply_rest_talents(state, s, VACATION_END, {"state": state, "days": days, "weeks": weeks}, old)
        s.clamp_state()
    state.log(f"Vacation: {days} day(s), skipping {weeks} week(s)")
    elapsed = 0
    if not check_and_trigger_ending(state):
        elapsed = run_weeks(state, weeks)
    return ActionResult.accept(f"Vacation of {days} day(s) finished", weeks=elapsed, week=state.week)


def part_time_earnings(s: Student) -> int:
    mental_bonus = 200 if s.mental > 70 else 100 if s.mental > 50 else 0
    return math.floor(PART_TIME_BASE_EARNINGS + ((s.thinking or 0) + (s.coding or 0)) * PART_TIME_ABILITY_RATE + mental_bonus)


def part_time_job(state: GameState, names: Sequence[str]) -> ActionResult:
    """Selected students work for a week. Anyone pushed over 100 pressure quits (reputation -5)."""
    rejection = guard_action(state)
    if rejection is not None:
        return rejection
    workers = [s for s in state.active_students() if s.name in set(names)]
    if not workers:
        return ActionResult.reject("No students selected for part-time work")

    comfort = state.get_comfort()
    comfort_factor = 1.0 + max(0.0, (50 - comfort) / 100.0)
    total = 0
    quit_names: List[str] = []
    for s in workers:
        base = 20 + max(0.0, (50 - s.ability_avg()) * 0.1)
        pressure = base * state.get_weather_factor() * state.facilities.canteen_pressure_reduction() * comfort_factor
        pressure = fold_pressure(s, pressure, {"state": state, "source": "part_time_job"})
        s.pressure += pressure
        total += part_time_earnings(s)
        if s.pressure > 100:
            s.depart(DEPARTURE_PART_TIME)
            state.change_reputation(-PART_TIME_QUIT_REPUTATION_COST)
            quit_names.append(s.name)
        s.clamp_state()

    state.add_funds(total, "Part-time work")
    if quit_names:
        push_game_event(state, "Quit after part-time work",
                        f"{', '.join(quit_names)} quit after pressure passed 100; reputation -{PART_TIME_QUIT_REPUTATION_COST}",
                        event_id="part_time:" + ",".join(quit_names))
    if not check_and_trigger_ending(state):
        run_weeks(state, 1)
    return ActionResult.accept(f"Part-time work earned {total}", earnings=total, quit=quit_names, week=state.week)


def upgrade_facility(state: GameState, name: str) -> ActionResult:
    """Buy the next level of a facility. Does not consume the week."""
    rejection = guard_action(state)
    if rejection is not None:
        return rejection
    if name not in FACILITY_NAMES:
        return ActionResult.reject(f"Unknown facility: {name!r}")
    base = state.facilities.upgrade_cost(name)
    if base is None:
        return ActionResult.reject(f"{FACILITY_LABELS[name]} is already at max level")
    cost = int(round(base * state.get_expense_multiplier()))
    if state.budget < cost:
        return ActionResult.reject(f"Insufficient budget: upgrade costs {cost}, budget is {state.budget}")
    state.record_expense(cost, f"Upgrade {FACILITY_LABELS[name]}")
    level = state.facilities.upgrade(name)
    state.log(f"{FACILITY_LABELS[name]} upgraded to level {level}")
    check_and_trigger_ending(state)
    return ActionResult.accept(f"{FACILITY_LABELS[name]} is now level {level}", level=level, cost=cost)


def evict_student(state: GameState, name: str) -> ActionResult:
    """Remove a student from the active roster. Reputation -10, floored at 0."""
    rejection = guard_action(state)
    if rejection is not None:
        return rejection
    s = state.find_student(name)
    if s is None:
        return ActionResult.reject(f"No active student named {name!r}")
    s.depart(DEPARTURE_EVICTED)
    state.change_reputation(-EVICT_REPUTATION_COST)
    state.log(f"Evicted {s.name}; reputation -{EVICT_REPUTATION_COST}")
    check_and_trigger_ending(state)
    return ActionResult.accept(f"{s.name} was evicted", reputation=state.reputation)
