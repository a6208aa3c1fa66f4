"""
SeasonClock: the weekly tick and the season state machine (ACTIVE -> ENDING -> ENDED).

Every state-advancing entry point calls guard_action first. While the season is over,
a choice-bearing event is pending, or this week's contest has not been held, the
action is rejected and nothing changes.
"""
from __future__ import annotations

import logging
import math
from typing import Dict

from models import ActionResult, GameState, SeasonPhase, SeasonSummary, TalentAction
from models.constants import RECOVERY_RATE
from models.game_state import (
    ENDING_BUDGET,
    ENDING_NO_STUDENTS,
    ENDING_SEASON_COMPLETE,
    ENDING_RESIGNED,
)
from generation.tasks import select_weekly_tasks
from .competition import (
    calculate_final_ending,
    calculate_performance_score,
    check_forced_retirement,
    contest_for_week,
    has_unresolved_contest,
    next_contest_week,
    student_contributions,
    tick_national_team,
)
from .events import check_random_events, resolve_choice
from .talents import ILLNESS_TICK, PRESSURE_RECOVERY, WEEK_END, iter_talent_triggers, personal_comfort, trigger_talents

logger = logging.getLogger(__name__)


def guard_action(state: GameState) -> ActionResult | None:
    """Return a rejection if the season may not advance right now, else None."""
    rejection = None
    if state.is_ended():
        rejection = ActionResult.reject(f"The season has ended ({state.ending_reason})")
    elif state.has_pending_choice():
        rejection = ActionResult.reject("Resolve the pending event first", pending=[e.uid for e in state.pending_events()])
    elif has_unresolved_contest(state):
        comp = contest_for_week(state.week)
        rejection = ActionResult.reject(f"{comp['name']} must be held this week first")
    if rejection is not None:
        logger.info("Action rejected in week %d: %s", state.week, rejection.message)
    return rejection


# ---------------------------------------------------------------------------
# Weekly tick
# ---------------------------------------------------------------------------

def _weekly_student_update(state: GameState) -> None:
    comfort = state.get_comfort()
    for s in state.active_students():
        if s.sick_weeks > 0:
            s.sick_weeks -= 1
            for trig in iter_talent_triggers(s, ILLNESS_TICK, {"state": state}):
                out = trig.result
                if out is not None and out.action is TalentAction.SHORTEN_ILLNESS and s.sick_weeks > 0:
                    s.sick_weeks = max(0, s.sick_weeks - int(out.amount or 1))
                    state.log(f"{s.name}: {out.message or 'recovered faster'}")

        s.comfort = personal_comfort(state, s, comfort)
        s.comfort_modifier = 0.0
        if s.pressure_modifier:
            s.pressure += s.pressure_modifier
            s.pressure_modifier = 0.0
        recovery = RECOVERY_RATE * (s.comfort / 100.0)
        for trig in iter_talent_triggers(s, PRESSURE_RECOVERY, {"state": state, "amount": recovery}):
            out = trig.result
            if out is not None and out.action is TalentAction.RECOVERY_BONUS:
                recovery += out.amount or 0
        s.pressure -= recovery
        s.clamp_state()


def _advance_one_week(state: GameState) -> None:
    _weekly_student_update(state)

    weekly = int(round(state.get_weekly_cost() * state.get_expense_multiplier()))
    state.record_expense(weekly, "Weekly costs")
    if state.expense_multiplier_weeks > 0:
        state.expense_multiplier_weeks -= 1
        if state.expense_multiplier_weeks == 0:
            state.expense_multiplier = 1.0

    state.week += 1
    state.update_weather()
    state.weekly_tasks = select_weekly_tasks(state.rng, state.students)
    tick_national_team(state)


def run_weeks(state: GameState, weeks: int) -> int:
    """
    Advance up to `weeks` weeks without the choice guard (callers already checked it).
    Stops early on a contest week or when the season ends. Returns weeks elapsed.
    """
    elapsed = 0
    for _ in range(max(0, weeks)):
        if state.is_ended():
            break
        _advance_one_week(state)
        elapsed += 1

        check_forced_retirement(state)
        for s in state.active_students():
            trigger_talents(s, WEEK_END, {"state": state})
            s.clamp_state()
        check_random_events(state)
        if check_and_trigger_ending(state):
            break
        if contest_for_week(state.week) is not None or state.has_pending_choice():
            break
    return elapsed


def advance_weeks(state: GameState, weeks: int = 1) -> ActionResult:
    """Public tick. Splits the advance so it lands exactly on the next contest week."""
    if weeks < 1:
        return ActionResult.reject("Number of weeks must be at least 1")
    rejection = guard_action(state)
    if rejection is not None:
        return rejection
    target = weeks
    contest_week = next_contest_week(state.week)
    if contest_week is not None and contest_week - state.week < weeks:
        target = contest_week - state.week
    elapsed = run_weeks(state, target)
    msg = f"Advanced {elapsed} week(s)"
    if elapsed < weeks and contest_for_week(state.week) is not None and not state.is_ended():
        msg += f"; stopped for {contest_for_week(state.week)['name']}"
    return ActionResult.accept(msg, weeks=elapsed, requested=weeks, week=state.week)


def choose_event_option(state: GameState, uid: int, option_key: str) -> ActionResult:
    result = resolve_choice(state, uid, option_key)
    if result.ok:
        check_and_trigger_ending(state)
    return result


# ---------------------------------------------------------------------------
# Terminal conditions
# ---------------------------------------------------------------------------

def evaluate_ending(state: GameState) -> str | None:
    if state.budget <= 0:
        return ENDING_BUDGET
    if not state.active_students():
        return ENDING_NO_STUDENTS
    if state.season_over() and not state.national_team_active():
        return ENDING_SEASON_COMPLETE
    return None


def check_and_trigger_ending(state: GameState) -> bool:
    if state.is_ended():
        return True
    reason = evaluate_ending(state)
    if reason is None:
        return False
    end_season(state, reason)
    return True


def end_season(state: GameState, reason: str) -> SeasonSummary:
    """ACTIVE -> ENDING -> ENDED. Freezes a summary; no further ticks are accepted."""
    state.phase = SeasonPhase.ENDING
    state.ending_reason = reason
    state.season_end_triggered = True
    if reason == ENDING_NO_STUDENTS:
        state.all_quit_triggered = True
    contributions = student_contributions(state)
    students = tuple(
        dict(s.to_dict(), contribution=round(contributions.get(s.name, 0.0), 3))
        for s in state.students
    )
    state.summary = SeasonSummary(
        ending_reason=reason,
        final_ending=calculate_final_ending(state),
        week=state.week,
        budget=state.budget,
        reputation=state.reputation,
        performance_score=round(calculate_performance_score(state), 3),
        total_expenses=state.total_expenses,
        national_team_member=state.national_team_member,
        students=students,
        career_competitions=tuple(r.to_dict() for r in state.career_competitions),
    )
    state.phase = SeasonPhase.ENDED
    state.log(f"Season over: {reason} ({state.summary.final_ending})")
    logger.info("Season ended in week %d: %s", state.week, reason)
    return state.summary


def resign(state: GameState) -> ActionResult:
    if state.is_ended():
        return ActionResult.reject("The season has already ended")
    summary = end_season(state, ENDING_RESIGNED)
    return ActionResult.accept("You resigned", summary=summary.to_dict())


def season_summary(state: GameState) -> Dict | None:
    return state.summary.to_dict() if state.summary is not None else None


def weeks_for_days(days: int) -> int:
    return max(1, math.ceil(days / 7))