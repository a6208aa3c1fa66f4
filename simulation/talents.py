"""
TalentDispatch: process-wide registry of named talents.

A student only holds talent names (in acquisition order). When the engine reaches a
named trigger ("pressure_change", "outing_cost_calculate", "week_end", ...) it asks the
registry for every resolver the student's talents attach to that trigger and runs them
in acquisition order. Callers that fold a running value write it back into
context["amount"] between resolvers, so a later talent sees what an earlier one did.

Each resolver call is isolated: an exception is logged and the remaining resolvers run.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List

from models import Student, Talent, TalentAction, TalentResult, TalentTrigger
from models.constants import TALENT_ACQUIRE_BASE

logger = logging.getLogger(__name__)

# Trigger names
PRESSURE_CHANGE = "pressure_change"
COMFORT_CALCULATE = "comfort_calculate"
ILLNESS_TICK = "illness_tick"
PRESSURE_RECOVERY = "pressure_recovery"
OUTING_COST_CALCULATE = "outing_cost_calculate"
OVERSEAS_COST_CALCULATE = "overseas_cost_calculate"
ENTERTAINMENT_FINISHED = "entertainment_finished"
VACATION_END = "vacation_end"
QUIT_CHECK = "quit_check"
QUIT = "quit"
WEEK_END = "week_end"
CONTEST_FINISHED = "contest_finished"

_REGISTRY: Dict[str, Talent] = {}


def register_talent(talent: Talent) -> Talent:
    _REGISTRY[talent.name] = talent
    return talent


def unregister_talent(name: str) -> None:
    _REGISTRY.pop(name, None)


def get_talent(name: str) -> Talent | None:
    return _REGISTRY.get(name)


def all_talents(include_hidden: bool = False) -> List[Talent]:
    return [t for t in _REGISTRY.values() if include_hidden or not t.hidden]


def iter_talent_triggers(student: Student, event_name: str, context: Dict | None = None) -> Iterator[TalentTrigger]:
    """
    Lazily run each of the student's resolvers for event_name in acquisition order.
    Talents without a resolver for the trigger are skipped; a failing resolver yields a None result.
    """
    ctx = context if context is not None else {}
    if "rng" not in ctx and ctx.get("state") is not None:
        ctx["rng"] = ctx["state"].rng
    for talent_name in list(student.talents):
        talent = _REGISTRY.get(talent_name)
        if talent is None:
            continue
        handler = talent.handlers.get(event_name)
        if handler is None:
            continue
        try:
            result = handler(student, ctx)
        except Exception:
            logger.exception("Talent %s failed on %s for %s", talent_name, event_name, student.name)
            result = None
        if result is not None and not isinstance(result, TalentResult):
            logger.error("Talent %s returned %r on %s; ignored", talent_name, result, event_name)
            result = None
        yield TalentTrigger(talent_name, result)


def trigger_talents(student: Student, event_name: str, context: Dict | None = None) -> List[TalentTrigger]:
    return list(iter_talent_triggers(student, event_name, context))


def fold_pressure(student: Student, amount: float, context: Dict) -> float:
    """
    Run pressure_change resolvers over a pressure delta. Cancel/halve/double apply to
    the running value, in acquisition order.
    """
    ctx = dict(context)
    ctx["amount"] = amount
    for trig in iter_talent_triggers(student, PRESSURE_CHANGE, ctx):
        out = trig.result
        if out is None:
            continue
        if out.action is TalentAction.CANCEL_PRESSURE:
            amount = 0.0
        elif out.action is TalentAction.HALVE_PRESSURE:
            amount *= 0.5
        elif out.action is TalentAction.DOUBLE_PRESSURE:
            amount *= 2.0
        elif out.action is TalentAction.MESSAGE:
            pass
        else:
            logger.warning("Talent %s returned %s on pressure_change; ignored", trig.talent_name, out.action.value)
        ctx["amount"] = amount
        if out.message and not ctx.get("preview"):
            state = ctx.get("state")
            if state is not None:
                state.log(f"{student.name}: {out.message}")
    return amount


def personal_comfort(state, student: Student, comfort: float | None = None) -> float:
    """Global comfort adjusted by comfort_calculate talents and the one-shot modifier, clamped at each step."""
    base = state.get_comfort() if comfort is None else comfort
    value = base
    ctx = {"state": state, "comfort": base, "base_comfort": state.base_comfort, "canteen": state.facilities.canteen}
    for trig in iter_talent_triggers(student, COMFORT_CALCULATE, ctx):
        out = trig.result
        if out is not None and out.action is TalentAction.ADJUST_COMFORT and out.amount is not None:
            value = max(0.0, min(100.0, value + out.amount))
    if student.comfort_modifier:
        value = max(0.0, min(100.0, value + student.comfort_modifier))
    return value


def try_acquire_talent(state, student: Student, chance: float, include_hidden: bool = False) -> str | None:
    """Roll for a new talent. chance is the intensity-scaled weight, multiplied by the base rate."""
    if not student.active:
        return None
    if state.rng.random() >= chance * TALENT_ACQUIRE_BASE:
        return None
    return grant_random_talent(state, student, include_hidden=include_hidden)


def grant_random_talent(state, student: Student, include_hidden: bool = False, hidden_only: bool = False) -> str | None:
    pool = sorted(
        t.name for t in _REGISTRY.values()
        if t.name not in student.talents and (t.hidden if hidden_only else (include_hidden or not t.hidden))
    )
    if not pool:
        return None
    name = state.rng.choice(pool)
    student.add_talent(name)
    state.log(f"{student.name} acquired talent {name}")
    return name


# ---------------------------------------------------------------------------
# Default talents
# ---------------------------------------------------------------------------

def _weather_sensitive_comfort(student: Student, ctx: Dict) -> TalentResult:
    # Deviation from baseline counts twice
    return TalentResult(TalentAction.ADJUST_COMFORT, amount=ctx["comfort"] - ctx["base_comfort"])


def _foodie_comfort(student: Student, ctx: Dict) -> TalentResult | None:
    bonus = 3 * (ctx.get("canteen", 1) - 1)
    if bonus <= 0:
        return None
    return TalentResult(TalentAction.ADJUST_COMFORT, amount=bonus)


def _self_healing(student: Student, ctx: Dict) -> TalentResult | None:
    if student.sick_weeks > 0 and ctx["rng"].random() < 0.3:
        return TalentResult(TalentAction.SHORTEN_ILLNESS, amount=1, message="recovered faster")
    return None


def _optimist_recovery(student: Student, ctx: Dict) -> TalentResult:
    return TalentResult(TalentAction.RECOVERY_BONUS, amount=3)


def _slacker_pressure(student: Student, ctx: Dict) -> TalentResult | None:
    if ctx.get("amount", 0) > 0 and ctx["rng"].random() < 0.2:
        return TalentResult(TalentAction.CANCEL_PRESSURE, message="slacked off, no pressure gained")
    return None


def _steady_pressure(student: Student, ctx: Dict) -> TalentResult | None:
    if ctx.get("amount", 0) > 30:
        return TalentResult(TalentAction.HALVE_PRESSURE, message="stayed calm, pressure halved")
    return None


def _perfectionist_pressure(student: Student, ctx: Dict) -> TalentResult | None:
    if ctx.get("intensity") == "heavy":
        return TalentResult(TalentAction.DOUBLE_PRESSURE, message="perfectionism doubled the pressure")
    return None


def _networker_outing(student: Student, ctx: Dict) -> TalentResult:
    return TalentResult(TalentAction.REDUCE_OUTING_COST, amount=5000)


def _networker_overseas(student: Student, ctx: Dict) -> TalentResult:
    return TalentResult(TalentAction.REDUCE_OVERSEAS_COST, amount=8000)


def _polyglot_overseas(student: Student, ctx: Dict) -> TalentResult:
    return TalentResult(TalentAction.REDUCE_OVERSEAS_COST, amount=10000)


def _gamer_entertainment(student: Student, ctx: Dict) -> TalentResult | None:
    if ctx.get("activity") == "gaming" and ctx["rng"].random() < 0.1:
        return TalentResult(TalentAction.QUIT_FOR_ESPORTS, message="left the team to go pro in esports")
    return None


def _dreamer(student: Student, ctx: Dict) -> TalentResult:
    return TalentResult(TalentAction.VACATION_HALF_MINUS5, message="kept thinking about problems, rest only half as effective")


def _free_spirit_quit(student: Student, ctx: Dict) -> TalentResult | None:
    if student.pressure >= 80 and ctx["rng"].random() < 0.5:
        return TalentResult(TalentAction.QUIT, message="walked away from the team")
    return None


def _night_owl_week_end(student: Student, ctx: Dict) -> None:
    # Late nights: small thinking gain, mental cost
    student.thinking += 0.3
    student.mental = max(0.0, student.mental - 1)
    return None


def _iron_will_week_end(student: Student, ctx: Dict) -> TalentResult | None:
    if student.quit_tendency_weeks > 0:
        student.quit_tendency_weeks = 0
        return TalentResult(TalentAction.MESSAGE, message="shrugged off the urge to quit")
    return None


def _clutch_contest(student: Student, ctx: Dict) -> TalentResult | None:
    if ctx.get("passed"):
        student.mental = min(100.0, student.mental + 5)
        return TalentResult(TalentAction.MESSAGE, message="gained confidence from the result")
    return None


DEFAULT_TALENTS: List[Talent] = [
    Talent("Weather Sensitive", "Feels every change in the weather twice as strongly.", "#5dade2",
           handlers={COMFORT_CALCULATE: _weather_sensitive_comfort}),
    Talent("Foodie", "A better canteen makes a much happier student.", "#f5b041",
           handlers={COMFORT_CALCULATE: _foodie_comfort}),
    Talent("Self-Healing", "Sometimes shakes off an illness a week early.", "#58d68d",
           handlers={ILLNESS_TICK: _self_healing}),
    Talent("Optimist", "Recovers a little extra pressure every week.", "#f7dc6f",
           handlers={PRESSURE_RECOVERY: _optimist_recovery}),
    Talent("Slacker", "Occasionally ignores training pressure entirely.", "#aab7b8",
           handlers={PRESSURE_CHANGE: _slacker_pressure}),
    Talent("Steady", "Large pressure spikes are halved.", "#48c9b0",
           handlers={PRESSURE_CHANGE: _steady_pressure}),
    Talent("Perfectionist", "Heavy training pressure is doubled.", "#ec7063",
           handlers={PRESSURE_CHANGE: _perfectionist_pressure}),
    Talent("Networker", "Knows people; outings and overseas trips cost less.", "#af7ac5",
           handlers={OUTING_COST_CALCULATE: _networker_outing, OVERSEAS_COST_CALCULATE: _networker_overseas}),
    Talent("Gamer", "Might leave for esports after a gaming session.", "#e74c3c",
           handlers={ENTERTAINMENT_FINISHED: _gamer_entertainment}),
    Talent("Dreamer", "Keeps thinking about problems on holiday; rest is half as effective.", "#85929e",
           handlers={ENTERTAINMENT_FINISHED: _dreamer, VACATION_END: _dreamer}),
    Talent("Free Spirit", "Under heavy pressure may simply walk away.", "#dc7633",
           handlers={QUIT_CHECK: _free_spirit_quit}),
    Talent("Night Owl", "Studies late: a bit more thinking, a bit less mental.", "#34495e",
           handlers={WEEK_END: _night_owl_week_end}),
    Talent("Clutch", "Passing a contest boosts mental.", "#f1c40f",
           handlers={CONTEST_FINISHED: _clutch_contest}),
    Talent("Polyglot", "Overseas trips are much cheaper.", "#2e86c1", hidden=True,
           handlers={OVERSEAS_COST_CALCULATE: _polyglot_overseas}),
    Talent("Iron Will", "Quit tendency never builds up.", "#1abc9c", hidden=True,
           handlers={WEEK_END: _iron_will_week_end}),
]

for _talent in DEFAULT_TALENTS:
    register_talent(_talent)
