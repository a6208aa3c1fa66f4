"""
EventEngine: stochastic weekly events and choice gating.

Every event is pushed into GameState.recent_events (most recent first, bounded).
Choice-bearing events stay pending until resolve_choice picks exactly one option;
while any is pending, every state-advancing action is rejected (see simulation.season).
Option effects are looked up by (definition id, option key), so a pending card survives
a snapshot/restore round trip.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from models import ActionResult, EventOption, GameEvent, GameState, Student, TalentAction
from models.constants import (
    BASE_SICK_PROB,
    SICK_PROB_FROM_COLD_HOT,
    SICK_WEEKS_RANGE,
    QUIT_RISK_PRESSURE,
    QUIT_PROB_BASE,
    QUIT_PROB_PER_EXTRA_PRESSURE,
    QUIT_TENDENCY_THRESHOLD,
    QUIT_REPUTATION_COST,
    NATIONAL_TEAM_WEEKS,
    NATIONAL_TEAM_REPUTATION,
    KNOWLEDGE_KEYS,
)
from models.student import DEPARTURE_QUIT
from .talents import QUIT, QUIT_CHECK, iter_talent_triggers, trigger_talents

logger = logging.getLogger(__name__)

Effect = Callable[[GameState, GameEvent], str]


@dataclass
class EventDefinition:
    id: str
    trigger: Callable[[GameState], None]
    effects: Dict[str, Effect] = field(default_factory=dict)  # option key -> effect


_DEFINITIONS: Dict[str, EventDefinition] = {}


def register_event(definition: EventDefinition) -> EventDefinition:
    _DEFINITIONS[definition.id] = definition
    return definition


def unregister_event(definition_id: str) -> None:
    _DEFINITIONS.pop(definition_id, None)


def get_event_definition(definition_id: str) -> EventDefinition | None:
    return _DEFINITIONS.get(definition_id)


def push_game_event(
    state: GameState,
    name: str,
    description: str,
    event_id: str = "",
    options: List[EventOption] | None = None,
    definition_id: str | None = None,
    payload: Dict | None = None,
) -> GameEvent | None:
    """Record an event. Returns None when an identical card already sits in the buffer."""
    event = GameEvent(
        uid=0,
        name=name,
        description=description,
        week=state.week,
        event_id=event_id,
        options=options,
        definition_id=definition_id,
        payload=dict(payload or {}),
    )
    key = event.dedupe_key()
    if any(e.dedupe_key() == key for e in state.recent_events):
        logger.debug("Duplicate event %s suppressed", key)
        return None
    event.uid = state.allocate_event_uid()
    state.push_event(event)
    state.log(f"[{name}] {description}")
    return event


def check_random_events(state: GameState) -> List[GameEvent]:
    """Run every registered trigger once against the current week. Returns the events added."""
    if state.is_ended():
        return []
    before = {e.uid for e in state.recent_events}
    for definition in list(_DEFINITIONS.values()):
        definition.trigger(state)
    for s in state.students:
        s.clamp_state()
    return [e for e in state.recent_events if e.uid not in before]


def resolve_choice(state: GameState, uid: int, option_key: str) -> ActionResult:
    """Apply the chosen option's effect exactly once and clear the pending card."""
    if state.is_ended():
        return ActionResult.reject("The season has ended")
    event = next((e for e in state.recent_events if e.uid == uid), None)
    if event is None:
        return ActionResult.reject(f"No event with id {uid}")
    if not event.is_choice:
        return ActionResult.reject(f"Event {uid} has no options")
    if event.handled:
        return ActionResult.reject(f"Event {uid} was already resolved")
    if event.option(option_key) is None:
        return ActionResult.reject(f"Unknown option {option_key!r} for event {uid}")
    definition = _DEFINITIONS.get(event.definition_id or "")
    effect = definition.effects.get(option_key) if definition else None
    if effect is None:
        return ActionResult.reject(f"Event {uid} has no effect registered for {option_key!r}")

    event.handled = True
    event.chosen = option_key
    message = effect(state, event)
    for s in state.students:
        s.clamp_state()
    state.log(f"[{event.name}] chose {event.option(option_key).label}: {message}")
    return ActionResult.accept(message, event=event.to_dict())


# ---------------------------------------------------------------------------
# Default event pool
# ---------------------------------------------------------------------------

def _sickness_trigger(state: GameState) -> None:
    prob = BASE_SICK_PROB + (SICK_PROB_FROM_COLD_HOT if state.is_extreme_weather() else 0.0)
    for s in state.active_students():
        if s.sick_weeks > 0:
            continue
        if state.rng.random() < prob:
            s.sick_weeks = state.rng.randint(*SICK_WEEKS_RANGE)
            push_game_event(state, "Illness", f"{s.name} fell ill for {s.sick_weeks} week(s)", event_id=f"sick:{s.name}")


def depart_for_pressure(state: GameState, s: Student, reason: str) -> None:
    s.depart(DEPARTURE_QUIT)
    state.change_reputation(-QUIT_REPUTATION_COST)
    trigger_talents(s, QUIT, {"state": state, "reason": reason})
    push_game_event(state, "Student quit", f"{s.name} left the team ({reason}); reputation -{QUIT_REPUTATION_COST}", event_id=f"quit:{s.name}")


def _quit_risk_trigger(state: GameState) -> None:
    for s in state.active_students():
        if s.pressure >= QUIT_RISK_PRESSURE:
            s.quit_tendency_weeks += 1
        else:
            s.quit_tendency_weeks = 0

        talent_quit = False
        for trig in iter_talent_triggers(s, QUIT_CHECK, {"state": state, "pressure": s.pressure}):
            if trig.result is not None and trig.result.action is TalentAction.QUIT:
                talent_quit = True
                break
        if talent_quit:
            depart_for_pressure(state, s, "talent")
            continue

        if s.quit_tendency_weeks >= QUIT_TENDENCY_THRESHOLD:
            prob = QUIT_PROB_BASE + QUIT_PROB_PER_EXTRA_PRESSURE * max(0.0, s.pressure - QUIT_RISK_PRESSURE)
            if state.rng.random() < prob:
                depart_for_pressure(state, s, "sustained pressure")


def _alumni_donation_trigger(state: GameState) -> None:
    if state.rng.random() >= 0.03:
        return
    amount = int(state.rng.randint(5000, 20000) * (1 + state.reputation / 100.0))
    state.add_funds(amount, "Alumni donation")
    push_game_event(state, "Alumni donation", f"A former student donated {amount}", event_id="donation")


def _utility_hike_trigger(state: GameState) -> None:
    if state.expense_multiplier_weeks > 0 or state.rng.random() >= 0.02:
        return
    state.expense_multiplier = 1.2
    state.expense_multiplier_weeks = 4
    push_game_event(state, "Utility price hike", "All expenses cost 20% more for the next 4 weeks", event_id="utility")


# --- sponsor offer ---

def _sponsor_trigger(state: GameState) -> None:
    if state.reputation < 40 or state.rng.random() >= 0.02:
        return
    amount = 20000 + 1000 * (state.reputation // 10)
    push_game_event(
        state,
        "Sponsor offer",
        f"A local company offers {amount} in exchange for publicity appearances",
        event_id="sponsor",
        options=[
            EventOption("accept", "Accept", "Budget up, students lose study time (pressure +5)"),
            EventOption("decline", "Decline", "Reputation +1"),
        ],
        definition_id="sponsor_offer",
        payload={"amount": amount},
    )


def _sponsor_accept(state: GameState, event: GameEvent) -> str:
    amount = int(event.payload.get("amount", 0))
    state.add_funds(amount, "Sponsorship")
    for s in state.active_students():
        s.pressure += 5
    return f"received {amount}"


def _sponsor_decline(state: GameState, event: GameEvent) -> str:
    state.change_reputation(1)
    return "reputation +1"


# --- parents' concern ---

def _parents_trigger(state: GameState) -> None:
    stressed = [s for s in state.active_students() if s.pressure >= 80]
    if not stressed or state.rng.random() >= 0.15:
        return
    s = stressed[0]
    push_game_event(
        state,
        "Parents' concern",
        f"{s.name}'s parents worry about the training load",
        event_id=f"parents:{s.name}",
        options=[
            EventOption("reassure", "Reassure them", "Next training adds 10 less pressure, mental -3"),
            EventOption("send_home", "Send home for a rest", "Pressure -25, knowledge -2 in every domain"),
        ],
        definition_id="parents_concern",
        payload={"student": s.name},
    )


def _parents_reassure(state: GameState, event: GameEvent) -> str:
    s = state.find_student(event.payload.get("student", ""))
    if s is None:
        return "student no longer on the team"
    s.pressure_modifier -= 10
    s.mental -= 3
    return f"{s.name} stays on the full programme"


def _parents_send_home(state: GameState, event: GameEvent) -> str:
    s = state.find_student(event.payload.get("student", ""))
    if s is None:
        return "student no longer on the team"
    s.pressure -= 25
    for key in KNOWLEDGE_KEYS:
        s.add_knowledge(key, -min(2.0, s.get_knowledge(key)))
    return f"{s.name} rested at home"


# --- friendly contest ---

FRIENDLY_CONTEST_FEE = 5000


def _friendly_trigger(state: GameState) -> None:
    if not state.active_students() or state.rng.random() >= 0.03:
        return
    push_game_event(
        state,
        "Friendly contest invitation",
        f"A neighbouring school invites the team to a friendly contest (fee {FRIENDLY_CONTEST_FEE})",
        event_id="friendly",
        options=[
            EventOption("attend", "Attend", "Thinking +1, pressure +5, reputation +2"),
            EventOption("decline", "Decline", "Nothing happens"),
        ],
        definition_id="friendly_contest",
    )


def _friendly_attend(state: GameState, event: GameEvent) -> str:
    cost = int(round(FRIENDLY_CONTEST_FEE * state.get_expense_multiplier()))
    if state.budget < cost:
        return "could not afford the trip"
    state.record_expense(cost, "Friendly contest")
    for s in state.active_students():
        s.thinking += 1
        s.pressure += 5
    state.change_reputation(2)
    return "the team attended"


def _decline(state: GameState, event: GameEvent) -> str:
    return "declined"


# --- national team (raised by simulation.competition) ---

def raise_national_team_invitation(state: GameState, names: List[str]) -> GameEvent | None:
    state.national_team_choice_pending = True
    return push_game_event(
        state,
        "National team invitation",
        f"{', '.join(names)} won NOI gold and {'is' if len(names) == 1 else 'are'} invited to the national team training",
        event_id="national_team",
        options=[
            EventOption("accept", "Accept", f"{NATIONAL_TEAM_WEEKS} weeks of national team training, reputation +{NATIONAL_TEAM_REPUTATION}"),
            EventOption("decline", "Decline", "Season continues normally"),
        ],
        definition_id="national_team_invitation",
        payload={"students": list(names)},
    )


def _national_accept(state: GameState, event: GameEvent) -> str:
    state.national_team_choice_pending = False
    state.in_national_team = True
    state.national_team_member = True
    state.national_team_weeks_remaining = NATIONAL_TEAM_WEEKS
    state.change_reputation(NATIONAL_TEAM_REPUTATION)
    return "national team training begins"


def _national_decline(state: GameState, event: GameEvent) -> str:
    state.national_team_choice_pending = False
    return "invitation declined"


def _no_trigger(state: GameState) -> None:
    return None


DEFAULT_EVENTS: List[EventDefinition] = [
    EventDefinition("sickness", _sickness_trigger),
    EventDefinition("quit_risk", _quit_risk_trigger),
    EventDefinition("alumni_donation", _alumni_donation_trigger),
    EventDefinition("utility_hike", _utility_hike_trigger),
    EventDefinition("sponsor_offer", _sponsor_trigger, {"accept": _sponsor_accept, "decline": _sponsor_decline}),
    EventDefinition("parents_concern", _parents_trigger, {"reassure": _parents_reassure, "send_home": _parents_send_home}),
    EventDefinition("friendly_contest", _friendly_trigger, {"attend": _friendly_attend, "decline": _decline}),
    EventDefinition("national_team_invitation", _no_trigger, {"accept": _national_accept, "decline": _national_decline}),
]

for _definition in DEFAULT_EVENTS:
    register_event(_definition)
