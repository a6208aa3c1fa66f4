"""
Snapshot / restore of a whole season.

snapshot() produces plain JSON-safe data: talents as ordered name lists, sets as sorted
lists, the RNG state as nested lists. restore() refuses to build a playable state when
the roster or the week is missing or malformed; budget and reputation fall back to defaults.
"""
from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict

from models import (
    ContestRecord,
    Facilities,
    GameEvent,
    GameState,
    SeasonPhase,
    SeasonSummary,
    SnapshotError,
    Student,
    Task,
)
from models.constants import PROVINCES, STARTING_REPUTATION

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _rng_state_to_list(rng: random.Random) -> list:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def _rng_from_list(data: list) -> random.Random:
    rng = random.Random()
    version, internal, gauss_next = data
    rng.setstate((version, tuple(internal), gauss_next))
    return rng


def _summary_to_dict(summary: SeasonSummary | None) -> Dict | None:
    return summary.to_dict() if summary is not None else None


def _summary_from_dict(data: Dict | None) -> SeasonSummary | None:
    if not data:
        return None
    return SeasonSummary(
        ending_reason=data["ending_reason"],
        final_ending=data["final_ending"],
        week=int(data["week"]),
        budget=int(data["budget"]),
        reputation=int(data["reputation"]),
        performance_score=float(data["performance_score"]),
        total_expenses=int(data.get("total_expenses", 0)),
        national_team_member=bool(data.get("national_team_member", False)),
        students=tuple(data.get("students") or ()),
        career_competitions=tuple(data.get("career_competitions") or ()),
    )


def snapshot(state: GameState) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "week": state.week,
        "budget": state.budget,
        "reputation": state.reputation,
        "difficulty": state.difficulty,
        "province_id": state.province_id,
        "province_name": state.province_name,
        "province_type": state.province_type,
        "is_north": state.is_north,
        "base_comfort": state.base_comfort,
        "mean_temperature": state.mean_temperature,
        "temperature": state.temperature,
        "weather": state.weather,
        "facilities": state.facilities.to_dict(),
        "students": [s.to_dict() for s in state.students],
        "weekly_tasks": [t.to_dict() for t in state.weekly_tasks],
        "completed_competitions": sorted(state.completed_competitions),
        "qualification": [
            {contest: sorted(names) for contest, names in sorted(half.items())}
            for half in state.qualification
        ],
        "career_competitions": [r.to_dict() for r in state.career_competitions],
        "season_end_triggered": state.season_end_triggered,
        "all_quit_triggered": state.all_quit_triggered,
        "in_national_team": state.in_national_team,
        "national_team_choice_pending": state.national_team_choice_pending,
        "national_team_member": state.national_team_member,
        "national_team_weeks_remaining": state.national_team_weeks_remaining,
        "phase": state.phase.value,
        "ending_reason": state.ending_reason,
        "recent_events": [e.to_dict() for e in state.recent_events],
        "next_event_uid": state.next_event_uid,
        "log_lines": list(state.log_lines),
        "expense_multiplier": state.expense_multiplier,
        "expense_multiplier_weeks": state.expense_multiplier_weeks,
        "total_expenses": state.total_expenses,
        "seed": state.seed,
        "rng_state": _rng_state_to_list(state.rng),
        "summary": _summary_to_dict(state.summary),
    }


def _require_week(data: Dict) -> int:
    week = data.get("week")
    if isinstance(week, bool) or not isinstance(week, int) or week < 1:
        raise SnapshotError(f"snapshot has missing or invalid week: {week!r}")
    return week


def _require_students(data: Dict) -> list:
    raw = data.get("students")
    if not isinstance(raw, list):
        raise SnapshotError("snapshot has no student roster")
    students = []
    for item in raw:
        if not isinstance(item, dict):
            raise SnapshotError(f"invalid student record: {item!r}")
        try:
            students.append(Student.from_dict(item))
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"invalid student record {item.get('name')!r}: {exc}") from exc
    active = [s.name for s in students if s.active]
    if len(set(active)) != len(active):
        raise SnapshotError("duplicate active student names in snapshot")
    return students


def restore(data: Dict[str, Any]) -> GameState:
    if not isinstance(data, dict):
        raise SnapshotError("snapshot must be a mapping")
    week = _require_week(data)
    students = _require_students(data)

    province_id = int(data.get("province_id") or 0)
    default_budget = PROVINCES.get(province_id, {}).get("base_budget", 0)
    budget = data.get("budget")
    if not isinstance(budget, int) or isinstance(budget, bool):
        logger.warning("Snapshot budget missing or invalid (%r); using default %d", budget, default_budget)
        budget = default_budget
    reputation = data.get("reputation")
    if not isinstance(reputation, int) or isinstance(reputation, bool):
        logger.warning("Snapshot reputation missing or invalid (%r); using default", reputation)
        reputation = STARTING_REPUTATION

    try:
        phase = SeasonPhase(data.get("phase", SeasonPhase.ACTIVE.value))
        facilities = Facilities.from_dict(data.get("facilities") or {})
        qualification = [
            {contest: set(names) for contest, names in (half or {}).items()}
            for half in (data.get("qualification") or [{}, {}])
        ]
        while len(qualification) < 2:
            qualification.append({})
        state = GameState(
            week=week,
            budget=budget,
            reputation=reputation,
            difficulty=int(data.get("difficulty", 2)),
            province_id=province_id,
            province_name=data.get("province_name", ""),
            province_type=data.get("province_type", "normal"),
            is_north=bool(data.get("is_north", False)),
            base_comfort=float(data.get("base_comfort", 50.0)),
            mean_temperature=float(data.get("mean_temperature", 16.0)),
            temperature=float(data.get("temperature", 20.0)),
            weather=data.get("weather", "sunny"),
            facilities=facilities,
            students=students,
            weekly_tasks=[Task.from_dict(t) for t in data.get("weekly_tasks") or []],
            completed_competitions=set(data.get("completed_competitions") or []),
            qualification=qualification[:2],
            career_competitions=[ContestRecord.from_dict(r) for r in data.get("career_competitions") or []],
            season_end_triggered=bool(data.get("season_end_triggered", False)),
            all_quit_triggered=bool(data.get("all_quit_triggered", False)),
            in_national_team=bool(data.get("in_national_team", False)),
            national_team_choice_pending=bool(data.get("national_team_choice_pending", False)),
            national_team_member=bool(data.get("national_team_member", False)),
            national_team_weeks_remaining=int(data.get("national_team_weeks_remaining", 0)),
            phase=phase,
            ending_reason=data.get("ending_reason"),
            recent_events=[GameEvent.from_dict(e) for e in data.get("recent_events") or []],
            next_event_uid=int(data.get("next_event_uid", 1)),
            log_lines=list(data.get("log_lines") or []),
            expense_multiplier=float(data.get("expense_multiplier", 1.0)),
            expense_multiplier_weeks=int(data.get("expense_multiplier_weeks", 0)),
            total_expenses=int(data.get("total_expenses", 0)),
            seed=data.get("seed"),
            summary=_summary_from_dict(data.get("summary")),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"corrupt snapshot: {exc}") from exc

    rng_state = data.get("rng_state")
    if rng_state is not None:
        try:
            state.rng = _rng_from_list(rng_state)
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"invalid RNG state: {exc}") from exc
    elif state.seed is not None:
        state.rng = random.Random(state.seed)
    if state.next_event_uid <= max((e.uid for e in state.recent_events), default=0):
        state.next_event_uid = max(e.uid for e in state.recent_events) + 1
    return state


def dumps(state: GameState) -> str:
    return json.dumps(snapshot(state), sort_keys=True)


def loads(payload: str) -> GameState:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"snapshot is not valid JSON: {exc}") from exc
    return restore(data)
