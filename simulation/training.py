"""
TrainingResolver: one week of task training for every active student.

Per student: personal comfort -> ability/difficulty boost multiplier -> knowledge gain
(library, intensity, sickness) -> thinking/coding gain (computer, pressure diminishing
returns) -> pressure delta (intensity, weather, canteen, comfort, sickness) folded
through pressure_change talents, plus the one-shot pressure modifier.

Ordinary training consumes the week. Extra training uses the same pipeline with x1.5
pressure, is not limited by the weekly action and does not advance the clock.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from models import ActionResult, GameState, Student, Task
from models.constants import (
    INTENSITY_FACTOR,
    INTENSITY_BASE_PRESSURE,
    INTENSITY_PRESSURE_MULTIPLIER,
    INTENSITY_TALENT_CHANCE,
    DIFFICULTY_PRESSURE_RATE,
    DIFFICULTY_PRESSURE_MULTIPLIER,
    DIFFICULTY_TRAINING_EFFECT,
    SICK_TRAINING_PENALTY,
    SICK_PRESSURE_FLAT,
    EXTRA_TRAINING_PRESSURE_MULTIPLIER,
    PRESSURE_DIMINISHING_CAP,
    THINKING_GAIN_RANGE,
    CODING_GAIN_RANGE,
    BOOST_PEAK,
    BOOST_FLOOR,
    BOOST_WIDTH,
    QUIT_RISK_PRESSURE,
    HIGH_PRESSURE,
)
from .events import check_random_events
from .season import check_and_trigger_ending, guard_action, run_weeks
from .talents import fold_pressure, personal_comfort, try_acquire_talent

logger = logging.getLogger(__name__)


class Intensity(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"

    @classmethod
    def parse(cls, value) -> "Intensity":
        """Accept an Intensity, its name/value, or the 1/2/3 shorthand."""
        if isinstance(value, cls):
            return value
        shorthand = {1: cls.LIGHT, 2: cls.MEDIUM, 3: cls.HEAVY}
        if isinstance(value, str) and value.strip().isdigit():
            value = int(value)
        if isinstance(value, int) and value in shorthand:
            return shorthand[value]
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown intensity: {value!r}") from None


@dataclass
class TrainingOutcome:
    name: str
    multiplier: float
    knowledge: Dict[str, int] = field(default_factory=dict)
    thinking_gain: float = 0.0
    coding_gain: float = 0.0
    pressure_delta: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "multiplier": round(self.multiplier, 3),
            "knowledge": dict(self.knowledge),
            "thinking_gain": round(self.thinking_gain, 3),
            "coding_gain": round(self.coding_gain, 3),
            "pressure_delta": round(self.pressure_delta, 2),
        }


@dataclass(frozen=True)
class PressureEstimate:
    has_quit_risk: bool
    has_high_pressure: bool

    def to_dict(self) -> Dict:
        return {"has_quit_risk": self.has_quit_risk, "has_high_pressure": self.has_high_pressure}


def calculate_boost_multiplier(ability: float, difficulty: float) -> float:
    """Bell curve over (difficulty - ability): best near a match, falling off either way."""
    gap = (difficulty - ability) / BOOST_WIDTH
    return BOOST_FLOOR + (BOOST_PEAK - BOOST_FLOOR) * math.exp(-gap * gap)


def raw_training_pressure(state: GameState, student: Student, task: Task, intensity: Intensity, comfort: float) -> float:
    """Pressure delta before talents and the one-shot modifier."""
    ability = student.ability_avg()
    base = INTENSITY_BASE_PRESSURE[intensity.value] + max(0.0, (task.difficulty - ability) * DIFFICULTY_PRESSURE_RATE)
    base *= INTENSITY_PRESSURE_MULTIPLIER[intensity.value]
    comfort_factor = 1.0 + max(0.0, (50 - comfort) / 100.0)
    pressure = base * state.get_weather_factor() * state.facilities.canteen_pressure_reduction() * comfort_factor
    if student.is_sick():
        pressure += SICK_PRESSURE_FLAT
    return pressure * DIFFICULTY_PRESSURE_MULTIPLIER.get(state.difficulty, 1.0)


def train_student(
    state: GameState,
    student: Student,
    task: Task,
    intensity: Intensity,
    extra: bool = False,
) -> TrainingOutcome:
    """Apply one training resolution to one student. Inactive students are untouched."""
    if not student.active:
        return TrainingOutcome(name=student.name, multiplier=0.0)

    comfort = personal_comfort(state, student)
    student.comfort = comfort
    student.comfort_modifier = 0.0

    sick_penalty = SICK_TRAINING_PENALTY if student.is_sick() else 1.0
    ability = student.ability_avg()
    multiplier = calculate_boost_multiplier(ability, task.difficulty)
    intensity_factor = INTENSITY_FACTOR[intensity.value]
    outcome = TrainingOutcome(name=student.name, multiplier=multiplier)

    library = state.facilities.library_multiplier()
    for boost in task.boosts:
        gain = math.floor((boost.amount or 0) * library * intensity_factor * sick_penalty)
        student.add_knowledge(boost.domain, gain)
        outcome.knowledge[boost.domain] = outcome.knowledge.get(boost.domain, 0) + gain

    ability_base = multiplier * intensity_factor * (1 - min(PRESSURE_DIMINISHING_CAP, student.pressure / 200.0))
    ability_base *= state.facilities.computer_multiplier() * DIFFICULTY_TRAINING_EFFECT.get(state.difficulty, 1.0)
    outcome.thinking_gain = state.rng.uniform(*THINKING_GAIN_RANGE) * ability_base
    outcome.coding_gain = state.rng.uniform(*CODING_GAIN_RANGE) * ability_base
    student.thinking += outcome.thinking_gain
    student.coding += outcome.coding_gain

    pressure = raw_training_pressure(state, student, task, intensity, comfort)
    if extra:
        pressure *= EXTRA_TRAINING_PRESSURE_MULTIPLIER
    ctx = {
        "state": state,
        "source": "extra_training" if extra else "task_training",
        "task": task,
        "intensity": intensity.value,
    }
    delta = fold_pressure(student, pressure, ctx)
    if student.pressure_modifier:
        delta += student.pressure_modifier
        student.pressure_modifier = 0.0
    outcome.pressure_delta = delta
    student.pressure += delta
    student.clamp_state()
    return outcome


def estimate_training_pressure(state: GameState, task: Task, intensity) -> PressureEstimate:
    """
    Preview the post-training pressure of every active student without touching state.
    Talent resolvers draw from a copy of the season RNG.
    """
    intensity = Intensity.parse(intensity)
    preview_rng = random.Random()
    preview_rng.setstate(state.rng.getstate())
    quit_risk = False
    high = False
    for s in state.active_students():
        comfort = personal_comfort(state, s)
        pressure = raw_training_pressure(state, s, task, intensity, comfort)
        ctx = {"state": state, "rng": preview_rng, "source": "task_training", "task": task,
               "intensity": intensity.value, "preview": True}
        predicted = s.pressure + fold_pressure(s, pressure, ctx)
        if predicted >= QUIT_RISK_PRESSURE:
            quit_risk = True
        elif predicted >= HIGH_PRESSURE:
            high = True
    return PressureEstimate(has_quit_risk=quit_risk, has_high_pressure=high)


def find_weekly_task(state: GameState, task_name: str) -> Task | None:
    for task in state.weekly_tasks:
        if task.name == task_name:
            return task
    return None


def _check_training_request(state: GameState, task_name: str, intensity) -> Tuple[ActionResult | None, Task | None, Intensity | None]:
    rejection = guard_action(state)
    if rejection is not None:
        return rejection, None, None
    try:
        level = Intensity.parse(intensity)
    except ValueError as exc:
        return ActionResult.reject(str(exc)), None, None
    task = find_weekly_task(state, task_name)
    if task is None:
        return ActionResult.reject(f"{task_name!r} is not on this week's task list"), None, None
    if not state.active_students():
        return ActionResult.reject("No active students to train"), None, None
    return None, task, level


def _train_all(state: GameState, task: Task, level: Intensity, extra: bool) -> List[TrainingOutcome]:
    label = "Extra training" if extra else "Training"
    state.log(f"{label}: {task.name} (difficulty {task.difficulty}, {level.value})")
    outcomes = [train_student(state, s, task, level, extra=extra) for s in state.active_students()]
    for s in state.active_students():
        try_acquire_talent(state, s, INTENSITY_TALENT_CHANCE[level.value])
    for o in outcomes:
        gains = ", ".join(f"{d}+{g}" for d, g in o.knowledge.items())
        state.log(f"  {o.name}: efficiency {round(o.multiplier * 100)}% [{gains}] pressure {o.pressure_delta:+.1f}")
    return outcomes


def train_students_with_task(state: GameState, task_name: str, intensity) -> ActionResult:
    """Train the whole active roster on one of this week's tasks, then advance one week."""
    rejection, task, level = _check_training_request(state, task_name, intensity)
    if rejection is not None:
        return rejection
    outcomes = _train_all(state, task, level, extra=False)
    run_weeks(state, 1)
    return ActionResult.accept(f"Trained on {task.name}", outcomes=[o.to_dict() for o in outcomes], week=state.week)


def extra_train_students_with_task(state: GameState, task_name: str, intensity) -> ActionResult:
    """Extra session on top of the week's action: x1.5 pressure, no week advance."""
    rejection, task, level = _check_training_request(state, task_name, intensity)
    if rejection is not None:
        return rejection
    outcomes = _train_all(state, task, level, extra=True)
    check_random_events(state)
    check_and_trigger_ending(state)
    return ActionResult.accept(f"Extra training on {task.name}", outcomes=[o.to_dict() for o in outcomes], week=state.week)
