"""
GameState: the aggregate root of one season.
Owns the roster, economy, weather, facilities, weekly task slate, contest bookkeeping
and the single seedable RNG. Engine modules receive it explicitly; nothing reads it ambiently.
"""
import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set, Tuple

from .constants import (
    SEASON_WEEKS,
    WEEKS_PER_HALF,
    SEASON_START_CALENDAR_WEEK,
    STARTING_REPUTATION,
    WEEKLY_BASE_COST,
    WEEKLY_COST_PER_STUDENT,
    SEASONAL_TEMP_AMPLITUDE,
    EXTREME_COLD_THRESHOLD,
    EXTREME_HOT_THRESHOLD,
    COMFORT_IDEAL_TEMP,
    COMFORT_TEMP_PENALTY,
    WEATHER_COMFORT_DELTA,
    EXTREME_WEATHER_PRESSURE,
    WEATHER_SUNNY,
    WEATHER_CLOUDY,
    WEATHER_RAIN,
    WEATHER_SNOW,
    RECENT_EVENTS_CAPACITY,
    LOG_CAPACITY,
    BASE_COMFORT_SOUTH,
    PROVINCE_NORMAL,
)
from .contest_result import ContestRecord
from .event import GameEvent
from .facilities import Facilities
from .student import Student
from .task import Task

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a serialized season cannot be restored into a playable state."""


class SeasonPhase(str, Enum):
    ACTIVE = "active"
    ENDING = "ending"
    ENDED = "ended"


ENDING_BUDGET = "budget exhausted"
ENDING_NO_STUDENTS = "no students"
ENDING_SEASON_COMPLETE = "season complete"
ENDING_RESIGNED = "resigned"


@dataclass(frozen=True)
class SeasonSummary:
    """Immutable end-of-season view handed to external summarizers."""

    ending_reason: str
    final_ending: str
    week: int
    budget: int
    reputation: int
    performance_score: float
    total_expenses: int
    national_team_member: bool
    students: Tuple[Dict, ...]
    career_competitions: Tuple[Dict, ...]

    def to_dict(self) -> Dict:
        return {
            "ending_reason": self.ending_reason,
            "final_ending": self.final_ending,
            "week": self.week,
            "budget": self.budget,
            "reputation": self.reputation,
            "performance_score": self.performance_score,
            "total_expenses": self.total_expenses,
            "national_team_member": self.national_team_member,
            "students": [dict(s) for s in self.students],
            "career_competitions": [dict(c) for c in self.career_competitions],
        }


def _empty_qualification() -> List[Dict[str, Set[str]]]:
    return [{}, {}]


@dataclass
class GameState:
    week: int = 1
    budget: int = 0
    reputation: int = STARTING_REPUTATION
    difficulty: int = 2
    province_id: int = 0
    province_name: str = ""
    province_type: str = PROVINCE_NORMAL
    is_north: bool = False
    base_comfort: float = BASE_COMFORT_SOUTH
    mean_temperature: float = 16.0
    temperature: float = 20.0
    weather: str = WEATHER_SUNNY
    facilities: Facilities = field(default_factory=Facilities)
    students: List[Student] = field(default_factory=list)  # recruitment order
    weekly_tasks: List[Task] = field(default_factory=list)
    completed_competitions: Set[str] = field(default_factory=set)  # "half::name::week"
    qualification: List[Dict[str, Set[str]]] = field(default_factory=_empty_qualification)  # per half
    career_competitions: List[ContestRecord] = field(default_factory=list)
    season_end_triggered: bool = False
    all_quit_triggered: bool = False
    in_national_team: bool = False
    national_team_choice_pending: bool = False
    national_team_member: bool = False
    national_team_weeks_remaining: int = 0
    phase: SeasonPhase = SeasonPhase.ACTIVE
    ending_reason: str | None = None
    recent_events: List[GameEvent] = field(default_factory=list)  # most recent first
    next_event_uid: int = 1
    log_lines: List[str] = field(default_factory=list)
    expense_multiplier: float = 1.0
    expense_multiplier_weeks: int = 0
    total_expenses: int = 0
    seed: int | None = None
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)
    summary: SeasonSummary | None = None

    def __post_init__(self) -> None:
        if self.week < 1:
            raise ValueError(f"week must be >= 1, got {self.week}")
        if self.reputation < 0:
            self.reputation = 0

    # --- logging ---

    def log(self, message: str) -> None:
        """Append a week-prefixed narrative line."""
        line = f"[Week {self.week}] {message}"
        self.log_lines.append(line)
        if len(self.log_lines) > LOG_CAPACITY:
            del self.log_lines[: len(self.log_lines) - LOG_CAPACITY]
        logger.debug(line)

    # --- economy ---

    def record_expense(self, amount: int, description: str) -> int:
        amount = max(0, int(amount))
        self.budget -= amount
        self.total_expenses += amount
        self.log(f"{description}: -{amount} (budget {self.budget})")
        return amount

    def add_funds(self, amount: int, description: str) -> int:
        amount = max(0, int(amount))
        self.budget += amount
        self.log(f"{description}: +{amount} (budget {self.budget})")
        return amount

    def change_reputation(self, delta: int) -> int:
        self.reputation = max(0, int(self.reputation + delta))
        return self.reputation

    def get_expense_multiplier(self) -> float:
        return self.expense_multiplier if self.expense_multiplier_weeks > 0 else 1.0

    def get_weekly_cost(self) -> int:
        active = len(self.active_students())
        return WEEKLY_BASE_COST + WEEKLY_COST_PER_STUDENT * active + self.facilities.maintenance_cost()

    # --- roster ---

    def active_students(self) -> List[Student]:
        return [s for s in self.students if s.active]

    def find_student(self, name: str, active_only: bool = True) -> Student | None:
        for s in self.students:
            if s.name == name and (s.active or not active_only):
                return s
        return None

    # --- calendar ---

    def current_half(self) -> int:
        return 1 if self.week <= WEEKS_PER_HALF else 2

    def week_in_half(self) -> int:
        return (self.week - 1) % WEEKS_PER_HALF + 1

    def season_over(self) -> bool:
        return self.week > SEASON_WEEKS

    def is_ended(self) -> bool:
        return self.phase is not SeasonPhase.ACTIVE

    def national_team_active(self) -> bool:
        return self.in_national_team or self.national_team_choice_pending

    def qualified_for(self, contest: str, half: int | None = None) -> Set[str]:
        half = half or self.current_half()
        return self.qualification[half - 1].setdefault(contest, set())

    # --- weather & comfort ---

    def update_weather(self) -> None:
        """Seasonal sine around the province mean plus noise, then pick sky conditions."""
        cal_week = (SEASON_START_CALENDAR_WEEK + self.week - 2) % 52 + 1
        seasonal = SEASONAL_TEMP_AMPLITUDE * math.sin(2 * math.pi * (cal_week - 16) / 52.0)
        self.temperature = round(self.mean_temperature + seasonal + self.rng.gauss(0, 3.0), 1)
        roll = self.rng.random()
        if self.temperature <= 2.0 and roll < 0.4:
            self.weather = WEATHER_SNOW
        elif roll < 0.25:
            self.weather = WEATHER_RAIN
        elif roll < 0.55:
            self.weather = WEATHER_CLOUDY
        else:
            self.weather = WEATHER_SUNNY

    def is_extreme_weather(self) -> bool:
        return self.temperature <= EXTREME_COLD_THRESHOLD or self.temperature >= EXTREME_HOT_THRESHOLD

    def get_comfort(self) -> float:
        """Global comfort: base + dorm, minus temperature deviation (AC-mitigated), plus sky."""
        temp_penalty = abs(self.temperature - COMFORT_IDEAL_TEMP) * COMFORT_TEMP_PENALTY
        temp_penalty *= 1.0 - self.facilities.ac_mitigation()
        comfort = self.base_comfort + self.facilities.dorm_comfort_bonus() - temp_penalty
        comfort += WEATHER_COMFORT_DELTA.get(self.weather, 0.0)
        return max(0.0, min(100.0, comfort))

    def get_weather_factor(self) -> float:
        """Pressure multiplier from weather; never below 1."""
        factor = 1.0
        if self.is_extreme_weather():
            factor += EXTREME_WEATHER_PRESSURE * (1.0 - self.facilities.ac_mitigation())
        if self.weather in (WEATHER_RAIN, WEATHER_SNOW):
            factor += 0.05
        return factor

    # --- events ---

    def pending_events(self) -> List[GameEvent]:
        return [e for e in self.recent_events if e.is_pending]

    def has_pending_choice(self) -> bool:
        return any(e.is_pending for e in self.recent_events)

    def push_event(self, event: GameEvent) -> None:
        self.recent_events.insert(0, event)
        if len(self.recent_events) > RECENT_EVENTS_CAPACITY:
            del self.recent_events[RECENT_EVENTS_CAPACITY:]

    def allocate_event_uid(self) -> int:
        uid = self.next_event_uid
        self.next_event_uid += 1
        return uid

    def to_dict(self) -> Dict:
        """Display view (no RNG state); see simulation.snapshot for the full round-trippable form."""
        return {
            "week": self.week,
            "half": self.current_half(),
            "budget": self.budget,
            "reputation": self.reputation,
            "difficulty": self.difficulty,
            "province": {"id": self.province_id, "name": self.province_name, "type": self.province_type},
            "temperature": self.temperature,
            "weather": self.weather,
            "comfort": round(self.get_comfort(), 1),
            "facilities": self.facilities.to_dict(),
            "students": [s.to_dict() for s in self.students],
            "weekly_tasks": [t.to_dict() for t in self.weekly_tasks],
            "recent_events": [e.to_dict() for e in self.recent_events],
            "phase": self.phase.value,
            "ending_reason": self.ending_reason,
            "in_national_team": self.in_national_team,
            "national_team_choice_pending": self.national_team_choice_pending,
            "log": self.log_lines[-50:],
        }
