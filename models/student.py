"""
Student DTO for the coaching season simulator.
Pressure and mental are bounded 0-100; thinking/coding/knowledge are open-ended.
Talents are held by name only; their behaviour lives in simulation.talents.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from .constants import KNOWLEDGE_KEYS, QUIT_RISK_PRESSURE

PRESSURE_MIN = 0
PRESSURE_MAX = 100
MENTAL_MIN = 0
MENTAL_MAX = 100

# Why a student left the roster (active=False)
DEPARTURE_QUIT = "quit"
DEPARTURE_ESPORTS = "esports"
DEPARTURE_EVICTED = "evicted"
DEPARTURE_RETIRED = "retired"
DEPARTURE_PART_TIME = "part_time_overload"


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass
class Student:
    """One trainee on the roster. Inactive students stay in the list for the season summary."""

    name: str
    active: bool = True
    thinking: float = 0.0
    coding: float = 0.0
    knowledge_ds: float = 0.0
    knowledge_graph: float = 0.0
    knowledge_string: float = 0.0
    knowledge_math: float = 0.0
    knowledge_dp: float = 0.0
    pressure: float = 20.0
    mental: float = 70.0
    comfort: float = 50.0
    sick_weeks: int = 0
    quit_tendency_weeks: int = 0
    talents: List[str] = field(default_factory=list)  # acquisition order
    pressure_modifier: float = 0.0  # one-shot, consumed by the next training or weekly tick
    comfort_modifier: float = 0.0  # one-shot, consumed by next comfort recompute
    departure_reason: str | None = None
    hidden_mock_score: int | None = None  # last outing's simulated mock total (0-400)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("student name must not be empty")
        if not PRESSURE_MIN <= self.pressure <= PRESSURE_MAX:
            raise ValueError(f"pressure must be between {PRESSURE_MIN} and {PRESSURE_MAX}, got {self.pressure}")
        if not MENTAL_MIN <= self.mental <= MENTAL_MAX:
            raise ValueError(f"mental must be between {MENTAL_MIN} and {MENTAL_MAX}, got {self.mental}")
        if len(set(self.talents)) != len(self.talents):
            raise ValueError(f"duplicate talents for {self.name}: {self.talents}")

    # --- derived values ---

    def ability_avg(self) -> float:
        return ((self.thinking or 0.0) + (self.coding or 0.0)) / 2.0

    def get_knowledge(self, domain: str) -> float:
        if domain not in KNOWLEDGE_KEYS:
            raise ValueError(f"unknown knowledge domain: {domain}")
        return getattr(self, f"knowledge_{domain}") or 0.0

    def add_knowledge(self, domain: str, amount: float) -> None:
        if domain not in KNOWLEDGE_KEYS:
            raise ValueError(f"unknown knowledge domain: {domain}")
        attr = f"knowledge_{domain}"
        setattr(self, attr, (getattr(self, attr) or 0.0) + amount)

    def knowledge_total(self) -> float:
        return sum(self.get_knowledge(k) for k in KNOWLEDGE_KEYS)

    def mental_index(self) -> float:
        """Mental as a 0-1 stability factor."""
        return _clamp(self.mental, MENTAL_MIN, MENTAL_MAX) / 100.0

    def is_sick(self) -> bool:
        return self.sick_weeks > 0

    def has_quit_risk(self) -> bool:
        return self.pressure >= QUIT_RISK_PRESSURE

    # --- talents ---

    def has_talent(self, talent: str) -> bool:
        return talent in self.talents

    def add_talent(self, talent: str) -> bool:
        """Append talent if not held yet. Returns True when it was new."""
        if talent in self.talents:
            return False
        self.talents.append(talent)
        return True

    def remove_talent(self, talent: str) -> bool:
        if talent not in self.talents:
            return False
        self.talents.remove(talent)
        return True

    # --- mutation helpers ---

    def clamp_state(self) -> None:
        """Pull pressure and mental back into range, floor negative counters."""
        self.pressure = _clamp(self.pressure, PRESSURE_MIN, PRESSURE_MAX)
        self.mental = _clamp(self.mental, MENTAL_MIN, MENTAL_MAX)
        self.comfort = _clamp(self.comfort, 0, 100)
        self.sick_weeks = max(0, int(self.sick_weeks))
        self.quit_tendency_weeks = max(0, int(self.quit_tendency_weeks))

    def depart(self, reason: str) -> None:
        self.active = False
        self.departure_reason = reason

    def to_dict(self) -> Dict:
        d: Dict = {
            "name": self.name,
            "active": self.active,
            "thinking": self.thinking,
            "coding": self.coding,
        }
        for key in KNOWLEDGE_KEYS:
            d[f"knowledge_{key}"] = getattr(self, f"knowledge_{key}")
        d.update({
            "pressure": self.pressure,
            "mental": self.mental,
            "comfort": self.comfort,
            "sick_weeks": self.sick_weeks,
            "quit_tendency_weeks": self.quit_tendency_weeks,
            "talents": list(self.talents),
            "pressure_modifier": self.pressure_modifier,
            "comfort_modifier": self.comfort_modifier,
            "departure_reason": self.departure_reason,
            "hidden_mock_score": self.hidden_mock_score,
        })
        return d

    @classmethod
    def from_dict(cls, data: Dict) -> "Student":
        kwargs = {f"knowledge_{k}": data.get(f"knowledge_{k}", 0.0) or 0.0 for k in KNOWLEDGE_KEYS}
        return cls(
            name=data.get("name", ""),
            active=bool(data.get("active", True)),
            thinking=data.get("thinking", 0.0) or 0.0,
            coding=data.get("coding", 0.0) or 0.0,
            pressure=data.get("pressure", 20.0),
            mental=data.get("mental", 70.0),
            comfort=data.get("comfort", 50.0),
            sick_weeks=data.get("sick_weeks", 0),
            quit_tendency_weeks=data.get("quit_tendency_weeks", 0),
            talents=list(data.get("talents") or []),
            pressure_modifier=data.get("pressure_modifier", 0.0) or 0.0,
            comfort_modifier=data.get("comfort_modifier", 0.0) or 0.0,
            departure_reason=data.get("departure_reason"),
            hidden_mock_score=data.get("hidden_mock_score"),
            **kwargs,
        )
