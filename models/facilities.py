"""
Facilities DTO: five independently levelled tracks (computer, library, ac, dorm, canteen).
Effect and cost tables live in models.constants.
"""
from dataclasses import dataclass
from typing import Dict

from .constants import (
    FACILITY_NAMES,
    FACILITY_MAX_LEVEL,
    FACILITY_UPGRADE_COST,
    FACILITY_MAINTENANCE_PER_LEVEL,
    COMPUTER_MULTIPLIER,
    LIBRARY_MULTIPLIER,
    AC_WEATHER_MITIGATION,
    DORM_COMFORT_BONUS,
    CANTEEN_PRESSURE_REDUCTION,
)


@dataclass
class Facilities:
    computer: int = 1
    library: int = 1
    ac: int = 1
    dorm: int = 1
    canteen: int = 1

    def __post_init__(self) -> None:
        for name in FACILITY_NAMES:
            level = getattr(self, name)
            if not 1 <= level <= FACILITY_MAX_LEVEL[name]:
                raise ValueError(f"{name} level must be between 1 and {FACILITY_MAX_LEVEL[name]}, got {level}")

    def level(self, name: str) -> int:
        if name not in FACILITY_NAMES:
            raise ValueError(f"unknown facility: {name}")
        return getattr(self, name)

    def max_level(self, name: str) -> int:
        if name not in FACILITY_NAMES:
            raise ValueError(f"unknown facility: {name}")
        return FACILITY_MAX_LEVEL[name]

    def upgrade_cost(self, name: str) -> int | None:
        """Base price of the next level, or None when already maxed."""
        lvl = self.level(name)
        if lvl >= FACILITY_MAX_LEVEL[name]:
            return None
        return FACILITY_UPGRADE_COST[name][lvl]

    def upgrade(self, name: str) -> int:
        lvl = self.level(name)
        if lvl >= FACILITY_MAX_LEVEL[name]:
            raise ValueError(f"{name} is already at max level {lvl}")
        setattr(self, name, lvl + 1)
        return lvl + 1

    # --- effect tables ---

    def computer_multiplier(self) -> float:
        return COMPUTER_MULTIPLIER[self.computer]

    def library_multiplier(self) -> float:
        return LIBRARY_MULTIPLIER[self.library]

    def ac_mitigation(self) -> float:
        return AC_WEATHER_MITIGATION[self.ac]

    def dorm_comfort_bonus(self) -> float:
        return DORM_COMFORT_BONUS[self.dorm]

    def canteen_pressure_reduction(self) -> float:
        return CANTEEN_PRESSURE_REDUCTION[self.canteen]

    def maintenance_cost(self) -> int:
        return sum(FACILITY_MAINTENANCE_PER_LEVEL[n] * (getattr(self, n) - 1) for n in FACILITY_NAMES)

    def to_dict(self) -> Dict:
        return {name: getattr(self, name) for name in FACILITY_NAMES}

    @classmethod
    def from_dict(cls, data: Dict) -> "Facilities":
        return cls(**{name: int(data.get(name, 1)) for name in FACILITY_NAMES})
