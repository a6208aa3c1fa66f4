"""
Talent types: the static description, the tagged result a resolver returns,
and the (talent, result) pair the dispatcher yields.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional


class TalentAction(str, Enum):
    CANCEL_PRESSURE = "cancel_pressure"
    HALVE_PRESSURE = "halve_pressure"
    DOUBLE_PRESSURE = "double_pressure"
    REDUCE_OUTING_COST = "reduce_outing_cost"
    REDUCE_OVERSEAS_COST = "reduce_overseas_cost"
    QUIT = "quit"
    QUIT_FOR_ESPORTS = "quit_for_esports"
    VACATION_HALF_MINUS5 = "vacation_half_minus5"
    ADJUST_COMFORT = "adjust_comfort"
    RECOVERY_BONUS = "recovery_bonus"
    SHORTEN_ILLNESS = "shorten_illness"
    MESSAGE = "message"


@dataclass(frozen=True)
class TalentResult:
    action: TalentAction
    amount: float | None = None
    message: str | None = None

    def to_dict(self) -> Dict:
        d: Dict = {"action": self.action.value}
        if self.amount is not None:
            d["amount"] = self.amount
        if self.message is not None:
            d["message"] = self.message
        return d


# (student, context) -> TalentResult | None
Resolver = Callable[[Any, Dict], Optional[TalentResult]]


@dataclass
class Talent:
    name: str
    description: str = ""
    color: str = "#888888"
    hidden: bool = False  # only obtainable through overseas inspiration
    handlers: Dict[str, Resolver] = field(default_factory=dict)  # trigger name -> resolver

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "hidden": self.hidden,
            "triggers": sorted(self.handlers),
        }


@dataclass(frozen=True)
class TalentTrigger:
    talent_name: str
    result: TalentResult | None
