"""
Training task DTO. A task boosts one or more knowledge domains at a given difficulty.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from .constants import KNOWLEDGE_KEYS

# (upper bound exclusive, label)
DIFFICULTY_TIERS = (
    (30, "Beginner"),
    (55, "Popularization"),
    (80, "Advanced"),
    (105, "Provincial"),
    (10**9, "NOI"),
)


def difficulty_tier(difficulty: float) -> str:
    for bound, label in DIFFICULTY_TIERS:
        if difficulty < bound:
            return label
    return DIFFICULTY_TIERS[-1][1]


@dataclass
class TaskBoost:
    domain: str
    amount: int

    def __post_init__(self) -> None:
        if self.domain not in KNOWLEDGE_KEYS:
            raise ValueError(f"unknown knowledge domain: {self.domain}")

    def to_dict(self) -> Dict:
        return {"domain": self.domain, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Dict) -> "TaskBoost":
        return cls(domain=data["domain"], amount=int(data.get("amount", 0)))


@dataclass
class Task:
    name: str
    difficulty: int
    boosts: List[TaskBoost] = field(default_factory=list)

    @property
    def difficulty_tier(self) -> str:
        return difficulty_tier(self.difficulty)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "difficulty": self.difficulty,
            "difficulty_tier": self.difficulty_tier,
            "boosts": [b.to_dict() for b in self.boosts],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Task":
        return cls(
            name=data["name"],
            difficulty=int(data.get("difficulty", 0)),
            boosts=[TaskBoost.from_dict(b) for b in data.get("boosts") or []],
        )
