"""
Contest result records appended to the career log. Used for end-of-season scoring only.
"""
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ContestEntry:
    """One student's line in a contest. eligible=False means blocked by the qualification chain."""

    name: str
    score: float = 0.0
    eligible: bool = True
    passed: bool = False
    medal: str | None = None  # gold / silver / bronze (NOI only)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "score": self.score,
            "eligible": self.eligible,
            "passed": self.passed,
            "medal": self.medal,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ContestEntry":
        return cls(
            name=data["name"],
            score=data.get("score", 0.0) or 0.0,
            eligible=bool(data.get("eligible", True)),
            passed=bool(data.get("passed", False)),
            medal=data.get("medal"),
        )


@dataclass
class ContestRecord:
    name: str
    week: int
    half: int
    max_score: int
    pass_line: float = 0.0
    entries: List[ContestEntry] = field(default_factory=list)

    def key(self) -> str:
        return f"{self.half}::{self.name}::{self.week}"

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "week": self.week,
            "half": self.half,
            "max_score": self.max_score,
            "pass_line": self.pass_line,
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ContestRecord":
        return cls(
            name=data["name"],
            week=int(data["week"]),
            half=int(data.get("half", 1)),
            max_score=int(data.get("max_score", 0)),
            pass_line=data.get("pass_line", 0.0) or 0.0,
            entries=[ContestEntry.from_dict(e) for e in data.get("entries") or []],
        )
