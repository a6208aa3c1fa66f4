"""
Data models for the coaching season simulator.
"""
from .student import Student
from .facilities import Facilities
from .task import Task, TaskBoost
from .talent import Talent, TalentAction, TalentResult, TalentTrigger
from .event import GameEvent, EventOption
from .contest_result import ContestEntry, ContestRecord
from .action_result import ActionResult
from .game_state import GameState, SeasonPhase, SeasonSummary, SnapshotError

__all__ = [
    "Student",
    "Facilities",
    "Task",
    "TaskBoost",
    "Talent",
    "TalentAction",
    "TalentResult",
    "TalentTrigger",
    "GameEvent",
    "EventOption",
    "ContestEntry",
    "ContestRecord",
    "ActionResult",
    "GameState",
    "SeasonPhase",
    "SeasonSummary",
    "SnapshotError",
]
