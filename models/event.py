"""
Narrative event records. Choice-bearing events carry options and stay pending until one is picked.
Option effects are looked up by (definition_id, option key) in simulation.events, never stored here.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class EventOption:
    key: str
    label: str
    description: str = ""

    def to_dict(self) -> Dict:
        return {"key": self.key, "label": self.label, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict) -> "EventOption":
        return cls(key=data["key"], label=data.get("label", data["key"]), description=data.get("description", ""))


@dataclass
class GameEvent:
    uid: int
    name: str
    description: str
    week: int
    event_id: str = ""
    options: List[EventOption] | None = None
    handled: bool = False
    definition_id: str | None = None
    payload: Dict[str, Any] = field(default_factory=dict)
    chosen: str | None = None

    @property
    def is_choice(self) -> bool:
        return bool(self.options)

    @property
    def is_pending(self) -> bool:
        return self.is_choice and not self.handled

    def dedupe_key(self) -> str:
        return f"{self.week}::{self.name}::{self.description}::{self.event_id}"

    def option(self, key: str) -> EventOption | None:
        for opt in self.options or []:
            if opt.key == key:
                return opt
        return None

    def to_dict(self) -> Dict:
        return {
            "uid": self.uid,
            "name": self.name,
            "description": self.description,
            "week": self.week,
            "event_id": self.event_id,
            "options": [o.to_dict() for o in self.options] if self.options is not None else None,
            "handled": self.handled,
            "definition_id": self.definition_id,
            "payload": dict(self.payload),
            "chosen": self.chosen,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "GameEvent":
        options = data.get("options")
        return cls(
            uid=int(data["uid"]),
            name=data.get("name", ""),
            description=data.get("description", ""),
            week=int(data.get("week", 0)),
            event_id=data.get("event_id", ""),
            options=[EventOption.from_dict(o) for o in options] if options is not None else None,
            handled=bool(data.get("handled", False)),
            definition_id=data.get("definition_id"),
            payload=dict(data.get("payload") or {}),
            chosen=data.get("chosen"),
        )
