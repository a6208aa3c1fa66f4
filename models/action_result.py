"""
Accept/reject value returned by every coach action. Rejections never mutate state.
"""
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ActionResult:
    ok: bool
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def accept(cls, message: str = "", **details: Any) -> "ActionResult":
        return cls(ok=True, message=message, details=details)

    @classmethod
    def reject(cls, message: str, **details: Any) -> "ActionResult":
        return cls(ok=False, message=message, details=details)

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> Dict:
        return {"ok": self.ok, "message": self.message, "details": self.details}
