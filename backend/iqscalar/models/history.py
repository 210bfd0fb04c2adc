"""
History and achievement record types.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class HistoryEntry:
    """Summary of one completed test or practice attempt."""

    id: str
    date: str
    type: str
    score: int
    accuracy: int
    total_questions: int
    correct_answers: int
    duration_seconds: Optional[int] = None
    category_performance: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    is_practice: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=data["id"],
            date=data["date"],
            type=data["type"],
            score=data["score"],
            accuracy=data["accuracy"],
            total_questions=data["total_questions"],
            correct_answers=data["correct_answers"],
            duration_seconds=data.get("duration_seconds"),
            category_performance=data.get("category_performance") or {},
            is_practice=data.get("is_practice", False),
        )


@dataclass
class Achievement:
    """A milestone badge and the user's progress towards it."""

    id: str
    name: str
    description: str
    total: int
    status: str = "locked"
    progress: int = 0
    earned: Optional[str] = None

    @property
    def is_earned(self) -> bool:
        return self.status == "earned"

    def earn(self, when: str) -> None:
        self.status = "earned"
        self.earned = when
        self.progress = self.total

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Achievement":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data["description"],
            total=data["total"],
            status=data.get("status", "locked"),
            progress=data.get("progress", 0),
            earned=data.get("earned"),
        )
