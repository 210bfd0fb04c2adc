"""
Question domain types.

Questions are immutable once loaded. Allocated questions wrap a question with
its 1-based display position inside a single test or practice attempt.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

QuestionId = Union[str, int]


@dataclass(frozen=True)
class Question:
    """A normalized multiple-choice question."""

    id: QuestionId
    category: str
    prompt: str
    options: Tuple[str, ...]
    correct_index: int
    explanation: str = ""

    def __post_init__(self) -> None:
        # Accept any sequence of options but store a tuple
        object.__setattr__(self, "options", tuple(self.options))
        if not self.prompt:
            raise ValueError("Question prompt cannot be empty")
        if len(self.options) < 2:
            raise ValueError(
                f"Question {self.id} needs at least 2 options, got {len(self.options)}"
            )
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(
                f"Question {self.id} correct_index {self.correct_index} is out of range"
            )

    @property
    def answer_text(self) -> str:
        """Text of the correct option."""
        return self.options[self.correct_index]

    def option_text(self, index: Any) -> str:
        """Text of the option at ``index``, or "" if it is not a valid index."""
        if is_answer_index(index) and 0 <= index < len(self.options):
            return self.options[index]
        return ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the normalized bank record shape."""
        return {
            "id": self.id,
            "category": self.category,
            "question_text": self.prompt,
            "options": list(self.options),
            "correct_index": self.correct_index,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class AllocatedQuestion:
    """A question served in one attempt, with its display position."""

    question: Question
    position: int = field(default=1)

    @property
    def id(self) -> QuestionId:
        return self.question.id

    @property
    def category(self) -> str:
        return self.question.category


def is_answer_index(value: Any) -> bool:
    """True for plain ints; bools are rejected even though they subclass int."""
    return isinstance(value, int) and not isinstance(value, bool)
