"""
Scoring of submitted answers.

Scoring Policy
==============
**Correctness:** strict. An answer counts only when it is a plain integer
equal to the question's ``correct_index``; ``None``, missing entries, bools
and out-of-range values are incorrect and never raise.

**Ability estimate ("IQ score"):** a fixed linear rescaling of accuracy

    estimate = round_half_up(clamp(55 + 0.9 * percentage, 70, 145))

This is an arbitrary normalization policy, not a psychometric model. It must
stay exactly as written so stored results remain comparable; rounding is
half-up (``round_half_up(55.5) == 56``) rather than Python's banker's rounding.

**Percentile:** ``iq_to_percentile`` places an estimate on a normal
distribution with mean 100 and standard deviation 15.
"""

import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from scipy.stats import norm

from iqscalar.core.datetime_utils import utc_now
from iqscalar.models import AllocatedQuestion, Question, is_answer_index

logger = logging.getLogger(__name__)

ABILITY_FLOOR = 70
ABILITY_CEILING = 145
ABILITY_INTERCEPT = 55.0
ABILITY_SLOPE = 0.9

# (minimum percentage, label), checked in order
PERFORMANCE_LEVELS = (
    (90, "Exceptional"),
    (80, "Above Average"),
    (70, "Good"),
    (60, "Average"),
    (50, "Below Average"),
)
LOWEST_PERFORMANCE_LEVEL = "Needs Improvement"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def calculate_ability_estimate(percentage: float) -> int:
    """
    Map an accuracy percentage onto the 70-145 ability scale.

    Example:
        >>> calculate_ability_estimate(100)
        145
        >>> calculate_ability_estimate(0)
        70
        >>> calculate_ability_estimate(50)
        100
    """
    raw = ABILITY_INTERCEPT + percentage * ABILITY_SLOPE
    return round_half_up(max(ABILITY_FLOOR, min(ABILITY_CEILING, raw)))


def iq_to_percentile(iq_score: float, mean: float = 100.0, sd: float = 15.0) -> float:
    """
    Convert an ability estimate to a percentile rank using a normal distribution.

    Args:
        iq_score: The ability estimate to convert
        mean: Mean of the distribution (default: 100)
        sd: Standard deviation of the distribution (default: 15)

    Returns:
        Percentile rank (0-100), rounded to 1 decimal place

    Example:
        >>> iq_to_percentile(100)
        50.0
        >>> iq_to_percentile(115)
        84.1
    """
    z_score = (iq_score - mean) / sd
    return round(float(norm.cdf(z_score)) * 100, 1)


def performance_level(percentage: float) -> str:
    """Human-readable band for an accuracy percentage."""
    for threshold, label in PERFORMANCE_LEVELS:
        if percentage >= threshold:
            return label
    return LOWEST_PERFORMANCE_LEVEL


def generate_result_id(is_practice: bool = False) -> str:
    """``test_<epoch-ms>_<9 hex chars>``, or ``practice_...`` for practice."""
    prefix = "practice" if is_practice else "test"
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass(frozen=True)
class QuestionOutcome:
    """How one question was answered."""

    question: Question
    position: int
    submitted_index: Optional[int]
    is_correct: bool
    correct_answer_text: str
    user_answer_text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question.id,
            "position": self.position,
            "category": self.question.category,
            "question_text": self.question.prompt,
            "options": list(self.question.options),
            "correct_index": self.question.correct_index,
            "explanation": self.question.explanation,
            "submitted_index": self.submitted_index,
            "is_correct": self.is_correct,
            "correct_answer_text": self.correct_answer_text,
            "user_answer_text": self.user_answer_text,
        }


@dataclass(frozen=True)
class CategoryPerformance:
    correct: int
    total: int

    @property
    def percentage(self) -> float:
        return 100.0 * self.correct / self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correct": self.correct,
            "total": self.total,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class ScoredResult:
    """Write-once result of scoring one submission."""

    result_id: str
    timestamp: str
    score: int
    percentage: float
    total_questions: int
    correct_answers: int
    wrong_answers: int
    ability_estimate: int
    outcomes: List[QuestionOutcome]
    category_performance: Dict[str, CategoryPerformance]
    is_practice: bool = False
    performance_level: str = field(default="")

    @property
    def percentile(self) -> float:
        return iq_to_percentile(self.ability_estimate)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result_id": self.result_id,
            "timestamp": self.timestamp,
            "score": self.score,
            "percentage": self.percentage,
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "wrong_answers": self.wrong_answers,
            "ability_estimate": self.ability_estimate,
            "percentile": self.percentile,
            "performance_level": self.performance_level,
            "is_practice": self.is_practice,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "category_performance": {
                category: perf.to_dict()
                for category, perf in self.category_performance.items()
            },
        }


def _as_allocated(questions: Sequence[Any]) -> List[AllocatedQuestion]:
    allocated = []
    for position, item in enumerate(questions, start=1):
        if isinstance(item, AllocatedQuestion):
            allocated.append(item)
        else:
            allocated.append(AllocatedQuestion(question=item, position=position))
    return allocated


def score_submission(
    questions: Sequence[Any],
    answers: Sequence[Any],
    is_practice: bool = False,
) -> ScoredResult:
    """
    Score a submission against the questions it answers.

    Args:
        questions: Allocated questions (or bare Questions) in served order
        answers: Parallel list of submitted option indices; entries may be
            None, and a shorter list leaves trailing questions unanswered
        is_practice: Whether this is a practice attempt

    Returns:
        ScoredResult with per-question outcomes and category breakdown

    Raises:
        ValueError: If there are no questions to score
    """
    allocated = _as_allocated(questions)
    total = len(allocated)
    if total == 0:
        raise ValueError("Cannot score a submission with no questions")

    outcomes: List[QuestionOutcome] = []
    tallies: Dict[str, List[int]] = {}

    for i, item in enumerate(allocated):
        question = item.question
        submitted = answers[i] if i < len(answers) else None
        submitted_index = submitted if is_answer_index(submitted) else None
        is_correct = submitted_index == question.correct_index

        outcomes.append(
            QuestionOutcome(
                question=question,
                position=item.position,
                submitted_index=submitted_index,
                is_correct=is_correct,
                correct_answer_text=question.answer_text,
                user_answer_text=question.option_text(submitted_index),
            )
        )

        tally = tallies.setdefault(question.category, [0, 0])
        tally[1] += 1
        if is_correct:
            tally[0] += 1

    correct = sum(1 for outcome in outcomes if outcome.is_correct)
    percentage = 100.0 * correct / total

    result = ScoredResult(
        result_id=generate_result_id(is_practice),
        timestamp=utc_now().isoformat(),
        score=correct,
        percentage=percentage,
        total_questions=total,
        correct_answers=correct,
        wrong_answers=total - correct,
        ability_estimate=calculate_ability_estimate(percentage),
        outcomes=outcomes,
        category_performance={
            category: CategoryPerformance(correct=c, total=t)
            for category, (c, t) in tallies.items()
        },
        is_practice=is_practice,
        performance_level=performance_level(percentage),
    )

    logger.debug(
        f"Scored {result.result_id}: {correct}/{total} correct "
        f"({percentage:.1f}%), estimate {result.ability_estimate}"
    )
    return result
