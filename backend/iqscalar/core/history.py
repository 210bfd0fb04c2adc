"""
Per-user test history.

Scored results are summarized into ``HistoryEntry`` records and kept newest
first in a rolling list capped at ``HISTORY_MAX_ENTRIES``. Recording a full
test also re-evaluates the user's achievements.
"""
import logging
from typing import Any, Dict, List, Optional

from iqscalar.core.achievements import AchievementsEvaluator
from iqscalar.core.config import settings
from iqscalar.core.scoring import ScoredResult, round_half_up
from iqscalar.models import HistoryEntry
from iqscalar.storage import KeyValueStorage

logger = logging.getLogger(__name__)

HISTORY_KEY_PREFIX = "history:"
FULL_TEST_TYPE = "Full IQ Test"

# Tests compared on each side when computing recent improvement
IMPROVEMENT_WINDOW = 3


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


class TestHistoryRecorder:
    """
    Records scored results and derives user statistics from them.

    Example usage:
        recorder = TestHistoryRecorder(storage)
        entry = recorder.add_result("u1", result, duration_seconds=840)
        recorder.user_stats("u1")
    """

    __test__ = False

    def __init__(
        self,
        storage: KeyValueStorage,
        achievements: Optional[AchievementsEvaluator] = None,
        max_entries: Optional[int] = None,
    ):
        self._storage = storage
        self.achievements = achievements or AchievementsEvaluator(storage)
        self.max_entries = max_entries or settings.HISTORY_MAX_ENTRIES

    @staticmethod
    def _key(user_id: str) -> str:
        return f"{HISTORY_KEY_PREFIX}{user_id}"

    def get_history(self, user_id: str) -> List[HistoryEntry]:
        """All entries for ``user_id``, newest first."""
        stored = self._storage.get(self._key(user_id)) or []
        return [HistoryEntry.from_dict(item) for item in stored]

    def add_result(
        self,
        user_id: str,
        result: ScoredResult,
        duration_seconds: Optional[int] = None,
        type_label: Optional[str] = None,
    ) -> HistoryEntry:
        """
        Summarize ``result`` and prepend it to the user's history.

        Args:
            user_id: Opaque user identifier
            result: The scored result
            duration_seconds: Time taken, if known
            type_label: Display type; derived from the result when omitted

        Returns:
            The recorded entry
        """
        if type_label is None:
            if result.is_practice:
                category = (
                    result.outcomes[0].question.category if result.outcomes else "Mixed"
                )
                type_label = f"Practice - {category}"
            else:
                type_label = FULL_TEST_TYPE

        entry = HistoryEntry(
            id=result.result_id,
            date=result.timestamp,
            type=type_label,
            score=result.score if result.is_practice else result.ability_estimate,
            accuracy=round_half_up(result.percentage),
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            duration_seconds=duration_seconds,
            category_performance={
                category: perf.to_dict()
                for category, perf in result.category_performance.items()
            },
            is_practice=result.is_practice,
        )

        with self._storage.lock(self._key(user_id)):
            history = [entry] + self.get_history(user_id)
            history = history[: self.max_entries]
            self._storage.set(self._key(user_id), [h.to_dict() for h in history])

        self.achievements.update(user_id, entry, history)
        logger.debug(f"Recorded {entry.type} {entry.id} for user {user_id}")
        return entry

    def user_stats(self, user_id: str) -> Dict[str, Any]:
        """Aggregate statistics over the user's full tests."""
        tests = [h for h in self.get_history(user_id) if not h.is_practice]
        achievements = self.achievements.get(user_id)
        stats: Dict[str, Any] = {
            "total_tests": len(tests),
            "average_score": 0,
            "average_accuracy": 0,
            "best_score": 0,
            "recent_improvement": 0,
            "total_achievements": len(achievements),
            "earned_achievements": sum(1 for a in achievements if a.is_earned),
        }
        if not tests:
            return stats

        scores = [t.score for t in tests]
        accuracies = [t.accuracy for t in tests]
        stats["average_score"] = round_half_up(_mean(scores))
        stats["average_accuracy"] = round_half_up(_mean(accuracies))
        stats["best_score"] = max(scores)

        if len(tests) >= 2 * IMPROVEMENT_WINDOW:
            recent = _mean(accuracies[:IMPROVEMENT_WINDOW])
            previous = _mean(accuracies[IMPROVEMENT_WINDOW : 2 * IMPROVEMENT_WINDOW])
            stats["recent_improvement"] = round_half_up(recent - previous)

        return stats

    def practice_stats(self, user_id: str) -> Dict[str, Any]:
        """Aggregate statistics over the user's practice attempts."""
        practices = [h for h in self.get_history(user_id) if h.is_practice]
        if not practices:
            return {
                "total_practices": 0,
                "average_score": 0,
                "best_score": 0,
                "total_questions": 0,
                "category_stats": {},
            }

        total_correct = sum(p.correct_answers for p in practices)
        total_questions = sum(p.total_questions for p in practices)

        category_stats: Dict[str, Dict[str, Any]] = {}
        for practice in practices:
            for category, perf in practice.category_performance.items():
                agg = category_stats.setdefault(category, {"correct": 0, "total": 0})
                agg["correct"] += perf.get("correct", 0)
                agg["total"] += perf.get("total", 0)
        for agg in category_stats.values():
            agg["percentage"] = 100.0 * agg["correct"] / agg["total"] if agg["total"] else 0.0

        return {
            "total_practices": len(practices),
            "average_score": 100.0 * total_correct / total_questions if total_questions else 0.0,
            "best_score": max(
                (100.0 * p.correct_answers / p.total_questions for p in practices if p.total_questions),
                default=0.0,
            ),
            "total_questions": total_questions,
            "category_stats": category_stats,
        }

    def clear(self, user_id: str) -> None:
        """Remove the user's history and achievement progress."""
        self._storage.delete(self._key(user_id))
        self.achievements.clear(user_id)
