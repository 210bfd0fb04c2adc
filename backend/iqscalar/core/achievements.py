"""
Achievement milestones unlocked from a user's test history.

Only full tests count towards achievements; practice entries are ignored.
An earned achievement is never revoked.
"""
import logging
from typing import Callable, Dict, List, Sequence

from iqscalar.models import Achievement, HistoryEntry
from iqscalar.storage import KeyValueStorage

logger = logging.getLogger(__name__)

ACHIEVEMENTS_KEY_PREFIX = "achievements:"

SPEED_DEMON_MAX_SECONDS = 25 * 60
CONSISTENT_ACCURACY = 90
CATEGORY_MASTER_PERCENTAGE = 95


def default_achievements() -> List[Achievement]:
    """Fresh, all-locked achievement list."""
    return [
        Achievement("first_test", "First Test", "Completed your first IQ test", 1),
        Achievement(
            "speed_demon",
            "Speed Demon",
            "Complete 5 tests in under 25 minutes each",
            5,
        ),
        Achievement(
            "perfect_score", "Perfect Score", "Achieve 100% accuracy on any test", 1
        ),
        Achievement(
            "consistent_performer",
            "Consistent Performer",
            "Maintain 90%+ accuracy for 3 consecutive tests",
            3,
        ),
        Achievement("test_veteran", "Test Veteran", "Complete 10 IQ tests", 10),
        Achievement(
            "category_master",
            "Category Master",
            "Score 95%+ in all question categories",
            1,
        ),
    ]


def _first_test(a: Achievement, entry: HistoryEntry, tests: Sequence[HistoryEntry]) -> None:
    if tests:
        a.earn(entry.date)


def _speed_demon(a: Achievement, entry: HistoryEntry, tests: Sequence[HistoryEntry]) -> None:
    fast = [
        t
        for t in tests
        if t.duration_seconds is not None and t.duration_seconds <= SPEED_DEMON_MAX_SECONDS
    ]
    a.progress = min(len(fast), a.total)
    if a.progress >= a.total:
        a.earn(entry.date)


def _perfect_score(a: Achievement, entry: HistoryEntry, tests: Sequence[HistoryEntry]) -> None:
    if entry.accuracy == 100:
        a.earn(entry.date)


def _consistent_performer(
    a: Achievement, entry: HistoryEntry, tests: Sequence[HistoryEntry]
) -> None:
    recent = tests[: a.total]
    if len(recent) < a.total:
        return
    high = [t for t in recent if t.accuracy >= CONSISTENT_ACCURACY]
    if len(high) == len(recent):
        a.earn(entry.date)
    else:
        a.progress = len(high)


def _test_veteran(a: Achievement, entry: HistoryEntry, tests: Sequence[HistoryEntry]) -> None:
    a.progress = min(len(tests), a.total)
    if a.progress >= a.total:
        a.earn(entry.date)


def _category_master(
    a: Achievement, entry: HistoryEntry, tests: Sequence[HistoryEntry]
) -> None:
    categories = list(entry.category_performance.values())
    if len(categories) > 1 and all(
        c.get("percentage", 0) >= CATEGORY_MASTER_PERCENTAGE for c in categories
    ):
        a.earn(entry.date)


RULES: Dict[str, Callable[[Achievement, HistoryEntry, Sequence[HistoryEntry]], None]] = {
    "first_test": _first_test,
    "speed_demon": _speed_demon,
    "perfect_score": _perfect_score,
    "consistent_performer": _consistent_performer,
    "test_veteran": _test_veteran,
    "category_master": _category_master,
}


class AchievementsEvaluator:
    """
    Persists per-user achievement progress and updates it from new results.

    Example usage:
        evaluator = AchievementsEvaluator(storage)
        evaluator.update("u1", entry, history)
        evaluator.earned_count("u1")
    """

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    @staticmethod
    def _key(user_id: str) -> str:
        return f"{ACHIEVEMENTS_KEY_PREFIX}{user_id}"

    def get(self, user_id: str) -> List[Achievement]:
        stored = self._storage.get(self._key(user_id))
        if not stored:
            return default_achievements()
        return [Achievement.from_dict(item) for item in stored]

    def _save(self, user_id: str, achievements: List[Achievement]) -> None:
        self._storage.set(self._key(user_id), [a.to_dict() for a in achievements])

    def update(
        self, user_id: str, entry: HistoryEntry, history: Sequence[HistoryEntry]
    ) -> List[Achievement]:
        """
        Re-evaluate locked achievements after ``entry`` was recorded.

        Args:
            user_id: Opaque user identifier
            entry: The entry just recorded
            history: Full history, newest first, including ``entry``

        Returns:
            The user's achievements after evaluation
        """
        if entry.is_practice:
            return self.get(user_id)

        tests = [h for h in history if not h.is_practice]
        with self._storage.lock(self._key(user_id)):
            achievements = self.get(user_id)
            for achievement in achievements:
                if achievement.is_earned:
                    continue
                rule = RULES.get(achievement.id)
                if rule is None:
                    continue
                rule(achievement, entry, tests)
                if achievement.is_earned:
                    logger.info(f"User {user_id} earned achievement {achievement.id}")

            self._save(user_id, achievements)
        return achievements

    def earned_count(self, user_id: str) -> int:
        return sum(1 for a in self.get(user_id) if a.is_earned)

    def clear(self, user_id: str) -> None:
        self._storage.delete(self._key(user_id))
