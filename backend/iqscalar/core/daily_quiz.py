"""
Daily quiz: one deterministic question per calendar date, shared by all users.

The question for a date is picked by hashing ``"iqscalar_daily_" + date``
(a 32-bit signed polynomial hash over UTF-16 code units, absolute value) and
taking it modulo the bank size. Same date and same bank always give the same
question.

Each user's answers are stored as one record per ``YYYY-MM-DD`` key under
``daily_quiz:<user_id>``; the first submission for a date wins.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from iqscalar.core.datetime_utils import shift_date_string, today_string, utc_now
from iqscalar.core.question_bank import QuestionBank
from iqscalar.models import Question, is_answer_index
from iqscalar.storage import KeyValueStorage

logger = logging.getLogger(__name__)

DAILY_SEED_SALT = "iqscalar_daily_"
DAILY_KEY_PREFIX = "daily_quiz:"

# Furthest back the current streak walk looks, in days
STREAK_LOOKBACK_DAYS = 365


class DailyQuizAlreadyAnsweredError(Exception):
    """Raised when a user submits a second answer for the same date."""

    def __init__(self, date: str):
        self.date = date
        super().__init__(f"Daily quiz for {date} has already been answered")


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def daily_seed(date: str) -> int:
    """
    Stable non-negative seed for ``date``.

    Example:
        >>> daily_seed("2024-06-01") == daily_seed("2024-06-01")
        True
    """
    text = DAILY_SEED_SALT + date
    encoded = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = _to_int32(h * 31 + unit)
    return abs(h)


@dataclass(frozen=True)
class DailyQuestion:
    """The question of the day."""

    question: Question
    date: str
    index: int

    @property
    def daily_quiz_id(self) -> str:
        return f"daily_{self.date}_{self.index}"


def todays_question(bank: QuestionBank, date: Optional[str] = None) -> DailyQuestion:
    """
    Pick the question for ``date`` (defaults to today, UTC).

    Raises:
        ValueError: If the bank is empty
    """
    if len(bank) == 0:
        raise ValueError("Cannot pick a daily question from an empty bank")
    date = date or today_string()
    index = daily_seed(date) % len(bank)
    return DailyQuestion(question=bank[index], date=date, index=index)


class DailyQuizTracker:
    """
    Per-user daily quiz records and streak bookkeeping.

    Example usage:
        tracker = DailyQuizTracker(storage, bank, "u1")
        if not tracker.has_answered("2024-06-01"):
            tracker.submit_answer(2, date="2024-06-01")
        tracker.stats(today="2024-06-01")
    """

    def __init__(self, storage: KeyValueStorage, bank: QuestionBank, user_id: str):
        self._storage = storage
        self._bank = bank
        self.user_id = user_id

    @property
    def _key(self) -> str:
        return f"{DAILY_KEY_PREFIX}{self.user_id}"

    def records(self) -> Dict[str, Dict[str, Any]]:
        """All stored records keyed by date."""
        return dict(self._storage.get(self._key) or {})

    def has_answered(self, date: Optional[str] = None) -> bool:
        record = self.records().get(date or today_string())
        return bool(record and record.get("answered"))

    def get_answer(self, date: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """The stored record for ``date``, or None."""
        return self.records().get(date or today_string())

    def submit_answer(self, answer_index: Any, date: Optional[str] = None) -> Dict[str, Any]:
        """
        Record the user's answer for ``date``.

        Args:
            answer_index: Submitted option index (non-int values are wrong)
            date: ISO date, defaults to today (UTC)

        Returns:
            Dict with is_correct, correct_answer, user_answer and explanation

        Raises:
            DailyQuizAlreadyAnsweredError: If ``date`` already has an answer
        """
        date = date or today_string()
        daily = todays_question(self._bank, date)
        question = daily.question
        submitted = answer_index if is_answer_index(answer_index) else None
        is_correct = submitted == question.correct_index

        with self._storage.lock(self._key):
            records = self.records()
            existing = records.get(date)
            if existing and existing.get("answered"):
                raise DailyQuizAlreadyAnsweredError(date)

            records[date] = {
                "answered": True,
                "answer_index": submitted,
                "is_correct": is_correct,
                "question_id": question.id,
                "daily_quiz_id": daily.daily_quiz_id,
                "question": question.prompt,
                "correct_index": question.correct_index,
                "explanation": question.explanation,
                "timestamp": utc_now().isoformat(),
            }
            self._storage.set(self._key, records)

        logger.debug(f"User {self.user_id} answered daily quiz {daily.daily_quiz_id}")
        return {
            "date": date,
            "daily_quiz_id": daily.daily_quiz_id,
            "is_correct": is_correct,
            "correct_answer": question.answer_text,
            "user_answer": question.option_text(submitted),
            "explanation": question.explanation,
        }

    def current_streak(self, today: Optional[str] = None) -> int:
        """
        Consecutive correct days ending today or yesterday.

        Today may still be unanswered without breaking the streak; any other
        missing day or a wrong answer ends it.
        """
        records = self.records()
        today = today or today_string()
        streak = 0
        for offset in range(STREAK_LOOKBACK_DAYS):
            record = records.get(shift_date_string(today, -offset))
            if not record or not record.get("answered"):
                if offset > 0:
                    break
            elif record.get("is_correct"):
                streak += 1
            else:
                break
        return streak

    def best_streak(self) -> int:
        """
        Longest run of correct answers in date-key order.

        Gaps between dates do not break a run; only a wrong or unanswered
        record does.
        """
        records = self.records()
        best = running = 0
        for date in sorted(records):
            record = records[date]
            if record.get("answered") and record.get("is_correct"):
                running += 1
                best = max(best, running)
            else:
                running = 0
        return best

    def stats(self, today: Optional[str] = None) -> Dict[str, Any]:
        records = self.records()
        total = len(records)
        correct = sum(1 for r in records.values() if r.get("is_correct"))
        return {
            "total_answered": total,
            "correct_answers": correct,
            "accuracy": round(correct / total * 100) if total else 0,
            "current_streak": self.current_streak(today),
            "best_streak": self.best_streak(),
        }

    def clear(self) -> None:
        self._storage.delete(self._key)
