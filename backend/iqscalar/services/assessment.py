"""
Assessment service: the single object that wires banks, storage and the core
engine together for one process.

A test or practice attempt is a one-shot session:

1. ``start_test`` / ``start_practice`` allocate questions and persist a session
   record (owner, mode, question ids, start time) with a TTL
2. ``submit`` consumes the session exactly once, scores the answers, and
   records the result in the user's history

Sessions only hold question ids; the questions themselves are looked up in the
bank again at submission time.
"""
import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from iqscalar.core.config import settings
from iqscalar.core.daily_quiz import DailyQuestion, DailyQuizTracker, todays_question
from iqscalar.core.datetime_utils import ensure_timezone_aware, utc_now
from iqscalar.core.exposure import ExposureTracker
from iqscalar.core.graceful_failure import graceful_failure_decorator
from iqscalar.core.history import TestHistoryRecorder
from iqscalar.core.question_bank import QuestionBank
from iqscalar.core.scoring import ScoredResult, score_submission
from iqscalar.core.test_composition import QuestionAllocator
from iqscalar.models import Achievement, AllocatedQuestion, HistoryEntry
from iqscalar.storage import KeyValueStorage

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"
MODE_TEST = "test"
MODE_PRACTICE = "practice"


class SessionNotFoundError(Exception):
    """Raised when a session id is unknown, expired or already submitted."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class SessionAccessError(Exception):
    """Raised when a user submits a session that belongs to someone else."""

    def __init__(self, session_id: str, user_id: str):
        self.session_id = session_id
        self.user_id = user_id
        super().__init__(f"User {user_id} does not own session {session_id}")


class CategoryNotFoundError(ValueError):
    """Raised when practice is requested for a category with no questions."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"No practice questions in category {category!r}")


@dataclass(frozen=True)
class StartedSession:
    session_id: str
    mode: str
    started_at: str
    questions: List[AllocatedQuestion]
    category: Optional[str] = None


@dataclass(frozen=True)
class SubmissionOutcome:
    result: ScoredResult
    duration_seconds: Optional[int]
    history_entry: Optional[HistoryEntry]


class AssessmentService:
    """
    Process-wide assessment engine.

    Constructed once at startup (or per test) and passed to request handlers;
    it holds no module-level state.
    """

    def __init__(
        self,
        bank: QuestionBank,
        storage: KeyValueStorage,
        practice_bank: Optional[QuestionBank] = None,
        rng: Optional[random.Random] = None,
        session_ttl: Optional[int] = None,
    ):
        self.bank = bank
        self.practice_bank = practice_bank if practice_bank is not None else bank
        self.storage = storage
        self.exposure = ExposureTracker(storage)
        self.allocator = QuestionAllocator(
            bank, self.exposure, practice_bank=self.practice_bank, rng=rng
        )
        self.history = TestHistoryRecorder(storage)
        self.achievements = self.history.achievements
        self.session_ttl = session_ttl or settings.SESSION_TTL_SECONDS

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @staticmethod
    def _session_key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    def _open_session(
        self,
        user_id: str,
        mode: str,
        questions: List[AllocatedQuestion],
        category: Optional[str] = None,
    ) -> StartedSession:
        session = StartedSession(
            session_id=uuid.uuid4().hex,
            mode=mode,
            started_at=utc_now().isoformat(),
            questions=questions,
            category=category,
        )
        self.storage.set(
            self._session_key(session.session_id),
            {
                "user_id": user_id,
                "mode": mode,
                "question_ids": [q.id for q in questions],
                "started_at": session.started_at,
            },
            ttl=self.session_ttl,
        )
        logger.info(
            f"Started {mode} session",
            extra={
                "session_id": session.session_id,
                "user_identifier": user_id,
                "question_count": len(questions),
            },
        )
        return session

    def start_test(self, user_id: str, count: Optional[int] = None) -> StartedSession:
        """
        Allocate a full test for ``user_id``.

        Raises:
            ValueError: If count is less than 1
            InsufficientQuestionsError: If count exceeds the bank size
        """
        if count is None:
            count = settings.TEST_TOTAL_QUESTIONS
        questions = self.allocator.allocate(user_id, count)
        return self._open_session(user_id, MODE_TEST, questions)

    def start_practice(
        self,
        user_id: str,
        count: Optional[int] = None,
        category: Optional[str] = None,
    ) -> StartedSession:
        """
        Allocate a practice attempt. Practice never touches exposure.

        Raises:
            ValueError: If count is less than 1
            CategoryNotFoundError: If ``category`` has no practice questions
        """
        if count is None:
            count = settings.PRACTICE_DEFAULT_QUESTIONS
        if category and category not in self.practice_bank.categories():
            raise CategoryNotFoundError(category)
        questions = self.allocator.allocate_practice(count, category=category)
        return self._open_session(user_id, MODE_PRACTICE, questions, category=category)

    def _consume_session(self, session_id: str, user_id: str, answer_count: int) -> Dict[str, Any]:
        key = self._session_key(session_id)
        with self.storage.lock(key):
            session = self.storage.get(key)
            if session is None:
                raise SessionNotFoundError(session_id)
            if session["user_id"] != user_id:
                raise SessionAccessError(session_id, user_id)
            if answer_count > len(session["question_ids"]):
                raise ValueError(
                    f"Received {answer_count} answers for "
                    f"{len(session['question_ids'])} questions"
                )
            self.storage.delete(key)
        return session

    def submit(
        self, session_id: str, user_id: str, answers: Sequence[Any]
    ) -> SubmissionOutcome:
        """
        Score a session's answers and record the result.

        Args:
            session_id: Id returned by start_test/start_practice
            user_id: Caller; must own the session
            answers: Option indices in served order (None for skipped)

        Raises:
            SessionNotFoundError: Unknown, expired or already submitted session
            SessionAccessError: Session belongs to another user
            ValueError: More answers than questions
        """
        session = self._consume_session(session_id, user_id, len(answers))
        is_practice = session["mode"] == MODE_PRACTICE
        bank = self.practice_bank if is_practice else self.bank

        questions = []
        for position, question_id in enumerate(session["question_ids"], start=1):
            question = bank.get(question_id)
            if question is None:
                logger.warning(
                    f"Question {question_id} from session {session_id} is no longer in the bank"
                )
                continue
            questions.append(AllocatedQuestion(question=question, position=position))

        result = score_submission(questions, list(answers), is_practice=is_practice)
        duration = self._elapsed_seconds(session.get("started_at"))
        entry = self._record_history(user_id, result, duration)

        logger.info(
            f"Scored {session['mode']} session: {result.correct_answers}/"
            f"{result.total_questions} correct",
            extra={"session_id": session_id, "user_identifier": user_id},
        )
        return SubmissionOutcome(result=result, duration_seconds=duration, history_entry=entry)

    @staticmethod
    def _elapsed_seconds(started_at: Optional[str]) -> Optional[int]:
        if not started_at:
            return None
        started = ensure_timezone_aware(datetime.fromisoformat(started_at))
        return max(0, int((utc_now() - started).total_seconds()))

    @graceful_failure_decorator("record test history", log_level=logging.ERROR, exc_info=True)
    def _record_history(
        self, user_id: str, result: ScoredResult, duration_seconds: Optional[int]
    ) -> HistoryEntry:
        return self.history.add_result(user_id, result, duration_seconds=duration_seconds)

    # ------------------------------------------------------------------
    # Progress and statistics
    # ------------------------------------------------------------------

    def progress(self, user_id: str) -> Dict[str, Any]:
        return self.allocator.user_progress(user_id)

    def bank_statistics(self) -> Dict[str, Any]:
        return self.bank.statistics()

    def practice_categories(self) -> Dict[str, int]:
        """Practice categories with their question counts."""
        return self.practice_bank.statistics()["questions_per_category"]

    def user_history(self, user_id: str, limit: Optional[int] = None) -> List[HistoryEntry]:
        history = self.history.get_history(user_id)
        return history[:limit] if limit else history

    def user_stats(self, user_id: str) -> Dict[str, Any]:
        return self.history.user_stats(user_id)

    def practice_stats(self, user_id: str) -> Dict[str, Any]:
        return self.history.practice_stats(user_id)

    def user_achievements(self, user_id: str) -> List[Achievement]:
        return self.achievements.get(user_id)

    # ------------------------------------------------------------------
    # Daily quiz
    # ------------------------------------------------------------------

    def _daily_tracker(self, user_id: str) -> DailyQuizTracker:
        return DailyQuizTracker(self.storage, self.bank, user_id)

    def daily_question(self, date: Optional[str] = None) -> DailyQuestion:
        return todays_question(self.bank, date)

    def submit_daily_answer(
        self, user_id: str, answer_index: Any, date: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Raises:
            DailyQuizAlreadyAnsweredError: If the date was already answered
        """
        return self._daily_tracker(user_id).submit_answer(answer_index, date=date)

    def has_answered_daily(self, user_id: str, date: Optional[str] = None) -> bool:
        return self._daily_tracker(user_id).has_answered(date)

    def daily_answer(self, user_id: str, date: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return self._daily_tracker(user_id).get_answer(date)

    def daily_stats(self, user_id: str, today: Optional[str] = None) -> Dict[str, Any]:
        return self._daily_tracker(user_id).stats(today)

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def clear_user_data(self, user_id: str) -> None:
        """Remove history, achievements, exposure and daily quiz data for ``user_id``."""
        self.history.clear(user_id)
        self.exposure.reset(user_id)
        self._daily_tracker(user_id).clear()
        logger.info(f"Cleared all data for user {user_id}")
