"""
Per-user exposure tracking for full tests.

Records which question ids each user has already been served so that full
tests never repeat a question until the bank is exhausted. Practice attempts
never touch this record.

State lives in an injected ``KeyValueStorage`` under ``exposure:<user_id>``
as a JSON list of ids, in the order they were served.
"""
import logging
from typing import Any, Iterable, List

from iqscalar.models import QuestionId
from iqscalar.storage import KeyValueStorage

logger = logging.getLogger(__name__)

EXPOSURE_KEY_PREFIX = "exposure:"


class ExposureTracker:
    """
    Tracks the question ids served to each user in full-test mode.

    The record grows monotonically through ``mark_used`` and is only ever
    cleared wholesale through ``reset``.

    Example usage:
        tracker = ExposureTracker(InMemoryStorage())

        with tracker.locked("u1"):
            seen = set(tracker.get_seen("u1"))
            ...
            tracker.mark_used("u1", [q.id for q in selected])
    """

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    @staticmethod
    def _key(user_id: str) -> str:
        return f"{EXPOSURE_KEY_PREFIX}{user_id}"

    def get_seen(self, user_id: str) -> List[QuestionId]:
        """Ids already served to ``user_id``, oldest first."""
        return list(self._storage.get(self._key(user_id)) or [])

    def mark_used(self, user_id: str, question_ids: Iterable[QuestionId]) -> None:
        """Append ``question_ids`` to the user's exposure record."""
        updated = self.get_seen(user_id) + list(question_ids)
        self._storage.set(self._key(user_id), updated)

    def reset(self, user_id: str) -> None:
        """Clear the user's exposure record entirely."""
        self._storage.delete(self._key(user_id))
        logger.info(f"Exposure record reset for user {user_id}")

    def count(self, user_id: str) -> int:
        """Number of questions served to the user since the last reset."""
        return len(self.get_seen(user_id))

    def locked(self, user_id: str) -> Any:
        """Context manager serializing read-modify-write for ``user_id``."""
        return self._storage.lock(self._key(user_id))
