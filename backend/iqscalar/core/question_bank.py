"""
Question bank loading and normalization.

Raw bank documents come in two option encodings:

- an ordered list: ``"options": ["9", "10", "12"]``
- a letter-keyed map: ``"options": {"A": "9", "B": "10", "C": "12"}``

and give the answer either as a letter (``"B"``), as the literal option text
(``"10"``), or, for already-normalized records, as an explicit
``correct_index``. The shape is resolved once here into ``Question`` records;
nothing downstream inspects raw options again.

Normalization is a filter: records with an empty prompt, fewer than two
options or an unresolvable answer are dropped, and duplicate ids keep their
first occurrence. A bank that cannot be fetched or parsed is replaced by a
built-in fallback bank so callers always get a non-empty ``QuestionBank``.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import httpx

from iqscalar.core.categories import (
    category_counts,
    list_categories,
    questions_in_category,
)
from iqscalar.core.config import settings
from iqscalar.core.fallback_questions import FALLBACK_TEST_QUESTIONS
from iqscalar.core.graceful_failure import graceful_failure
from iqscalar.models import Question, QuestionId, is_answer_index

logger = logging.getLogger(__name__)

# Answer letters map to option indices in this order
ANSWER_LETTERS: Tuple[str, ...] = ("A", "B", "C", "D", "E")

# Top-level keys that may wrap the list of question records
DOCUMENT_LIST_KEYS: Tuple[str, ...] = ("iq_questions", "practice_questions", "questions")

DEFAULT_CATEGORY = "General"


@dataclass(frozen=True)
class OptionList:
    """Options given as an ordered list."""

    values: Tuple[str, ...]


@dataclass(frozen=True)
class LetterMap:
    """Options given as a letter-keyed map, stored in sorted key order."""

    entries: Tuple[Tuple[str, str], ...]

    @property
    def values(self) -> Tuple[str, ...]:
        return tuple(value for _, value in self.entries)


OptionsShape = Union[OptionList, LetterMap]


def parse_options(raw: Any) -> Optional[OptionsShape]:
    """
    Resolve a raw ``options`` value into its tagged shape.

    Non-string option values are discarded.

    Returns:
        OptionList or LetterMap, or None for an unsupported encoding
    """
    if isinstance(raw, (list, tuple)):
        return OptionList(tuple(value for value in raw if isinstance(value, str)))
    if isinstance(raw, dict):
        entries = sorted((str(key), value) for key, value in raw.items())
        return LetterMap(
            tuple((key, value) for key, value in entries if isinstance(value, str))
        )
    return None


def resolve_correct_index(
    options: Sequence[str], answer: Any, explicit_index: Any = None
) -> Optional[int]:
    """
    Work out the index of the correct option.

    Resolution order:
    1. an explicit integer index (already-normalized records)
    2. an answer letter A-E
    3. the first option string-equal to the answer

    Returns:
        The index, or None when it cannot be resolved or is out of range
    """
    if is_answer_index(explicit_index):
        index = explicit_index
    elif answer is None:
        return None
    else:
        answer_text = answer if isinstance(answer, str) else str(answer)
        letter = answer_text.strip()
        if letter in ANSWER_LETTERS:
            index = ANSWER_LETTERS.index(letter)
        elif answer_text in options:
            index = list(options).index(answer_text)
        else:
            return None

    if 0 <= index < len(options):
        return index
    return None


def _first_present(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def normalize_question_record(
    item: Any, position: int, id_prefix: str = "iq"
) -> Optional[Question]:
    """
    Normalize a single raw record.

    Args:
        item: Raw record from a bank document
        position: Zero-based position in the document (used for missing ids)
        id_prefix: Prefix for generated ids

    Returns:
        The Question, or None if the record fails the question invariants
    """
    if not isinstance(item, dict):
        return None

    shape = parse_options(item.get("options"))
    if shape is None:
        return None
    options = shape.values

    prompt = _first_present(item, "question_text", "question", "prompt")
    if not isinstance(prompt, str) or not prompt.strip() or len(options) < 2:
        return None

    correct_index = resolve_correct_index(
        options,
        item.get("answer"),
        _first_present(item, "correct_index", "correctIndex"),
    )
    if correct_index is None:
        return None

    question_id = item.get("id")
    if question_id is None:
        question_id = f"{id_prefix}_{position}"

    return Question(
        id=question_id,
        category=str(item.get("category") or DEFAULT_CATEGORY),
        prompt=prompt,
        options=options,
        correct_index=correct_index,
        explanation=str(item.get("explanation") or ""),
    )


def extract_records(document: Any) -> List[Any]:
    """Return the list of raw records from a bank document."""
    if isinstance(document, list):
        return document
    if isinstance(document, dict):
        for key in DOCUMENT_LIST_KEYS:
            records = document.get(key)
            if isinstance(records, list):
                return records
    return []


def normalize_question_bank(document: Any, id_prefix: str = "iq") -> List[Question]:
    """
    Normalize a raw bank document into deduplicated questions.

    Args:
        document: Parsed JSON document (list, or object wrapping a list)
        id_prefix: Prefix for generated ids

    Returns:
        Questions in document order, first occurrence of each id kept
    """
    questions: List[Question] = []
    seen_ids: set = set()
    dropped = 0

    for position, item in enumerate(extract_records(document)):
        question = normalize_question_record(item, position, id_prefix=id_prefix)
        if question is None:
            dropped += 1
            continue
        if question.id in seen_ids:
            dropped += 1
            continue
        seen_ids.add(question.id)
        questions.append(question)

    if dropped:
        logger.debug(f"Dropped {dropped} invalid or duplicate question records")

    return questions


class QuestionBank:
    """
    Immutable, ordered collection of normalized questions.

    Created once per process by ``load_question_bank`` and read-only
    thereafter; replace it wholesale to reload.
    """

    def __init__(
        self,
        questions: Iterable[Question],
        source: str = "inline",
        is_fallback: bool = False,
    ):
        unique: Dict[QuestionId, Question] = {}
        for question in questions:
            unique.setdefault(question.id, question)
        self._questions: Tuple[Question, ...] = tuple(unique.values())
        self._by_id = unique
        self.source = source
        self.is_fallback = is_fallback

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __getitem__(self, index: int) -> Question:
        return self._questions[index]

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def ids(self) -> List[QuestionId]:
        return [q.id for q in self._questions]

    def get(self, question_id: QuestionId) -> Optional[Question]:
        """Look up a question by id."""
        return self._by_id.get(question_id)

    def categories(self) -> List[str]:
        """Sorted distinct category labels."""
        return list_categories(self._questions)

    def questions_in(self, category: str) -> List[Question]:
        """Questions carrying ``category``."""
        return questions_in_category(self._questions, category)

    def statistics(self, questions_per_test: Optional[int] = None) -> Dict[str, Any]:
        """
        Summarize the bank.

        Args:
            questions_per_test: Test size (defaults to TEST_TOTAL_QUESTIONS)

        Returns:
            Dict with total_questions, categories, questions_per_category,
            total_possible_tests and is_fallback
        """
        if questions_per_test is None:
            questions_per_test = settings.TEST_TOTAL_QUESTIONS
        counts = category_counts(self._questions)
        return {
            "total_questions": len(self._questions),
            "categories": len(counts),
            "questions_per_category": counts,
            "total_possible_tests": len(self._questions) // questions_per_test,
            "is_fallback": self.is_fallback,
        }


def fetch_bank_document(source: str, timeout: float) -> Any:
    """
    Fetch and parse a bank document.

    Args:
        source: ``http(s)://`` URL or local file path
        timeout: HTTP request timeout in seconds

    Raises:
        httpx.HTTPError: On network failure, timeout or non-2xx status
        OSError: If the local file cannot be read
        ValueError: If the content is not valid JSON
    """
    if source.startswith(("http://", "https://")):
        with httpx.Client(timeout=timeout) as client:
            response = client.get(source)
            response.raise_for_status()
            return response.json()

    return json.loads(Path(source).read_text(encoding="utf-8"))


def load_question_bank(
    source: str,
    *,
    timeout: Optional[float] = None,
    fallback: Sequence[Question] = FALLBACK_TEST_QUESTIONS,
    id_prefix: str = "iq",
) -> QuestionBank:
    """
    Load a question bank, degrading to the built-in fallback on any failure.

    Never raises for fetch or parse problems: a missing file, a network
    error, a timeout, a non-2xx status, malformed JSON or a document with no
    valid questions all produce a bank built from ``fallback``.

    Args:
        source: ``http(s)://`` URL or local file path
        timeout: HTTP timeout in seconds (defaults to BANK_FETCH_TIMEOUT_SECONDS)
        fallback: Questions to use when loading fails
        id_prefix: Prefix for generated ids of records without one

    Returns:
        A non-empty QuestionBank
    """
    if timeout is None:
        timeout = settings.BANK_FETCH_TIMEOUT_SECONDS

    questions: List[Question] = []
    with graceful_failure("load question bank", logger, context={"source": source}):
        document = fetch_bank_document(source, timeout)
        questions = normalize_question_bank(document, id_prefix=id_prefix)

    if questions:
        logger.info(f"Loaded {len(questions)} questions from {source}")
        return QuestionBank(questions, source=source)

    logger.warning(
        f"Falling back to {len(fallback)} built-in questions (source: {source})"
    )
    return QuestionBank(fallback, source="fallback", is_fallback=True)
