"""
Category partitioning for question banks.

Pure functions over a sequence of questions. Category listings are sorted so
that quota assignment during allocation does not depend on bank order.
"""
from typing import Dict, Iterable, List

from iqscalar.models import Question


def list_categories(questions: Iterable[Question]) -> List[str]:
    """
    Return the distinct category labels carried by ``questions``.

    Args:
        questions: Questions to inspect

    Returns:
        Sorted list of unique category labels
    """
    return sorted({q.category for q in questions})


def questions_in_category(questions: Iterable[Question], category: str) -> List[Question]:
    """Questions carrying ``category``, in their original order."""
    return [q for q in questions if q.category == category]


def partition_by_category(questions: Iterable[Question]) -> Dict[str, List[Question]]:
    """
    Group questions by category.

    Returns:
        Dict mapping each label (sorted) to its questions in original order
    """
    groups: Dict[str, List[Question]] = {}
    for question in questions:
        groups.setdefault(question.category, []).append(question)
    return {category: groups[category] for category in sorted(groups)}


def category_counts(questions: Iterable[Question]) -> Dict[str, int]:
    """Number of questions per category."""
    return {
        category: len(members)
        for category, members in partition_by_category(questions).items()
    }
