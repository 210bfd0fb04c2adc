"""
Tests for category partitioning.
"""
from iqscalar.core.categories import (
    category_counts,
    list_categories,
    partition_by_category,
    questions_in_category,
)
from iqscalar.models import Question


def _q(qid, category):
    return Question(id=qid, category=category, prompt="?", options=("a", "b"), correct_index=0)


class TestCategories:
    """Tests for category listing and grouping."""

    def test_list_is_sorted_and_unique(self):
        questions = [_q(1, "b"), _q(2, "a"), _q(3, "b"), _q(4, "c")]
        assert list_categories(questions) == ["a", "b", "c"]

    def test_listing_independent_of_bank_order(self):
        questions = [_q(1, "b"), _q(2, "a"), _q(3, "c")]
        assert list_categories(questions) == list_categories(list(reversed(questions)))

    def test_questions_in_category_keeps_order(self):
        questions = [_q(1, "b"), _q(2, "a"), _q(3, "b")]
        assert [q.id for q in questions_in_category(questions, "b")] == [1, 3]
        assert questions_in_category(questions, "zzz") == []

    def test_partition_and_counts(self):
        questions = [_q(1, "b"), _q(2, "a"), _q(3, "b")]
        groups = partition_by_category(questions)
        assert list(groups) == ["a", "b"]
        assert [q.id for q in groups["b"]] == [1, 3]
        assert category_counts(questions) == {"a": 1, "b": 2}

    def test_empty(self):
        assert list_categories([]) == []
        assert partition_by_category([]) == {}
