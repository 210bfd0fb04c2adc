"""
Tests for answer scoring and the ability estimate.
"""
import re

import pytest

from iqscalar.core.scoring import (
    calculate_ability_estimate,
    generate_result_id,
    iq_to_percentile,
    performance_level,
    round_half_up,
    score_submission,
)
from iqscalar.models import AllocatedQuestion
from tests.conftest import correct_answers_for, make_questions


@pytest.fixture
def twenty():
    """20 questions, 5 per category."""
    return make_questions(per_category=5)


class TestRoundHalfUp:
    """Tests for half-up rounding."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (86.5, 87), (2.4, 2), (2.6, 3), (0.0, 0)],
    )
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestAbilityEstimate:
    """Tests for the accuracy to ability mapping."""

    def test_bounds(self):
        assert calculate_ability_estimate(100) == 145
        assert calculate_ability_estimate(0) == 70

    def test_midpoint(self):
        assert calculate_ability_estimate(50) == 100

    def test_floor_applies_below_seventeen_percent(self):
        # 55 + 0.9 * 10 = 64, below the floor
        assert calculate_ability_estimate(10) == 70

    def test_half_rounds_up(self):
        # 55 + 0.9 * 35 = 86.5
        assert calculate_ability_estimate(35) == 87

    def test_monotonic(self):
        estimates = [calculate_ability_estimate(p) for p in range(0, 101, 5)]
        assert estimates == sorted(estimates)
        assert all(70 <= e <= 145 for e in estimates)


class TestPercentile:
    """Tests for percentile conversion."""

    def test_known_values(self):
        assert iq_to_percentile(100) == 50.0
        assert iq_to_percentile(115) == 84.1
        assert iq_to_percentile(85) == 15.9
        assert iq_to_percentile(145) == 99.9

    def test_custom_distribution(self):
        assert iq_to_percentile(50, mean=50, sd=10) == 50.0


class TestPerformanceLevel:
    @pytest.mark.parametrize(
        "percentage,label",
        [
            (100, "Exceptional"),
            (90, "Exceptional"),
            (89.9, "Above Average"),
            (80, "Above Average"),
            (75, "Good"),
            (60, "Average"),
            (50, "Below Average"),
            (49.9, "Needs Improvement"),
            (0, "Needs Improvement"),
        ],
    )
    def test_bands(self, percentage, label):
        assert performance_level(percentage) == label


class TestResultId:
    def test_test_prefix(self):
        assert re.fullmatch(r"test_\d+_[0-9a-f]{9}", generate_result_id())

    def test_practice_prefix(self):
        assert re.fullmatch(r"practice_\d+_[0-9a-f]{9}", generate_result_id(is_practice=True))

    def test_unique(self):
        assert generate_result_id() != generate_result_id()


class TestScoreSubmission:
    """Tests for scoring a full submission."""

    def test_all_correct(self, twenty):
        result = score_submission(twenty, correct_answers_for(twenty))
        assert result.score == 20
        assert result.correct_answers == 20
        assert result.wrong_answers == 0
        assert result.percentage == 100.0
        assert result.ability_estimate == 145
        assert result.performance_level == "Exceptional"
        assert result.is_practice is False

    def test_all_unanswered(self, twenty):
        result = score_submission(twenty, [None] * 20)
        assert result.score == 0
        assert result.wrong_answers == 20
        assert result.ability_estimate == 70
        assert all(o.submitted_index is None for o in result.outcomes)
        assert all(o.user_answer_text == "" for o in result.outcomes)

    def test_short_answer_list_leaves_trailing_unanswered(self, twenty):
        answers = correct_answers_for(twenty)[:10]
        result = score_submission(twenty, answers)
        assert result.correct_answers == 10
        assert result.percentage == 50.0
        assert result.ability_estimate == 100
        assert result.outcomes[15].submitted_index is None

    def test_seven_of_twenty(self, twenty):
        answers = correct_answers_for(twenty)
        # q0-q6 right, the rest wrong by one option
        answers = answers[:7] + [(a + 1) % 4 for a in answers[7:]]
        result = score_submission(twenty, answers)
        assert result.correct_answers == 7
        assert result.percentage == 35.0
        assert result.ability_estimate == 87

    @pytest.mark.parametrize("bad", [True, False, -1, 4, 99, "0", 1.0])
    def test_invalid_answers_are_incorrect(self, twenty, bad):
        question = twenty[0]  # correct_index 0
        result = score_submission([question], [bad])
        assert result.outcomes[0].is_correct is False
        assert result.outcomes[0].submitted_index in (None, -1, 4, 99)

    def test_bool_never_matches_index(self, questions):
        # q1 has correct_index 1; True == 1 must not count
        result = score_submission([questions[1]], [True])
        assert result.correct_answers == 0
        assert result.outcomes[0].submitted_index is None

    def test_outcome_details(self, twenty):
        result = score_submission(twenty[:2], [0, 3])
        first, second = result.outcomes
        assert first.is_correct is True
        assert first.correct_answer_text == "w"
        assert first.user_answer_text == "w"
        assert second.is_correct is False
        assert second.correct_answer_text == "x"
        assert second.user_answer_text == "z"
        assert [o.position for o in result.outcomes] == [1, 2]

    def test_keeps_allocated_positions(self, twenty):
        allocated = [AllocatedQuestion(question=q, position=i + 10) for i, q in enumerate(twenty[:3])]
        result = score_submission(allocated, [None, None, None])
        assert [o.position for o in result.outcomes] == [10, 11, 12]

    def test_category_breakdown(self, twenty):
        answers = correct_answers_for(twenty)
        # Wrong on all five "beta" questions (q5-q9)
        for i in range(5, 10):
            answers[i] = (answers[i] + 1) % 4
        result = score_submission(twenty, answers)

        assert set(result.category_performance) == {"alpha", "beta", "delta", "gamma"}
        assert result.category_performance["alpha"].percentage == 100.0
        assert result.category_performance["beta"].correct == 0
        assert result.category_performance["beta"].total == 5
        assert result.category_performance["beta"].percentage == 0.0

    def test_practice_result(self, twenty):
        result = score_submission(twenty[:4], [0, 1, 2, 3], is_practice=True)
        assert result.is_practice is True
        assert result.result_id.startswith("practice_")

    def test_empty_submission_rejected(self):
        with pytest.raises(ValueError):
            score_submission([], [])

    def test_to_dict(self, twenty):
        result = score_submission(twenty[:2], [0, None])
        data = result.to_dict()
        assert data["score"] == 1
        assert data["percentile"] == iq_to_percentile(result.ability_estimate)
        assert data["outcomes"][1]["submitted_index"] is None
        assert data["category_performance"]["alpha"] == {
            "correct": 1,
            "total": 2,
            "percentage": 50.0,
        }
