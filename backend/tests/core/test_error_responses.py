"""
Tests for standardized error messages and HTTPException builders.
"""
import pytest
from fastapi import HTTPException

from iqscalar.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_conflict,
    raise_forbidden,
    raise_not_found,
)


class TestBuilders:
    @pytest.mark.parametrize(
        "builder,status_code",
        [
            (raise_bad_request, 400),
            (raise_forbidden, 403),
            (raise_not_found, 404),
            (raise_conflict, 409),
        ],
    )
    def test_status_codes(self, builder, status_code):
        with pytest.raises(HTTPException) as exc_info:
            builder("Something went wrong.")
        assert exc_info.value.status_code == status_code
        assert exc_info.value.detail == "Something went wrong."


class TestMessages:
    """Message templates follow sentence case and end with a period."""

    @pytest.mark.parametrize(
        "message",
        [
            ErrorMessages.SESSION_ACCESS_DENIED,
            ErrorMessages.SESSION_NOT_FOUND,
            ErrorMessages.TOO_MANY_ANSWERS,
            ErrorMessages.STORAGE_UNAVAILABLE,
            ErrorMessages.insufficient_questions(50, 40),
            ErrorMessages.unknown_category("Spatial"),
            ErrorMessages.daily_already_answered("2024-06-10"),
            ErrorMessages.daily_answer_not_found("2024-06-10"),
        ],
    )
    def test_format(self, message):
        assert message[0].isupper()
        assert message.endswith(".")

    def test_templates_include_values(self):
        assert "40" in ErrorMessages.insufficient_questions(50, 40)
        assert "50" in ErrorMessages.insufficient_questions(50, 40)
        assert "'Spatial'" in ErrorMessages.unknown_category("Spatial")
        assert "2024-06-10" in ErrorMessages.daily_already_answered("2024-06-10")
