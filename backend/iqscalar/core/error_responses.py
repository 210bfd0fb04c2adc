"""
Standardized error response messages and builders.

This module provides consistent error messages and HTTPException builders
for the entire API, so user-facing wording lives in one place and stays
separate from log messages.

Error Message Format Guidelines:
- Use sentence case (capitalize first letter only)
- End with a period for complete sentences
- Include relevant IDs in parentheses when helpful for debugging: "(ID: abc)"
- Use "Please try again later." for transient server errors

Usage:
    from iqscalar.core.error_responses import ErrorMessages, raise_not_found

    if session is None:
        raise_not_found(ErrorMessages.SESSION_NOT_FOUND)

    raise_conflict(ErrorMessages.daily_already_answered("2024-06-01"))
"""

from typing import NoReturn

from fastapi import HTTPException, status


class ErrorMessages:
    """Centralized error message constants and templates.

    Naming Convention:
    - Constants: SCREAMING_SNAKE_CASE for static messages
    - Methods: snake_case for templates that accept parameters
    """

    # ==========================================================================
    # Authorization Errors (403)
    # ==========================================================================
    SESSION_ACCESS_DENIED = "Not authorized to access this session."

    # ==========================================================================
    # Not Found Errors (404)
    # ==========================================================================
    SESSION_NOT_FOUND = "Session not found. It may have expired or already been submitted."

    # ==========================================================================
    # Bad Request Errors (400)
    # ==========================================================================
    TOO_MANY_ANSWERS = "More answers were submitted than questions were served."

    # ==========================================================================
    # Service Unavailable Errors (503)
    # ==========================================================================
    STORAGE_UNAVAILABLE = "Assessment storage is temporarily unavailable. Please try again later."

    # ==========================================================================
    # Template Methods for Dynamic Messages
    # ==========================================================================
    @staticmethod
    def insufficient_questions(requested: int, available: int) -> str:
        """Message when a test asks for more questions than the bank holds."""
        return (
            f"Only {available} questions are available, but {requested} were requested. "
            "Please request fewer questions."
        )

    @staticmethod
    def unknown_category(category: str) -> str:
        return f"No practice questions found for category '{category}'."

    @staticmethod
    def daily_already_answered(date: str) -> str:
        """Message when the daily quiz for a date was already answered."""
        return f"The daily quiz for {date} has already been answered. Come back tomorrow."

    @staticmethod
    def daily_answer_not_found(date: str) -> str:
        return f"No daily quiz answer recorded for {date}."


# ==============================================================================
# HTTPException Builder Functions
# ==============================================================================


def raise_bad_request(detail: str) -> NoReturn:
    """Raise a 400 Bad Request exception.

    Use for client errors where the request is malformed or invalid.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 400 Bad Request
    """
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


def raise_forbidden(detail: str) -> NoReturn:
    """Raise a 403 Forbidden exception.

    Use when the caller asks for a resource that belongs to another user.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 403 Forbidden
    """
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail,
    )


def raise_not_found(detail: str) -> NoReturn:
    """Raise a 404 Not Found exception.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 404 Not Found
    """
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def raise_conflict(detail: str) -> NoReturn:
    """Raise a 409 Conflict exception.

    Use when the request conflicts with current state (e.g., a second daily answer).

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 409 Conflict
    """
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    )
