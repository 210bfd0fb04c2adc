"""
Datetime utility functions for handling timezone-aware datetimes and
calendar-date keys.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Return the current datetime in UTC timezone.

    This utility provides a consistent, mockable way to get the current UTC time
    throughout the codebase. Using this function instead of datetime.now(timezone.utc)
    directly enables easier testing through mocking.

    Returns:
        A timezone-aware datetime object representing the current time in UTC.
    """
    return datetime.now(timezone.utc)


def ensure_timezone_aware(dt: Optional[datetime]) -> datetime:
    """
    Ensure a datetime object is timezone-aware (UTC).

    Args:
        dt: The datetime to ensure is timezone-aware

    Returns:
        A timezone-aware datetime object in UTC

    Raises:
        ValueError: If dt is None
    """
    if dt is None:
        raise ValueError("datetime cannot be None")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def today_string() -> str:
    """Today's UTC calendar date as ``YYYY-MM-DD``."""
    return utc_now().date().isoformat()


def parse_date_string(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` calendar date key.

    Raises:
        ValueError: If the value is not an ISO calendar date
    """
    return date.fromisoformat(value)


def shift_date_string(value: str, days: int) -> str:
    """Return the ``YYYY-MM-DD`` key ``days`` days after ``value`` (negative for before)."""
    return (parse_date_string(value) + timedelta(days=days)).isoformat()
