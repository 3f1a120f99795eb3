"""Shared validation utilities"""

import re
import uuid
from datetime import date, datetime, timedelta
from typing import Optional

PREFERENCE_KEY_PATTERN = re.compile(r"^[a-z][a-z0-9_]{0,63}$")
SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError):
        return False


def validate_hour(hour: int) -> int:
    """Hours on the weekly grid run 0-23"""
    if hour < 0 or hour > 23:
        raise ValueError("Hour must be between 0 and 23")
    return hour


def validate_day_of_week(day: int) -> int:
    """Day indexes run 0-6 in both day conventions"""
    if day < 0 or day > 6:
        raise ValueError("Day of week must be between 0 and 6")
    return day


def validate_date_range(start: date, end: date) -> None:
    """
    Validate an inclusive date range.

    Raises:
        ValueError: If the range ends before it starts
    """
    if end < start:
        raise ValueError("End date must be on or after start date")


def validate_time_window(start: datetime, end: datetime, max_length: timedelta) -> None:
    """
    Validate a half-open time window [start, end).

    Raises:
        ValueError: If the window is empty, reversed, or longer than max_length
    """
    if end <= start:
        raise ValueError("End time must be after start time")
    if end - start > max_length:
        raise ValueError(f"Time window cannot exceed {int(max_length.total_seconds() // 3600)} hours")


def validate_preference_key(key: Optional[str]) -> str:
    """
    Validate a user preference key.

    Keys are lowercase identifiers (letters, digits, underscores) of at most 64 characters.

    Raises:
        ValueError: If the key is empty or malformed
    """
    if not key:
        raise ValueError("Preference key is required")

    key = key.strip()
    if not PREFERENCE_KEY_PATTERN.match(key):
        raise ValueError("Preference key must be a lowercase identifier (a-z, 0-9, _)")
    return key


def slugify(name: str) -> str:
    """Build a URL slug from a game name (e.g., 'World of Warcraft' -> 'world-of-warcraft')"""
    return SLUG_PATTERN.sub("-", name.strip().lower()).strip("-")
