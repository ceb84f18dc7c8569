"""
Teaching-day calendar arithmetic.

All functions are pure: they take dates plus the set of teaching weekday
numbers and never look at schedule state.

Weekday numbering follows the calendar UI convention:
    0 = Sunday, 1 = Monday, ..., 6 = Saturday
(this differs from date.weekday(), where Monday is 0).
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

_LOG = logging.getLogger(__name__)

DAY_NUMBERS = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

# A full week always contains every weekday, two weeks is a generous cap.
MAX_DAY_SEARCH = 14

ONE_DAY = timedelta(days=1)


def _day_number(name: str) -> int | None:
    key = name.strip().lower()
    if key in DAY_NUMBERS:
        return DAY_NUMBERS[key]
    # accept "Mon", "tue", ...
    for full, num in DAY_NUMBERS.items():
        if len(key) >= 3 and full.startswith(key):
            return num
    return None


def teaching_day_numbers(names: Iterable[str]) -> list[int]:
    """
    Convert weekday names into sorted weekday numbers (0=Sunday..6=Saturday).

    Unknown names are dropped silently; configuration validation reports them.
    """
    out: set[int] = set()
    for name in names:
        if not isinstance(name, str):
            continue
        num = _day_number(name)
        if num is not None:
            out.add(num)
    return sorted(out)


def weekday_number(day: date) -> int:
    return (day.weekday() + 1) % 7


def is_teaching_day(day: date, day_numbers: Iterable[int]) -> bool:
    return weekday_number(day) in set(day_numbers)


def next_teaching_day(from_date: date, day_numbers: Iterable[int]) -> date:
    """
    Return the first teaching day on or after from_date.

    With an empty teaching-day set no such day exists; after MAX_DAY_SEARCH
    days we give up and return from_date + 1.
    """
    numbers = set(day_numbers)
    candidate = from_date
    for _ in range(MAX_DAY_SEARCH):
        if weekday_number(candidate) in numbers:
            return candidate
        candidate += ONE_DAY

    _LOG.warning("Could not find teaching day after %s (teaching days: %s)", from_date, sorted(numbers))
    return from_date + ONE_DAY


def previous_teaching_day(from_date: date, day_numbers: Iterable[int]) -> date:
    """
    Return the last teaching day strictly before from_date.
    Falls back to from_date - 1 if none is found within MAX_DAY_SEARCH days.
    """
    numbers = set(day_numbers)
    candidate = from_date - ONE_DAY
    for _ in range(MAX_DAY_SEARCH):
        if weekday_number(candidate) in numbers:
            return candidate
        candidate -= ONE_DAY

    _LOG.warning("Could not find teaching day before %s (teaching days: %s)", from_date, sorted(numbers))
    return from_date - ONE_DAY


def teaching_days_between(start: date, end: date, day_numbers: Iterable[int]) -> list[date]:
    """
    All teaching days in [start, end], ascending. Empty if end < start.
    """
    numbers = set(day_numbers)
    out: list[date] = []
    if not numbers:
        return out

    current = start
    while current <= end:
        if weekday_number(current) in numbers:
            out.append(current)
        current += ONE_DAY
    return out


def count_teaching_days(start: date, end: date, day_numbers: Iterable[int]) -> int:
    return len(teaching_days_between(start, end, day_numbers))
