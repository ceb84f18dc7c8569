"""
Unit tests for teaching-day arithmetic.

Weekday numbers: 0 = Sunday ... 6 = Saturday.
2025-09-01 is a Monday.
"""

import unittest
from datetime import date

from lessonplan.teaching_days import (
    count_teaching_days,
    is_teaching_day,
    next_teaching_day,
    previous_teaching_day,
    teaching_day_numbers,
    teaching_days_between,
    weekday_number,
)

MON_FRI = [1, 2, 3, 4, 5]


class TestTeachingDays(unittest.TestCase):
    def test_weekday_number_starts_on_sunday(self) -> None:
        self.assertEqual(weekday_number(date(2025, 9, 7)), 0)
        self.assertEqual(weekday_number(date(2025, 9, 1)), 1)
        self.assertEqual(weekday_number(date(2025, 9, 6)), 6)

    def test_day_names_are_case_insensitive_and_may_be_short(self) -> None:
        self.assertEqual(teaching_day_numbers(["Monday", "wed", "FRIDAY"]), [1, 3, 5])
        self.assertEqual(teaching_day_numbers(["Funday", "M"]), [])

    def test_is_teaching_day(self) -> None:
        self.assertTrue(is_teaching_day(date(2025, 9, 1), MON_FRI))
        self.assertFalse(is_teaching_day(date(2025, 9, 6), MON_FRI))

    def test_next_teaching_day_is_inclusive(self) -> None:
        self.assertEqual(next_teaching_day(date(2025, 9, 3), MON_FRI), date(2025, 9, 3))
        # Saturday -> Monday
        self.assertEqual(next_teaching_day(date(2025, 9, 6), MON_FRI), date(2025, 9, 8))

    def test_next_teaching_day_without_teaching_days_gives_up(self) -> None:
        self.assertEqual(next_teaching_day(date(2025, 9, 1), []), date(2025, 9, 2))

    def test_previous_teaching_day_is_strict(self) -> None:
        self.assertEqual(previous_teaching_day(date(2025, 9, 8), MON_FRI), date(2025, 9, 5))
        self.assertEqual(previous_teaching_day(date(2025, 9, 3), MON_FRI), date(2025, 9, 2))
        self.assertEqual(previous_teaching_day(date(2025, 9, 3), []), date(2025, 9, 2))

    def test_teaching_days_between(self) -> None:
        days = teaching_days_between(date(2025, 9, 1), date(2025, 9, 12), MON_FRI)
        self.assertEqual(len(days), 10)
        self.assertEqual(days[0], date(2025, 9, 1))
        self.assertEqual(days[-1], date(2025, 9, 12))
        self.assertNotIn(date(2025, 9, 6), days)

        self.assertEqual(teaching_days_between(date(2025, 9, 12), date(2025, 9, 1), MON_FRI), [])
        self.assertEqual(count_teaching_days(date(2025, 9, 1), date(2025, 9, 7), [2, 4]), 2)


if __name__ == "__main__":
    unittest.main()
