"""
Unit tests for adding and removing special days.

Same reference calendar as the shifting tests: Mon-Fri from 2025-09-01
to 2025-09-12, period 1 teaches course 7 (lessons 101-103).
"""

from __future__ import annotations

import unittest
from datetime import date

from lessonplan.generate import generate_schedule
from lessonplan.model import (
    EventCategories,
    EventTypes,
    PeriodAssignment,
    ScheduleEvent,
    TeachingConfiguration,
    is_error,
    is_lesson,
)
from lessonplan.occupancy import find_conflicts
from lessonplan.special_days import (
    SpecialDayData,
    SpecialDayError,
    add_special_day,
    remove_special_event,
    special_days_for_date,
    validate_special_day,
)
from lessonplan.state import EventNotFoundError, Schedule

MON = date(2025, 9, 1)
TUE = date(2025, 9, 2)
WED = date(2025, 9, 3)
THU = date(2025, 9, 4)
LAST_FRI = date(2025, 9, 12)


def _schedule() -> Schedule:
    config = TeachingConfiguration(
        teaching_days=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
        periods_per_day=2,
        start_date=MON,
        end_date=LAST_FRI,
    )
    assignments = [
        PeriodAssignment(period=1, course_id=7),
        PeriodAssignment(period=2, special_period_type=EventTypes.LUNCH),
    ]
    schedule, _ = generate_schedule(config, assignments, {7: [101, 102, 103]}, schedule_id=1)
    return schedule


def _holiday(day: date, periods: list[int] | None = None) -> SpecialDayData:
    return SpecialDayData(
        date=day,
        periods=periods or [1],
        event_type=EventTypes.HOLIDAY,
        title="Labor Day",
        description="School closed",
    )


def _lesson_dates(schedule: Schedule) -> dict[int, date]:
    return {ev.lesson_id: ev.date for ev in schedule.events_for_period(1) if is_lesson(ev)}


class TestAddSpecialDay(unittest.TestCase):
    def test_holiday_on_lesson_shifts_forward(self) -> None:
        schedule = _schedule()
        result = add_special_day(schedule, _holiday(TUE))

        self.assertEqual(len(result.created), 1)
        self.assertEqual(len(result.shifts), 1)
        self.assertEqual(_lesson_dates(schedule), {101: MON, 102: WED, 103: THU})

        holiday = schedule.event_at(TUE, 1)
        self.assertEqual(holiday.event_type, EventTypes.HOLIDAY)
        self.assertEqual(holiday.event_category, EventCategories.SPECIAL_DAY)
        self.assertEqual(holiday.comment, "Labor Day - School closed")
        self.assertEqual(find_conflicts(schedule.events()), [])

    def test_special_day_replaces_error_placeholder(self) -> None:
        schedule = _schedule()
        self.assertTrue(is_error(schedule.event_at(LAST_FRI, 1)))

        result = add_special_day(schedule, _holiday(LAST_FRI))

        self.assertEqual(result.shifts, [])
        self.assertEqual(schedule.event_at(LAST_FRI, 1).event_type, EventTypes.HOLIDAY)
        self.assertEqual(find_conflicts(schedule.events()), [])

    def test_invalid_data_is_rejected(self) -> None:
        schedule = _schedule()
        data = SpecialDayData(date=date(2025, 10, 1), periods=[0, 3], event_type=EventTypes.LESSON, title="")
        with self.assertRaises(SpecialDayError) as ctx:
            add_special_day(schedule, data)
        self.assertGreaterEqual(len(ctx.exception.errors), 4)
        self.assertEqual(schedule.version, 1)

    def test_validation_messages(self) -> None:
        schedule = _schedule()
        errors = validate_special_day(
            SpecialDayData(date=TUE, periods=[1, 1], event_type="", title="x" * 101, description="y" * 501),
            schedule,
        )
        self.assertIn("Periods must not repeat", errors)
        self.assertIn("Event type is required", errors)
        self.assertIn("Title must be 100 characters or less", errors)
        self.assertIn("Description must be 500 characters or less", errors)
        self.assertEqual(validate_special_day(_holiday(TUE), schedule), [])

    def test_non_teaching_day_is_refused(self) -> None:
        schedule = _schedule()
        saturday = date(2025, 9, 6)
        self.assertIn(
            "Date 2025-09-06 is not a teaching day", validate_special_day(_holiday(saturday), schedule)
        )
        with self.assertRaises(SpecialDayError):
            add_special_day(schedule, _holiday(saturday))

    def test_period_limit_without_configuration(self) -> None:
        errors = validate_special_day(_holiday(TUE, [11]), Schedule())
        self.assertIn("Period 11 must be between 1 and 10", errors)

    def test_occupied_slot_is_refused(self) -> None:
        schedule = _schedule()
        # period 2 holds the recurring lunch
        with self.assertRaises(SpecialDayError):
            add_special_day(schedule, _holiday(TUE, [1, 2]))

        add_special_day(schedule, _holiday(TUE))
        with self.assertRaises(SpecialDayError):
            add_special_day(schedule, _holiday(TUE))

    def test_special_days_for_date(self) -> None:
        schedule = _schedule()
        add_special_day(schedule, _holiday(TUE))
        types = sorted(ev.event_type for ev in special_days_for_date(schedule, TUE))
        self.assertEqual(types, [EventTypes.HOLIDAY, EventTypes.LUNCH])
        self.assertEqual(special_days_for_date(schedule, date(2025, 9, 6)), [])


class TestRemoveSpecialEvent(unittest.TestCase):
    def test_remove_restores_lessons(self) -> None:
        schedule = _schedule()
        added = add_special_day(schedule, _holiday(TUE))

        result = remove_special_event(schedule, added.created[0].id)

        self.assertEqual(_lesson_dates(schedule), {101: MON, 102: TUE, 103: WED})
        self.assertEqual(result.created, [])
        self.assertTrue(is_error(schedule.event_at(THU, 1)))
        self.assertEqual(find_conflicts(schedule.events()), [])

    def test_freed_slot_without_lesson_gets_placeholder(self) -> None:
        schedule = _schedule()
        added = add_special_day(schedule, _holiday(LAST_FRI))

        result = remove_special_event(schedule, added.created[0].id)

        self.assertEqual(len(result.created), 1)
        self.assertTrue(is_error(schedule.event_at(LAST_FRI, 1)))
        self.assertTrue(result.warnings)

    def test_remove_on_non_teaching_day_does_not_shift(self) -> None:
        schedule = _schedule()
        saturday = date(2025, 9, 6)
        holiday_id = schedule.next_local_id()
        schedule.upsert_event(
            ScheduleEvent(
                id=holiday_id,
                schedule_id=1,
                date=saturday,
                period=1,
                event_type=EventTypes.HOLIDAY,
                event_category=EventCategories.SPECIAL_DAY,
            )
        )
        before = _lesson_dates(schedule)

        result = remove_special_event(schedule, holiday_id)

        self.assertEqual(result.shifts, [])
        self.assertEqual(result.warnings, [])
        self.assertEqual(result.created, [])
        self.assertNotIn(holiday_id, schedule)
        self.assertEqual(_lesson_dates(schedule), before)

    def test_remove_unknown_or_lesson(self) -> None:
        schedule = _schedule()
        with self.assertRaises(EventNotFoundError):
            remove_special_event(schedule, 12345)

        lesson = schedule.event_at(MON, 1)
        with self.assertRaises(SpecialDayError):
            remove_special_event(schedule, lesson.id)
        self.assertIn(lesson.id, schedule)


if __name__ == "__main__":
    unittest.main()
