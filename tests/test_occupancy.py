"""
Unit tests for slot occupancy and double-booking detection.

Definition used here:
- Special periods and special days block lessons.
- Lessons and Error placeholders do not.
- A conflict is two events on the same (schedule, date, period).
"""

from __future__ import annotations

import unittest
from datetime import date

from lessonplan.model import EventCategories, EventTypes, ScheduleEvent
from lessonplan.occupancy import (
    blocked_slots,
    blocks_lessons,
    event_at,
    find_conflicts,
    is_period_occupied_by_non_lesson_event,
    occupied_periods,
)

D1 = date(2025, 9, 1)
D2 = date(2025, 9, 2)


def _ev(event_id: int, day: date, period: int, event_type: str, category: str | None = None) -> ScheduleEvent:
    return ScheduleEvent(
        id=event_id, schedule_id=1, date=day, period=period, event_type=event_type, event_category=category
    )


class TestOccupancy(unittest.TestCase):
    def setUp(self) -> None:
        self.events = [
            _ev(-1, D1, 1, EventTypes.LESSON, EventCategories.LESSON),
            _ev(-2, D1, 2, EventTypes.LUNCH, EventCategories.SPECIAL_PERIOD),
            _ev(-3, D1, 3, EventTypes.ERROR),
            _ev(-4, D2, 1, EventTypes.HOLIDAY, EventCategories.SPECIAL_DAY),
        ]

    def test_blocks_lessons(self) -> None:
        self.assertFalse(blocks_lessons(self.events[0]))
        self.assertTrue(blocks_lessons(self.events[1]))
        self.assertFalse(blocks_lessons(self.events[2]))
        self.assertTrue(blocks_lessons(self.events[3]))

    def test_period_occupied_by_non_lesson_event(self) -> None:
        self.assertFalse(is_period_occupied_by_non_lesson_event(D1, 1, self.events))
        self.assertTrue(is_period_occupied_by_non_lesson_event(D1, 2, self.events))
        self.assertFalse(is_period_occupied_by_non_lesson_event(D1, 3, self.events))
        self.assertFalse(is_period_occupied_by_non_lesson_event(D1, 4, self.events))

    def test_blocked_slots_per_period(self) -> None:
        self.assertEqual(blocked_slots(self.events, 1), {D2})
        self.assertEqual(blocked_slots(self.events, 2), {D1})
        self.assertEqual(blocked_slots(self.events, 3), set())

    def test_lookup_helpers(self) -> None:
        self.assertEqual(occupied_periods(D1, self.events), {1, 2, 3})
        found = event_at(D2, 1, self.events)
        self.assertIsNotNone(found)
        self.assertEqual(found.id, -4)
        self.assertIsNone(event_at(D2, 2, self.events))

    def test_no_conflicts_when_every_slot_is_single(self) -> None:
        self.assertEqual(find_conflicts(self.events), [])

    def test_double_booked_slot_is_reported_once(self) -> None:
        events = self.events + [_ev(-5, D1, 1, EventTypes.ASSEMBLY, EventCategories.SPECIAL_DAY)]
        confs = find_conflicts(events)
        self.assertEqual(len(confs), 1)
        a, b = confs[0]
        self.assertEqual({a.id, b.id}, {-1, -5})

    def test_other_schedule_is_no_conflict(self) -> None:
        other = ScheduleEvent(id=9, schedule_id=2, date=D1, period=1, event_type=EventTypes.LESSON)
        self.assertEqual(find_conflicts(self.events + [other]), [])


if __name__ == "__main__":
    unittest.main()
