"""
Slot occupancy queries.

A slot is one (date, period) pair. Placement rule used by generation and shifting:
    a slot is blocked for a lesson iff it holds an event whose event_type
    is set and is neither "Lesson" nor "Error"

Error events are placeholders for missing content, not commitments,
so a lesson may move onto them.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from lessonplan.model import EventTypes, ScheduleEvent

_NON_BLOCKING_TYPES = {EventTypes.LESSON, EventTypes.ERROR}


def blocks_lessons(event: ScheduleEvent) -> bool:
    return bool(event.event_type) and event.event_type not in _NON_BLOCKING_TYPES


def is_period_occupied_by_non_lesson_event(day: date, period: int, events: Iterable[ScheduleEvent]) -> bool:
    """
    True iff a special (non-lesson, non-error) event sits at (day, period).
    """
    for ev in events:
        if ev.date == day and ev.period == period and blocks_lessons(ev):
            return True
    return False


def occupied_periods(day: date, events: Iterable[ScheduleEvent]) -> set[int]:
    """
    Periods that hold any event on the given day (used for rendering).
    """
    return {ev.period for ev in events if ev.date == day}


def event_at(day: date, period: int, events: Iterable[ScheduleEvent]) -> Optional[ScheduleEvent]:
    for ev in events:
        if ev.date == day and ev.period == period:
            return ev
    return None


def blocked_slots(events: Iterable[ScheduleEvent], period: int) -> set[date]:
    """
    Dates on which the given period is blocked for lessons.

    Shifting asks the same question for many candidate dates,
    so it builds this set once instead of rescanning the events.
    """
    return {ev.date for ev in events if ev.period == period and blocks_lessons(ev)}


def find_conflicts(events: Iterable[ScheduleEvent]) -> list[tuple[ScheduleEvent, ScheduleEvent]]:
    """
    Find double-booked slots: pairs (A,B) of events sharing the same
    (schedule_id, date, period). Each pair appears once, in input order.
    """
    by_slot: dict[tuple[int, date, int], list[ScheduleEvent]] = defaultdict(list)
    for ev in events:
        by_slot[(ev.schedule_id, *ev.slot)].append(ev)

    conflicts: list[tuple[ScheduleEvent, ScheduleEvent]] = []
    for slot_events in by_slot.values():
        # usually 1 event per slot, so the inner loops rarely run
        for i in range(len(slot_events)):
            for j in range(i + 1, len(slot_events)):
                conflicts.append((slot_events[i], slot_events[j]))

    conflicts.sort(key=lambda pair: (pair[0].date, pair[0].period))
    return conflicts
