"""
Schedule generation.

Walks every teaching day of the configured range (in calendar order) and,
inside a day, every period assignment, emitting exactly one event per
(day, assigned period):

- course period      -> next unused lesson of that course, or an Error event
                        once the lesson list is exhausted (exhaustion is sticky)
- special period     -> recurring SpecialPeriod event (Lunch, Hall Duty, ...)
- unassigned period  -> Error event ("period not configured")

Generated events get negative ids (-1, -2, ...) because they are not persisted yet.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from lessonplan.model import (
    EventCategories,
    EventTypes,
    NO_LESSON_COMMENT,
    GenerationResult,
    PeriodAssignment,
    ScheduleEvent,
    TeachingConfiguration,
)
from lessonplan.state import Schedule
from lessonplan.teaching_days import teaching_day_numbers, teaching_days_between

_LOG = logging.getLogger(__name__)

UNASSIGNED_COMMENT = "Period not configured - assign a course or special period type"


class _LessonCursor:
    """
    Position in one course's lesson list for one period.
    Only advances when a lesson was actually placed.
    """

    def __init__(self, lesson_ids: Sequence[int]) -> None:
        self._lesson_ids = list(lesson_ids)
        self._index = 0

    def take(self) -> int | None:
        if self._index >= len(self._lesson_ids):
            return None
        lesson_id = self._lesson_ids[self._index]
        self._index += 1
        return lesson_id


def _check_inputs(config: TeachingConfiguration, assignments: Sequence[PeriodAssignment]) -> list[str]:
    issues: list[str] = []
    if not assignments:
        issues.append("Cannot create schedule: No period assignments configured")
    if not teaching_day_numbers(config.teaching_days):
        issues.append("Cannot create schedule: No teaching days configured")
    if config.end_date < config.start_date:
        issues.append("Cannot create schedule: End date is before start date")

    seen: set[int] = set()
    for pa in assignments:
        if not (1 <= pa.period <= config.periods_per_day):
            issues.append(f"Cannot create schedule: Period {pa.period} is outside 1..{config.periods_per_day}")
        if pa.period in seen:
            issues.append(f"Cannot create schedule: Period {pa.period} is assigned more than once")
        seen.add(pa.period)
    return issues


def generate_events(
    config: TeachingConfiguration,
    assignments: Sequence[PeriodAssignment],
    lesson_lists: Mapping[int, Sequence[int]],
    schedule_id: int = 0,
) -> GenerationResult:
    """
    Build the full event list for the configured date range.

    Configuration problems do not raise: the result comes back with
    success=False, no events and the list of issues.
    """
    issues = _check_inputs(config, assignments)
    if issues:
        for issue in issues:
            _LOG.warning(issue)
        return GenerationResult(success=False, events=[], errors=issues)

    warnings: list[str] = []
    ordered = sorted(assignments, key=lambda pa: pa.period)

    cursors: dict[tuple[int, int], _LessonCursor] = {}
    for pa in ordered:
        if pa.course_id is None:
            continue
        lessons = lesson_lists.get(pa.course_id)
        if lessons is None:
            warnings.append(f"Course {pa.course_id} (period {pa.period}) has no lesson list")
            lessons = []
        elif not lessons:
            warnings.append(f"Course {pa.course_id} (period {pa.period}) has no lessons")
        cursors[(pa.period, pa.course_id)] = _LessonCursor(lessons)

    day_numbers = teaching_day_numbers(config.teaching_days)
    days = teaching_days_between(config.start_date, config.end_date, day_numbers)

    events: list[ScheduleEvent] = []
    next_id = -1

    for day in days:
        for pa in ordered:
            if pa.course_id is not None:
                lesson_id = cursors[(pa.period, pa.course_id)].take()
                if lesson_id is not None:
                    ev = ScheduleEvent(
                        id=next_id,
                        schedule_id=schedule_id,
                        course_id=pa.course_id,
                        date=day,
                        period=pa.period,
                        lesson_id=lesson_id,
                        event_type=EventTypes.LESSON,
                        event_category=EventCategories.LESSON,
                    )
                else:
                    ev = ScheduleEvent(
                        id=next_id,
                        schedule_id=schedule_id,
                        course_id=pa.course_id,
                        date=day,
                        period=pa.period,
                        event_type=EventTypes.ERROR,
                        comment=NO_LESSON_COMMENT,
                    )
            elif pa.special_period_type:
                ev = ScheduleEvent(
                    id=next_id,
                    schedule_id=schedule_id,
                    date=day,
                    period=pa.period,
                    event_type=pa.special_period_type,
                    event_category=EventCategories.SPECIAL_PERIOD,
                    comment=pa.notes or None,
                )
            else:
                ev = ScheduleEvent(
                    id=next_id,
                    schedule_id=schedule_id,
                    date=day,
                    period=pa.period,
                    event_type=EventTypes.ERROR,
                    comment=UNASSIGNED_COMMENT,
                )

            events.append(ev)
            next_id -= 1

    if not events:
        warnings.append("No schedule events generated")

    _LOG.info(
        "Generated %d events for %d teaching days and %d period assignments",
        len(events),
        len(days),
        len(ordered),
    )
    return GenerationResult(success=True, events=events, warnings=warnings)


def generate_schedule(
    config: TeachingConfiguration,
    assignments: Sequence[PeriodAssignment],
    lesson_lists: Mapping[int, Sequence[int]],
    schedule_id: int = 0,
) -> tuple[Schedule | None, GenerationResult]:
    """
    Generate events and wrap them in a fresh in-memory Schedule.
    Returns (None, result) when generation was refused.
    """
    result = generate_events(config, assignments, lesson_lists, schedule_id=schedule_id)
    if not result.success:
        return None, result

    title = config.title or (f"{config.school_year} Schedule" if config.school_year else "Schedule")
    schedule = Schedule(schedule_id=schedule_id, title=title, config=config, in_memory=True)
    schedule.set_events(result.events)
    return schedule, result
