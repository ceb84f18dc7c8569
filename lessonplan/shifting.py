"""
Lesson shifting.

When a special event (holiday, assembly, ...) is put on a slot that holds a
lesson, the lessons of that period have to move out of its way; when the
special event is removed again they move back. Only the affected period is
touched, every other period keeps its events.

Forward shift (special event inserted at (insertion_date, period)):
    lessons of the period dated on/after insertion_date, ascending, are
    re-dated one by one onto the next available slot after insertion_date.
    A lesson that would land after the configured end date is turned into
    an Error event instead.

Backward shift (special event at (deleted_date, period) removed):
    lessons of the period dated after deleted_date move to the nearest
    available slot before their current date, so the freed slot is
    filled first and the rest compact toward it. A lesson that finds no slot
    stays where it is (logged).

"Available" = teaching day, inside the configured range, and not blocked by
a non-lesson event (see occupancy.py). Error events never block.

After lesson dates are computed, the period's Error placeholders are
reconciled so the slot invariant (one event per date and period) holds:
placeholders under a moved lesson are relocated to vacated slots, vacated
slots left over get a fresh placeholder, placeholders left over are removed.

plan_* functions are pure and return a ShiftResult; shift_* functions
apply that result to a Schedule as a single batch (one version bump).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Optional

from lessonplan.model import NO_LESSON_COMMENT, EventTypes, ScheduleEvent, TeachingConfiguration, is_error, is_lesson
from lessonplan.occupancy import blocked_slots
from lessonplan.state import Schedule
from lessonplan.teaching_days import ONE_DAY, is_teaching_day, next_teaching_day, teaching_day_numbers

_LOG = logging.getLogger(__name__)

SHIFT_FORWARD = "shift-forward"
SHIFT_BACKWARD = "shift-backward"


@dataclass
class ShiftResult:
    operation: str
    period: int
    affected_lessons: int = 0
    shifted_lessons: int = 0
    updated: list[ScheduleEvent] = field(default_factory=list)
    created: list[ScheduleEvent] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)
    converted: list[ScheduleEvent] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def errors_created(self) -> int:
        return len(self.converted)

    @property
    def changed(self) -> bool:
        return bool(self.updated or self.created or self.removed)


def overflow_comment(period: int) -> str:
    return f"ERROR: Lesson pushed past schedule end (Period {period})"


# ---------------------------------------------------------------------------
# Slot search
# ---------------------------------------------------------------------------


def _next_available(
    start: date, blocked: set[date], day_numbers: list[int], last: date
) -> Optional[date]:
    candidate = start
    while candidate <= last:
        if is_teaching_day(candidate, day_numbers) and candidate not in blocked:
            return candidate
        candidate += ONE_DAY
    return None


def _previous_available(
    start: date, blocked: set[date], day_numbers: list[int], first: date
) -> Optional[date]:
    candidate = start
    while candidate >= first:
        if is_teaching_day(candidate, day_numbers) and candidate not in blocked:
            return candidate
        candidate -= ONE_DAY
    return None


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def _period_lessons(events: Iterable[ScheduleEvent], period: int) -> list[ScheduleEvent]:
    return [ev for ev in events if ev.period == period and is_lesson(ev) and ev.lesson_id is not None]


def plan_forward_shift(
    events: Iterable[ScheduleEvent],
    insertion_date: date,
    period: int,
    config: TeachingConfiguration,
    first_new_id: int = -1,
) -> ShiftResult:
    """
    Compute the forward shift caused by a special event at (insertion_date, period).

    `events` is the schedule content AFTER the special event was inserted.
    New placeholder events get ids first_new_id, first_new_id - 1, ...
    """
    events = list(events)
    result = ShiftResult(operation=SHIFT_FORWARD, period=period)

    lessons = sorted(
        (ev for ev in _period_lessons(events, period) if ev.date >= insertion_date),
        key=lambda ev: (ev.date, ev.id),
    )
    result.affected_lessons = len(lessons)
    if not lessons:
        result.warnings.append(f"No lessons found to shift in period {period}")
        return result

    day_numbers = teaching_day_numbers(config.teaching_days)
    blocked = blocked_slots(events, period)

    new_dates: dict[int, date] = {}
    overflow: list[ScheduleEvent] = []

    candidate: Optional[date] = next_teaching_day(insertion_date + ONE_DAY, day_numbers)
    for lesson in lessons:
        if candidate is not None:
            candidate = _next_available(candidate, blocked, day_numbers, config.end_date)
        if candidate is None:
            overflow.append(lesson)
            continue
        new_dates[lesson.id] = candidate
        candidate = next_teaching_day(candidate + ONE_DAY, day_numbers)

    if overflow:
        msg = f"{len(overflow)} lessons converted to errors due to schedule overflow (period {period})"
        _LOG.warning(msg)
        result.warnings.append(msg)

    _reconcile(result, events, lessons, new_dates, overflow, blocked, first_new_id)
    return result


def plan_backward_shift(
    events: Iterable[ScheduleEvent],
    deleted_date: date,
    period: int,
    config: TeachingConfiguration,
    first_new_id: int = -1,
) -> ShiftResult:
    """
    Compute the backward shift after the special event at (deleted_date, period)
    was removed. `events` must no longer contain the removed event.
    """
    events = list(events)
    result = ShiftResult(operation=SHIFT_BACKWARD, period=period)

    period_lessons = _period_lessons(events, period)
    lessons = sorted(
        (ev for ev in period_lessons if ev.date > deleted_date),
        key=lambda ev: (ev.date, ev.id),
        reverse=True,
    )
    result.affected_lessons = len(lessons)
    if not lessons:
        result.warnings.append(f"No lessons found to shift backward in period {period}")
        return result

    day_numbers = teaching_day_numbers(config.teaching_days)
    blocked = blocked_slots(events, period)

    # Lessons on/before the freed slot stay put; nothing may move past them.
    floor = config.start_date
    for ev in period_lessons:
        if ev.date <= deleted_date and ev.date + ONE_DAY > floor:
            floor = ev.date + ONE_DAY

    new_dates: dict[int, date] = {}
    # planned earliest-first so a lesson that cannot move fences off the later ones
    for lesson in reversed(lessons):
        target = _previous_available(lesson.date - ONE_DAY, blocked, day_numbers, floor)
        if target is None:
            msg = f"Could not find previous available date for period {period} before {lesson.date.isoformat()}"
            _LOG.warning(msg)
            result.warnings.append(msg)
            floor = lesson.date + ONE_DAY
            continue
        new_dates[lesson.id] = target
        floor = target + ONE_DAY

    _reconcile(result, events, lessons, new_dates, [], blocked, first_new_id)
    return result


def _reconcile(
    result: ShiftResult,
    events: list[ScheduleEvent],
    lessons: list[ScheduleEvent],
    new_dates: dict[int, date],
    overflow: list[ScheduleEvent],
    blocked: set[date],
    first_new_id: int,
) -> None:
    period = result.period

    moved: list[ScheduleEvent] = []
    for lesson in lessons:
        target = new_dates.get(lesson.id)
        if target is not None and target != lesson.date:
            moved.append(replace(lesson, date=target))
    result.shifted_lessons = len(moved)
    result.updated.extend(moved)

    overflow_ids = {lesson.id for lesson in overflow}
    staying = {lesson.date for lesson in lessons if lesson.id not in new_dates and lesson.id not in overflow_ids}
    old_dates = {lesson.date for lesson in lessons}
    occupied = set(new_dates.values()) | staying

    vacated = sorted(d for d in old_dates - occupied if d not in blocked)

    placeholders = {ev.date: ev for ev in events if ev.period == period and is_error(ev)}
    displaced = [placeholders[d] for d in sorted(occupied - old_dates) if d in placeholders]

    # Overflowed lessons become Error events and take the first free slots.
    for lesson in overflow:
        converted = replace(
            lesson,
            lesson_id=None,
            event_type=EventTypes.ERROR,
            event_category=None,
            comment=overflow_comment(period),
        )
        if vacated:
            converted.date = vacated.pop(0)
            result.updated.append(converted)
        else:
            # no slot inside the range: the lesson drops out of the visible schedule
            result.removed.append(lesson.id)
        result.converted.append(converted)

    for placeholder in displaced:
        if vacated:
            result.updated.append(replace(placeholder, date=vacated.pop(0)))
        else:
            result.removed.append(placeholder.id)

    course_id = lessons[0].course_id if lessons else None
    next_id = first_new_id
    for day in vacated:
        result.created.append(
            ScheduleEvent(
                id=next_id,
                schedule_id=lessons[0].schedule_id,
                course_id=course_id,
                date=day,
                period=period,
                event_type=EventTypes.ERROR,
                comment=NO_LESSON_COMMENT,
            )
        )
        next_id -= 1


# ---------------------------------------------------------------------------
# Applying to a schedule
# ---------------------------------------------------------------------------


def _config_for(schedule: Schedule, config: Optional[TeachingConfiguration]) -> TeachingConfiguration:
    cfg = config or schedule.config
    if cfg is None:
        raise ValueError("Cannot shift lessons: schedule has no teaching configuration")
    return cfg


def apply_shift(schedule: Schedule, result: ShiftResult) -> None:
    if not result.changed:
        return
    schedule.apply(upserts=result.updated + result.created, removals=result.removed)
    _LOG.info(
        "%s period %d: %d lessons shifted, %d converted to errors",
        result.operation,
        result.period,
        result.shifted_lessons,
        result.errors_created,
    )


def shift_lessons_forward(
    schedule: Schedule,
    insertion_date: date,
    period: int,
    config: Optional[TeachingConfiguration] = None,
) -> ShiftResult:
    cfg = _config_for(schedule, config)
    with schedule.lock:
        result = plan_forward_shift(
            schedule.events(), insertion_date, period, cfg, first_new_id=schedule.next_local_id()
        )
        apply_shift(schedule, result)
    return result


def shift_lessons_backward(
    schedule: Schedule,
    deleted_date: date,
    period: int,
    config: Optional[TeachingConfiguration] = None,
) -> ShiftResult:
    cfg = _config_for(schedule, config)
    with schedule.lock:
        result = plan_backward_shift(
            schedule.events(), deleted_date, period, cfg, first_new_id=schedule.next_local_id()
        )
        apply_shift(schedule, result)
    return result
