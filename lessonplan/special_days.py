"""
Special days: inserting and removing non-lesson events on a schedule.

A special day (assembly, holiday, field trip, ...) covers one date and one
or more periods. Adding it puts a SpecialDay event on every covered slot
and pushes the lessons of each period forward; removing one of those events
pulls the lessons of its period back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from lessonplan.config import MAX_PERIODS_PER_DAY
from lessonplan.model import (
    EventCategories,
    NO_LESSON_COMMENT,
    EventTypes,
    ScheduleEvent,
    TeachingConfiguration,
    is_error,
    is_lesson,
)
from lessonplan.occupancy import blocks_lessons
from lessonplan.shifting import ShiftResult, shift_lessons_backward, shift_lessons_forward
from lessonplan.state import Schedule
from lessonplan.teaching_days import is_teaching_day, teaching_day_numbers

_LOG = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


class SpecialDayError(ValueError):
    """Raised for invalid special day data or when a slot cannot take it."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass
class SpecialDayData:
    date: date
    periods: list[int]
    event_type: str
    title: str
    description: Optional[str] = None

    @property
    def comment(self) -> str:
        if self.description:
            return f"{self.title} - {self.description}"
        return self.title


@dataclass
class SpecialDayResult:
    created: list[ScheduleEvent] = field(default_factory=list)
    shifts: list[ShiftResult] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        out: list[str] = []
        for shift in self.shifts:
            out.extend(shift.warnings)
        return out


def _config_for(schedule: Schedule, config: Optional[TeachingConfiguration]) -> TeachingConfiguration:
    cfg = config or schedule.config
    if cfg is None:
        raise SpecialDayError(["Schedule has no teaching configuration"])
    return cfg


def validate_special_day(
    data: SpecialDayData, schedule: Schedule, config: Optional[TeachingConfiguration] = None
) -> list[str]:
    """
    Return all problems with the special day data (empty list = valid).
    """
    errors: list[str] = []
    cfg = config or schedule.config

    if data.date is None:
        errors.append("Date is required")
    elif cfg is not None and not (cfg.start_date <= data.date <= cfg.end_date):
        errors.append(f"Date {data.date.isoformat()} is outside the schedule range")
    elif cfg is not None and not is_teaching_day(data.date, teaching_day_numbers(cfg.teaching_days)):
        errors.append(f"Date {data.date.isoformat()} is not a teaching day")

    max_period = cfg.periods_per_day if cfg is not None else MAX_PERIODS_PER_DAY
    if not data.periods:
        errors.append("At least one period must be selected")
    else:
        for period in data.periods:
            if not (1 <= period <= max_period):
                errors.append(f"Period {period} must be between 1 and {max_period}")
        if len(set(data.periods)) != len(data.periods):
            errors.append("Periods must not repeat")

    if not (data.event_type or "").strip():
        errors.append("Event type is required")
    elif data.event_type in (EventTypes.LESSON, EventTypes.ERROR):
        errors.append(f"Event type {data.event_type!r} is not a special event type")

    if not (data.title or "").strip():
        errors.append("Title is required")
    elif len(data.title) > MAX_TITLE_LENGTH:
        errors.append(f"Title must be {MAX_TITLE_LENGTH} characters or less")

    if data.description and len(data.description) > MAX_DESCRIPTION_LENGTH:
        errors.append(f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less")

    if data.date is not None and data.periods:
        for period in data.periods:
            existing = schedule.event_at(data.date, period)
            if existing is not None and blocks_lessons(existing):
                errors.append(f"Period {period} on {data.date.isoformat()} is already occupied")

    return errors


def add_special_day(
    schedule: Schedule, data: SpecialDayData, config: Optional[TeachingConfiguration] = None
) -> SpecialDayResult:
    """
    Insert a SpecialDay event on every requested period and shift lessons forward.
    Raises SpecialDayError if the data is invalid.
    """
    cfg = _config_for(schedule, config)
    errors = validate_special_day(data, schedule, cfg)
    if errors:
        raise SpecialDayError(errors)

    result = SpecialDayResult()
    with schedule.lock:
        for period in sorted(data.periods):
            existing = schedule.event_at(data.date, period)
            removals = [existing.id] if existing is not None and is_error(existing) else []

            event = ScheduleEvent(
                id=schedule.next_local_id(),
                schedule_id=schedule.schedule_id,
                date=data.date,
                period=period,
                event_type=data.event_type,
                event_category=EventCategories.SPECIAL_DAY,
                comment=data.comment,
            )
            schedule.apply(upserts=[event], removals=removals)
            result.created.append(event)

            if existing is not None and is_lesson(existing):
                result.shifts.append(shift_lessons_forward(schedule, data.date, period, cfg))

    _LOG.info(
        "Added special day %r on %s for periods %s",
        data.event_type,
        data.date.isoformat(),
        sorted(data.periods),
    )
    return result


def remove_special_event(
    schedule: Schedule, event_id: int, config: Optional[TeachingConfiguration] = None
) -> SpecialDayResult:
    """
    Remove one special event and pull the lessons of its period back.

    If no lesson moves into the freed slot it gets an Error placeholder,
    so every teaching-day slot keeps an event.
    Raises EventNotFoundError for unknown ids and SpecialDayError for
    events that are lessons or placeholders.
    """
    cfg = _config_for(schedule, config)
    result = SpecialDayResult()

    with schedule.lock:
        event = schedule.get_event(event_id)
        if not blocks_lessons(event):
            raise SpecialDayError([f"Event {event_id} is not a special event"])

        schedule.remove_event(event_id)
        day_numbers = teaching_day_numbers(cfg.teaching_days)
        # a special event on a non-teaching day never displaced a lesson
        if is_teaching_day(event.date, day_numbers):
            result.shifts.append(shift_lessons_backward(schedule, event.date, event.period, cfg))

        in_range = cfg.start_date <= event.date <= cfg.end_date
        if in_range and is_teaching_day(event.date, day_numbers) and schedule.event_at(event.date, event.period) is None:
            placeholder = ScheduleEvent(
                id=schedule.next_local_id(),
                schedule_id=schedule.schedule_id,
                course_id=event.course_id,
                date=event.date,
                period=event.period,
                event_type=EventTypes.ERROR,
                comment=NO_LESSON_COMMENT,
            )
            schedule.upsert_event(placeholder)
            result.created.append(placeholder)

    _LOG.info("Removed special event %d (%s on %s)", event_id, event.event_type, event.date.isoformat())
    return result


def special_days_for_date(schedule: Schedule, day: date) -> list[ScheduleEvent]:
    return [ev for ev in schedule.events_for_date(day) if blocks_lessons(ev)]
