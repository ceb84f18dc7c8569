"""
Central data model definitions used across the project.

This module defines the canonical structure of schedule events, period
assignments and teaching configurations so that:
- the generator, the shifting engine and the schedule aggregate share the same field names
- storage, export and the remote client all serialize events the same way
- event classification (lesson / error / special) lives in exactly one place
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional


class EventTypes:
    """
    Known values of ScheduleEvent.event_type.

    Special-period and special-day tags are free text in practice,
    these are the ones the calendar offers out of the box.
    """

    LESSON = "Lesson"
    ASSEMBLY = "Assembly"
    TESTING = "Testing"
    HOLIDAY = "Holiday"
    PROFESSIONAL_DEVELOPMENT = "ProfessionalDevelopment"
    FIELD_TRIP = "FieldTrip"
    WEATHER_DELAY = "WeatherDelay"
    EARLY_DISMISSAL = "EarlyDismissal"
    LUNCH = "Lunch"
    HALL_DUTY = "HallDuty"
    CAFETERIA_DUTY = "CafeteriaDuty"
    STUDY_HALL = "StudyHall"
    PREP = "Prep"
    OTHER_DUTY = "OtherDuty"
    ERROR = "Error"


class EventCategories:
    LESSON = "Lesson"
    SPECIAL_PERIOD = "SpecialPeriod"
    SPECIAL_DAY = "SpecialDay"
    # Error events have no category (None)


NO_LESSON_COMMENT = "No lesson assigned - schedule needs more content"


@dataclass
class ScheduleEvent:
    """
    Represents one (date, period) slot assignment of a schedule.

    Negative ids belong to events that only exist in memory,
    positive ids to events that were persisted by the backend.
    """

    id: int
    schedule_id: int
    date: date
    period: int
    event_type: str
    course_id: Optional[int] = None
    lesson_id: Optional[int] = None
    event_category: Optional[str] = None
    comment: Optional[str] = None

    @property
    def slot(self) -> tuple[date, int]:
        return (self.date, self.period)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "schedule_id": self.schedule_id,
            "course_id": self.course_id,
            "date": self.date.isoformat(),
            "period": self.period,
            "lesson_id": self.lesson_id,
            "event_type": self.event_type,
            "event_category": self.event_category,
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduleEvent":
        """
        Build an event from its dict form (as written by to_dict).
        Raises KeyError/ValueError for incomplete or malformed input.
        """
        return cls(
            id=int(data["id"]),
            schedule_id=int(data.get("schedule_id") or 0),
            course_id=_optional_int(data.get("course_id")),
            date=date.fromisoformat(str(data["date"])[:10]),
            period=int(data["period"]),
            lesson_id=_optional_int(data.get("lesson_id")),
            event_type=str(data["event_type"]),
            event_category=data.get("event_category"),
            comment=data.get("comment"),
        )


@dataclass
class PeriodAssignment:
    """
    Static configuration of one period number.

    A period teaches a course (course_id), hosts a recurring non-course
    activity (special_period_type, e.g. "Lunch") or is unassigned (neither).
    """

    period: int
    course_id: Optional[int] = None
    special_period_type: Optional[str] = None
    room: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_course(self) -> bool:
        return self.course_id is not None

    @property
    def is_special(self) -> bool:
        return self.course_id is None and bool(self.special_period_type)

    @property
    def is_unassigned(self) -> bool:
        return self.course_id is None and not self.special_period_type

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "course_id": self.course_id,
            "special_period_type": self.special_period_type,
            "room": self.room,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PeriodAssignment":
        return cls(
            period=int(data["period"]),
            course_id=_optional_int(data.get("course_id")),
            special_period_type=data.get("special_period_type") or None,
            room=data.get("room"),
            notes=data.get("notes"),
        )


@dataclass
class TeachingConfiguration:
    """
    Weekly teaching pattern and the inclusive date range of a schedule.
    """

    teaching_days: List[str]
    periods_per_day: int
    start_date: date
    end_date: date
    title: str = ""
    school_year: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "school_year": self.school_year,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "teaching_days": list(self.teaching_days),
            "periods_per_day": self.periods_per_day,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeachingConfiguration":
        return cls(
            teaching_days=[str(x) for x in data.get("teaching_days", [])],
            periods_per_day=int(data["periods_per_day"]),
            start_date=date.fromisoformat(str(data["start_date"])[:10]),
            end_date=date.fromisoformat(str(data["end_date"])[:10]),
            title=str(data.get("title") or ""),
            school_year=str(data.get("school_year") or ""),
        )


@dataclass
class GenerationResult:
    success: bool
    events: List[ScheduleEvent] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def is_lesson(event: ScheduleEvent) -> bool:
    return event.event_category == EventCategories.LESSON


def is_error(event: ScheduleEvent) -> bool:
    return event.event_type == EventTypes.ERROR


def is_special_day(event: ScheduleEvent) -> bool:
    return event.event_category == EventCategories.SPECIAL_DAY


def is_special_period(event: ScheduleEvent) -> bool:
    return event.event_category == EventCategories.SPECIAL_PERIOD


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)
