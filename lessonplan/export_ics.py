"""
iCalendar (.ics) export.

We convert schedule events into a calendar file that can be imported into:
- Google Calendar
- Outlook
- Apple Calendar

Periods have no clock time, so every event becomes an all-day entry
whose summary starts with the period number ("P3 Lesson 42").
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable

from lessonplan.model import ScheduleEvent, is_error, is_lesson


def _ics_escape(text: str) -> str:
    """
    Escape text for ICS fields (very small subset, sufficient for our use).
    """
    return (
        text.replace("\\", "\\\\").replace("\r\n", "\\n").replace("\n", "\\n").replace(";", "\\;").replace(",", "\\,")
    )


def _summary(ev: ScheduleEvent) -> str:
    if is_lesson(ev):
        label = f"Lesson {ev.lesson_id}"
        if ev.course_id is not None:
            label = f"Course {ev.course_id} {label}"
    else:
        label = ev.event_type
    return f"P{ev.period} {label}"


def export_events_to_ics(
    events: Iterable[ScheduleEvent], out_path: str | Path, include_errors: bool = False
) -> int:
    """
    Export events to an .ics file. Returns number of exported events.
    Error placeholders are skipped unless include_errors is set.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append("BEGIN:VCALENDAR")
    lines.append("VERSION:2.0")
    lines.append("PRODID:-//LessonPlan//EN")
    lines.append("CALSCALE:GREGORIAN")

    dtstamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

    count = 0
    for ev in sorted(events, key=lambda e: (e.date, e.period, e.id)):
        if is_error(ev) and not include_errors:
            continue

        dtstart = ev.date.strftime("%Y%m%d")
        dtend = (ev.date + timedelta(days=1)).strftime("%Y%m%d")
        uid = f"lessonplan-{ev.schedule_id}-{ev.id}-{dtstart}-P{ev.period}"

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_ics_escape(uid)}")
        lines.append(f"DTSTAMP:{dtstamp}")
        lines.append(f"DTSTART;VALUE=DATE:{dtstart}")
        lines.append(f"DTEND;VALUE=DATE:{dtend}")
        lines.append(f"SUMMARY:{_ics_escape(_summary(ev))}")
        if ev.event_category:
            lines.append(f"CATEGORIES:{_ics_escape(ev.event_category)}")
        if isinstance(ev.comment, str) and ev.comment.strip():
            lines.append(f"DESCRIPTION:{_ics_escape(ev.comment.strip())}")
        lines.append("END:VEVENT")
        count += 1

    lines.append("END:VCALENDAR")

    # ICS standard uses CRLF
    out.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return count
