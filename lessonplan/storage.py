"""
Persistent local storage for one schedule.

This module manages the file:

    data/schedule.json

It holds everything needed to keep working on a schedule between runs:
- the teaching configuration and period assignments it was generated from
- the lesson lists per course
- all schedule events, the version counter and the in-memory flag

Remote persistence (the schedule backend) lives in remote.py; this file
is the offline copy the CLI works on.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from lessonplan.config import ConfigurationError, configuration_to_dict, parse_configuration
from lessonplan.model import PeriodAssignment, ScheduleEvent, TeachingConfiguration
from lessonplan.state import Schedule


@dataclass
class StoredSchedule:
    schedule: Schedule
    assignments: list[PeriodAssignment] = field(default_factory=list)
    lesson_lists: dict[int, list[int]] = field(default_factory=dict)


def _default_schedule_path() -> Path:
    """
    Return the default path of schedule.json inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "schedule.json"


def schedule_to_dict(
    schedule: Schedule,
    assignments: list[PeriodAssignment] | None = None,
    lesson_lists: dict[int, list[int]] | None = None,
) -> dict[str, Any]:
    config: Optional[TeachingConfiguration] = schedule.config
    return {
        "schedule_id": schedule.schedule_id,
        "title": schedule.title,
        "in_memory": schedule.in_memory,
        "version": schedule.version,
        "configuration": configuration_to_dict(config, assignments or []) if config else None,
        "lesson_lists": {str(cid): list(ids) for cid, ids in sorted((lesson_lists or {}).items())},
        "events": [ev.to_dict() for ev in schedule.events()],
    }


def schedule_from_dict(data: dict[str, Any]) -> StoredSchedule:
    """
    Rebuild a schedule from its stored form.
    Raises ValueError/KeyError/TypeError for structurally broken data.
    """
    config: Optional[TeachingConfiguration] = None
    assignments: list[PeriodAssignment] = []
    if data.get("configuration"):
        config, assignments = parse_configuration(data["configuration"])

    events = [ScheduleEvent.from_dict(x) for x in data.get("events", [])]
    schedule = Schedule(
        schedule_id=int(data.get("schedule_id") or 0),
        title=str(data.get("title") or ""),
        config=config,
        events=events,
        in_memory=bool(data.get("in_memory", True)),
        version=int(data.get("version") or 0),
    )

    lesson_lists: dict[int, list[int]] = {}
    raw_lists = data.get("lesson_lists", {})
    if isinstance(raw_lists, dict):
        for cid, ids in raw_lists.items():
            lesson_lists[int(cid)] = [int(x) for x in ids]

    return StoredSchedule(schedule=schedule, assignments=assignments, lesson_lists=lesson_lists)


def load_schedule(path: str | Path | None = None) -> StoredSchedule | None:
    """
    Load the stored schedule.

    Returns None if the file does not exist or is invalid.
    This function never crashes the application on a missing or corrupted file.
    """
    schedule_path = Path(path) if path is not None else _default_schedule_path()

    # First run: nothing generated yet
    if not schedule_path.exists():
        return None

    try:
        data = json.loads(schedule_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return None
        return schedule_from_dict(data)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, ConfigurationError, KeyError, TypeError, ValueError):
        return None


def save_schedule(
    schedule: Schedule,
    path: str | Path | None = None,
    assignments: list[PeriodAssignment] | None = None,
    lesson_lists: dict[int, list[int]] | None = None,
) -> Path:
    """
    Save the schedule to schedule.json. Creates parent directories if needed.
    """
    schedule_path = Path(path) if path is not None else _default_schedule_path()
    schedule_path.parent.mkdir(parents=True, exist_ok=True)

    payload = schedule_to_dict(schedule, assignments, lesson_lists)
    schedule_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    schedule.mark_saved()
    return schedule_path
