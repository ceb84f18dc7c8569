"""
CLI (Command Line Interface).

Terminal commands for working on one stored schedule, e.g.:

    lessonplan generate config.json courses.json
    lessonplan validate config.json
    lessonplan show --week 2025-W36
    lessonplan add-special 2025-09-10 Assembly "Fall assembly" --periods 1 2
    lessonplan remove-special -12
    lessonplan conflicts
    lessonplan export <file.ics>
    lessonplan push <url>
    lessonplan pull <url> <schedule_id>
    lessonplan interactive

Note:
- The interactive UI and the rich week grid live in lessonplan/interactive.py
- Every other command prints plain text
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

import requests

from lessonplan.config import ConfigurationError, load_configuration, validate_configuration
from lessonplan.export_ics import export_events_to_ics
from lessonplan.generate import generate_schedule
from lessonplan.lessons import lesson_lists_from_courses
from lessonplan.occupancy import find_conflicts
from lessonplan.remote import fetch_schedule, push_schedule_events
from lessonplan.special_days import SpecialDayData, SpecialDayError, add_special_day, remove_special_event
from lessonplan.state import EventNotFoundError
from lessonplan.storage import StoredSchedule, load_schedule, save_schedule

_LOG = logging.getLogger(__name__)


def _load_json(path: Path) -> Any:
    """
    Load JSON from a file.

    CLI behavior: never crash if data is missing or broken.
    Instead, return [] as a safe default so commands can still run.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return []


def _path(args: argparse.Namespace) -> Path | None:
    return Path(args.file) if args.file else None


def _require_schedule(args: argparse.Namespace) -> StoredSchedule | None:
    stored = load_schedule(_path(args))
    if stored is None:
        print("No schedule found. Run 'lessonplan generate' or 'lessonplan pull' first.")
    return stored


def _save(args: argparse.Namespace, stored: StoredSchedule) -> Path:
    return save_schedule(stored.schedule, _path(args), stored.assignments, stored.lesson_lists)


def _cmd_generate(args: argparse.Namespace) -> int:
    """
    Load a configuration and course trees, generate the schedule and save it.
    """
    config, assignments = load_configuration(args.config)

    validation = validate_configuration(config, assignments)
    for warning in validation.warnings:
        print(f"Warning: {warning}")
    if not validation.can_generate:
        for err in validation.errors or ["Nothing to generate: every period is unassigned"]:
            print(f"Error: {err}")
        return 1

    courses = _load_json(Path(args.courses))
    lesson_lists = lesson_lists_from_courses(courses if isinstance(courses, list) else [])

    schedule, result = generate_schedule(config, assignments, lesson_lists)
    for warning in result.warnings:
        print(f"Warning: {warning}")
    if schedule is None:
        for err in result.errors:
            print(f"Error: {err}")
        return 1

    saved = _save(args, StoredSchedule(schedule, assignments, lesson_lists))
    print(f"Generated {len(result.events)} events -> {saved}")
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    config, assignments = load_configuration(args.config)
    validation = validate_configuration(config, assignments)

    for err in validation.errors:
        print(f"Error: {err}")
    for warning in validation.warnings:
        print(f"Warning: {warning}")

    if validation.is_valid:
        print("Configuration is valid." if validation.can_generate else "Configuration is valid but cannot generate.")
    return 0 if validation.is_valid else 1


def _cmd_show(args: argparse.Namespace) -> int:
    from lessonplan.interactive import available_weeks, parse_week, render_week

    stored = _require_schedule(args)
    if stored is None:
        return 1

    if args.week:
        try:
            year, week = parse_week(args.week)
        except ValueError:
            print(f"Invalid week: {args.week} (expected YYYY-Www)")
            return 1
    else:
        weeks = available_weeks(stored.schedule.events())
        if not weeks:
            print("Schedule has no events.")
            return 0
        year, week = weeks[0]

    render_week(stored.schedule, year, week)
    return 0


def _cmd_add_special(args: argparse.Namespace) -> int:
    stored = _require_schedule(args)
    if stored is None:
        return 1

    try:
        day = date.fromisoformat(args.date)
    except ValueError:
        print(f"Invalid date: {args.date} (expected YYYY-MM-DD)")
        return 1

    data = SpecialDayData(
        date=day,
        periods=list(args.periods),
        event_type=args.type,
        title=args.title,
        description=args.description,
    )
    result = add_special_day(stored.schedule, data)
    _save(args, stored)

    shifted = sum(s.shifted_lessons for s in result.shifts)
    converted = sum(s.errors_created for s in result.shifts)
    print(f"Added {len(result.created)} special events, {shifted} lessons shifted, {converted} converted to errors.")
    for warning in result.warnings:
        print(f"Warning: {warning}")
    return 0


def _cmd_remove_special(args: argparse.Namespace) -> int:
    stored = _require_schedule(args)
    if stored is None:
        return 1

    result = remove_special_event(stored.schedule, args.event_id)
    _save(args, stored)

    shifted = sum(s.shifted_lessons for s in result.shifts)
    print(f"Removed event {args.event_id}, {shifted} lessons shifted back.")
    for warning in result.warnings:
        print(f"Warning: {warning}")
    return 0


def _cmd_conflicts(args: argparse.Namespace) -> int:
    """
    Print all slots that hold more than one event.
    """
    stored = _require_schedule(args)
    if stored is None:
        return 1

    confs = find_conflicts(stored.schedule.events())
    if not confs:
        print("No conflicts found.")
        return 0

    print(f"Conflicts found: {len(confs)}")
    for a, b in confs:
        print(f"- {a.date.isoformat()} P{a.period}: #{a.id} {a.event_type}  <->  #{b.id} {b.event_type}")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    """
    Export the schedule into an iCalendar (.ics) file.
    """
    stored = _require_schedule(args)
    if stored is None:
        return 1

    out_path = (args.out or "").strip()
    if not out_path:
        print("Please provide output .ics path.")
        return 1

    n = export_events_to_ics(stored.schedule.events(), out_path, include_errors=args.include_errors)
    print(f"Exported {n} events to: {out_path}")
    return 0


def _cmd_push(args: argparse.Namespace) -> int:
    stored = _require_schedule(args)
    if stored is None:
        return 1

    schedule = stored.schedule
    if schedule.schedule_id <= 0:
        print("Schedule has no backend id. Pull it first or set schedule_id in the stored file.")
        return 1

    persisted = push_schedule_events(args.url, schedule.schedule_id, schedule.events(), token=args.token)
    schedule.in_memory = False
    schedule.set_events(persisted)
    _save(args, stored)
    print(f"Pushed {len(persisted)} events to schedule {schedule.schedule_id}.")
    return 0


def _cmd_pull(args: argparse.Namespace) -> int:
    schedule = fetch_schedule(args.url, args.schedule_id, token=args.token)

    # keep the local configuration, the backend does not send one
    local = load_schedule(_path(args))
    stored = StoredSchedule(schedule)
    if local is not None:
        schedule.config = local.schedule.config
        stored.assignments = local.assignments
        stored.lesson_lists = local.lesson_lists

    saved = _save(args, stored)
    print(f"Pulled {len(schedule)} events of schedule {schedule.schedule_id} -> {saved}")
    return 0


def _cmd_interactive(args: argparse.Namespace) -> int:
    from lessonplan.interactive import run_interactive

    stored = _require_schedule(args)
    if stored is None:
        return 1
    run_interactive(stored, _path(args))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="lessonplan", description="LessonPlan CLI")
    parser.add_argument("--file", type=str, default=None, help="Schedule JSON file (default: package data dir)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_generate = sub.add_parser("generate", help="Generate a schedule from a configuration")
    p_generate.add_argument("config", type=str, help="Configuration JSON file")
    p_generate.add_argument("courses", type=str, help="Course trees JSON file")

    p_validate = sub.add_parser("validate", help="Validate a configuration")
    p_validate.add_argument("config", type=str, help="Configuration JSON file")

    p_show = sub.add_parser("show", help="Show one week as a grid")
    p_show.add_argument("--week", type=str, default=None, help="ISO week, e.g. 2025-W36")

    p_add = sub.add_parser("add-special", help="Add a special day and shift lessons forward")
    p_add.add_argument("date", type=str, help="Date (YYYY-MM-DD)")
    p_add.add_argument("type", type=str, help="Event type (e.g. Assembly)")
    p_add.add_argument("title", type=str, help="Title")
    p_add.add_argument("--periods", type=int, nargs="+", required=True, help="Affected periods")
    p_add.add_argument("--description", type=str, default=None)

    p_remove = sub.add_parser("remove-special", help="Remove a special event and shift lessons back")
    p_remove.add_argument("event_id", type=int, help="Event id")

    sub.add_parser("conflicts", help="Show slots holding more than one event")

    p_export = sub.add_parser("export", help="Export the schedule to .ics")
    p_export.add_argument("out", type=str, help="Output file path (e.g. out.ics)")
    p_export.add_argument("--include-errors", action="store_true", help="Also export Error placeholders")

    p_push = sub.add_parser("push", help="Upload all events to the backend")
    p_push.add_argument("url", type=str, help="Backend base URL")
    p_push.add_argument("--token", type=str, default=None)

    p_pull = sub.add_parser("pull", help="Download a schedule from the backend")
    p_pull.add_argument("url", type=str, help="Backend base URL")
    p_pull.add_argument("schedule_id", type=int, help="Schedule id")
    p_pull.add_argument("--token", type=str, default=None)

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


COMMANDS = {
    "generate": _cmd_generate,
    "validate": _cmd_validate,
    "show": _cmd_show,
    "add-special": _cmd_add_special,
    "remove-special": _cmd_remove_special,
    "conflicts": _cmd_conflicts,
    "export": _cmd_export,
    "push": _cmd_push,
    "pull": _cmd_pull,
    "interactive": _cmd_interactive,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        raise SystemExit(handler(args))
    except ConfigurationError as e:
        print(f"Error: {e}")
    except SpecialDayError as e:
        for err in e.errors:
            print(f"Error: {err}")
    except EventNotFoundError as e:
        print(f"Error: no event with id {e.args[0]}")
    except requests.RequestException as e:
        _LOG.debug("Remote call failed", exc_info=True)
        print(f"Error: backend request failed: {e}")
    raise SystemExit(1)
