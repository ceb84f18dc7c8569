from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from lessonplan.export_ics import export_events_to_ics
from lessonplan.model import ScheduleEvent, is_error, is_lesson, is_special_day, is_special_period
from lessonplan.occupancy import find_conflicts
from lessonplan.special_days import SpecialDayData, SpecialDayError, add_special_day, remove_special_event
from lessonplan.state import EventNotFoundError, Schedule
from lessonplan.storage import StoredSchedule, save_schedule
from lessonplan.teaching_days import teaching_day_numbers, weekday_number

console = Console()

WEEKDAY_SHORT = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


# ---------------------------------------------------------------------------
# Week helpers
# ---------------------------------------------------------------------------


def week_key(d: date) -> tuple[int, int]:
    iso = d.isocalendar()
    return (iso[0], iso[1])


def parse_week(text: str) -> tuple[int, int]:
    """
    Parse "2025-W36" (or "2025-36") into (year, week). Raises ValueError.
    """
    raw = text.strip().upper().replace("W", "")
    year_s, _, week_s = raw.partition("-")
    year, week = int(year_s), int(week_s)
    # raises ValueError for weeks the year does not have
    date.fromisocalendar(year, week, 1)
    return (year, week)


def available_weeks(events: list[ScheduleEvent]) -> list[tuple[int, int]]:
    return sorted({week_key(ev.date) for ev in events})


def _week_days(schedule: Schedule, year: int, week: int) -> list[date]:
    monday = date.fromisocalendar(year, week, 1)
    days = [monday + timedelta(days=i) for i in range(7)]
    if schedule.config is not None:
        numbers = teaching_day_numbers(schedule.config.teaching_days)
        if numbers:
            return [d for d in days if weekday_number(d) in numbers]
    return days[:5]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def event_label(ev: ScheduleEvent, rich: bool = True) -> str:
    if is_lesson(ev):
        text = f"Lesson {ev.lesson_id}"
        return f"[green]{text}[/]" if rich else text
    if is_error(ev):
        return "[bold red]Error[/]" if rich else "Error"
    text = ev.event_type
    if ev.comment:
        text = f"{text}: {ev.comment}"
    if not rich:
        return text
    # recurring periods stay quiet, special days stand out
    return f"[dim]{text}[/]" if is_special_period(ev) else f"[yellow]{text}[/]"


def event_line(ev: ScheduleEvent) -> str:
    return f"#{ev.id} P{ev.period} {event_label(ev, rich=False)}"


def week_table(schedule: Schedule, year: int, week: int) -> Table:
    """
    Periods as rows, the week's teaching days as columns.
    """
    days = _week_days(schedule, year, week)
    by_slot = {ev.slot: ev for ev in schedule.events() if week_key(ev.date) == (year, week)}

    if schedule.config is not None:
        periods = list(range(1, schedule.config.periods_per_day + 1))
    else:
        periods = sorted({p for (_, p) in by_slot})

    table = Table(title=f"{schedule.title or 'Schedule'} {year}-W{week:02d}", box=box.SIMPLE)
    table.add_column("Period", justify="right")
    for d in days:
        table.add_column(f"{WEEKDAY_SHORT[weekday_number(d)]} {d.strftime('%d.%m')}")

    for period in periods:
        row = [str(period)]
        for d in days:
            ev = by_slot.get((d, period))
            row.append(event_label(ev) if ev is not None else "")
        table.add_row(*row)
    return table


def render_week(schedule: Schedule, year: int, week: int) -> None:
    console.print(week_table(schedule, year, week))


def render_agenda(events: list[ScheduleEvent]) -> None:
    by_date: dict[date, list[ScheduleEvent]] = defaultdict(list)
    for ev in events:
        by_date[ev.date].append(ev)

    for d in sorted(by_date):
        _println(f"\n{d.isoformat()} ({WEEKDAY_SHORT[weekday_number(d)]})")
        for ev in sorted(by_date[d], key=lambda x: x.period):
            _println(f"  - {event_line(ev)}")


def render_conflicts(events: list[ScheduleEvent]) -> int:
    confs = find_conflicts(events)
    if not confs:
        _println("No conflicts found.")
        return 0

    table = Table(title=f"Conflicts ({len(confs)})", box=box.SIMPLE)
    table.add_column("Date")
    table.add_column("Period", justify="right")
    table.add_column("Event A")
    table.add_column("Event B")
    for a, b in confs:
        table.add_row(a.date.isoformat(), str(a.period), event_line(a), event_line(b))
    console.print(table)
    return len(confs)


# ---------------------------------------------------------------------------
# Menu loop
# ---------------------------------------------------------------------------


def run_interactive(stored: StoredSchedule, path: Optional[Path] = None) -> None:
    """
    Interactive menu loop working on one stored schedule.
    """
    schedule = stored.schedule

    while True:
        _print_header(schedule)

        choice = _prompt(
            "\n[1] Week view\n"
            "[2] Agenda (one date)\n"
            "[3] Add special day\n"
            "[4] Remove special event\n"
            "[5] Show conflicts\n"
            "[6] Export .ics\n"
            "[7] Save\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            if schedule.has_unsaved_changes:
                answer = _prompt("Save changes before leaving? [Y/n]: ").strip().lower()
                if answer != "n":
                    _save(stored, path)
            _println("Bye.")
            return

        if choice == "1":
            _flow_week(schedule)
        elif choice == "2":
            _flow_agenda(schedule)
        elif choice == "3":
            _flow_add_special(schedule)
        elif choice == "4":
            _flow_remove_special(schedule)
        elif choice == "5":
            render_conflicts(schedule.events())
        elif choice == "6":
            _flow_export(schedule)
        elif choice == "7":
            _save(stored, path)
        else:
            _println("Invalid choice.")


def _print_header(schedule: Schedule) -> None:
    _println("\n=== LessonPlan (interactive) ===")
    cfg = schedule.config
    if cfg is not None:
        _println(f"{schedule.title} | {cfg.start_date.isoformat()} - {cfg.end_date.isoformat()}")
    unsaved = " | [bold]unsaved changes[/]" if schedule.has_unsaved_changes else ""
    special = sum(1 for ev in schedule.events() if is_special_day(ev))
    _println(f"Events: {len(schedule)} | special days: {special} | version {schedule.version}{unsaved}")


def _save(stored: StoredSchedule, path: Optional[Path]) -> None:
    saved = save_schedule(stored.schedule, path, stored.assignments, stored.lesson_lists)
    _println(f"Saved to: {saved}")


def _ask_date(msg: str) -> Optional[date]:
    text = _prompt(msg).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        _println("Not a date (expected YYYY-MM-DD).")
        return None


def _flow_week(schedule: Schedule) -> None:
    weeks = available_weeks(schedule.events())
    if not weeks:
        _println("No events.")
        return

    text = _prompt(f"Week (YYYY-Www), blank = {weeks[0][0]}-W{weeks[0][1]:02d}: ").strip()
    if not text:
        render_week(schedule, *weeks[0])
        return
    try:
        year, week = parse_week(text)
    except ValueError:
        _println("Invalid week.")
        return
    render_week(schedule, year, week)


def _flow_agenda(schedule: Schedule) -> None:
    day = _ask_date("Date (YYYY-MM-DD): ")
    if day is None:
        return
    events = schedule.events_for_date(day)
    if not events:
        _println("No events on that date.")
        return
    render_agenda(events)


def _flow_add_special(schedule: Schedule) -> None:
    day = _ask_date("Date (YYYY-MM-DD): ")
    if day is None:
        return

    periods_in = _prompt("Periods (e.g. 1 2 3): ").replace(",", " ").split()
    if not all(p.isdigit() for p in periods_in):
        _println("Periods must be numbers.")
        return

    data = SpecialDayData(
        date=day,
        periods=[int(p) for p in periods_in],
        event_type=_prompt("Event type (e.g. Assembly, Holiday): ").strip(),
        title=_prompt("Title: ").strip(),
        description=_prompt("Description (optional): ").strip() or None,
    )
    try:
        result = add_special_day(schedule, data)
    except SpecialDayError as e:
        for err in e.errors:
            _println(f"[red]{err}[/]")
        return

    shifted = sum(s.shifted_lessons for s in result.shifts)
    _println(f"Added {len(result.created)} special events, {shifted} lessons shifted.")
    for warning in result.warnings:
        _println(f"[yellow]{warning}[/]")


def _flow_remove_special(schedule: Schedule) -> None:
    text = _prompt("Event id: ").strip()
    try:
        event_id = int(text)
    except ValueError:
        _println("Not a number.")
        return

    try:
        result = remove_special_event(schedule, event_id)
    except EventNotFoundError:
        _println(f"No event with id {event_id}.")
        return
    except SpecialDayError as e:
        _println(f"[red]{e}[/]")
        return

    shifted = sum(s.shifted_lessons for s in result.shifts)
    _println(f"Removed event {event_id}, {shifted} lessons shifted back.")
    for warning in result.warnings:
        _println(f"[yellow]{warning}[/]")


def _flow_export(schedule: Schedule) -> None:
    default_name = "lessonplan.ics"
    out_in = _prompt(f"Please enter desired file name, default is {default_name}: ").strip()
    out_path = Path(out_in or default_name)

    if out_path.suffix.lower() != ".ics":
        out_path = out_path.with_suffix(".ics")

    include_errors = _prompt("Include Error placeholders? (y/N): ").strip().lower() == "y"
    n = export_events_to_ics(schedule.events(), out_path, include_errors=include_errors)
    _println(f"\nExported {n} events.")
    _println(f"Saved to: {out_path.resolve()}")
