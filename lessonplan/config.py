"""
Schedule configuration: loading, defaults and validation.

A configuration file is a JSON object:

    {
      "title": "Schedule 2025-2026",
      "school_year": "2025-2026",
      "start_date": "2025-08-01",
      "end_date": "2026-06-15",
      "teaching_days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
      "periods_per_day": 6,
      "period_assignments": [
        {"period": 1, "course_id": 12},
        {"period": 4, "special_period_type": "Lunch"},
        {"period": 6}
      ]
    }

Validation never raises: it returns every problem it finds so the caller
can show them all at once. Only load_configuration raises (ConfigurationError)
because an unreadable file leaves nothing to validate.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from lessonplan.model import PeriodAssignment, TeachingConfiguration
from lessonplan.teaching_days import teaching_day_numbers, teaching_days_between

MAX_PERIODS_PER_DAY = 10

DEFAULT_TEACHING_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
DEFAULT_PERIODS_PER_DAY = 6


class ConfigurationError(ValueError):
    """Raised when a configuration file cannot be read or parsed."""


@dataclass
class ValidationResult:
    is_valid: bool
    can_generate: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def default_configuration(today: date | None = None) -> TeachingConfiguration:
    """
    Configuration for the current school year (Aug 1 - Jun 15, Mon-Fri, 6 periods).
    """
    today = today or date.today()
    start_year = today.year if today.month >= 8 else today.year - 1
    end_year = start_year + 1
    return TeachingConfiguration(
        teaching_days=list(DEFAULT_TEACHING_DAYS),
        periods_per_day=DEFAULT_PERIODS_PER_DAY,
        start_date=date(start_year, 8, 1),
        end_date=date(end_year, 6, 15),
        title=f"Schedule {start_year}-{end_year}",
        school_year=f"{start_year}-{end_year}",
    )


def parse_configuration(data: Any) -> tuple[TeachingConfiguration, list[PeriodAssignment]]:
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    raw_assignments = data.get("period_assignments", [])
    if not isinstance(raw_assignments, list):
        raise ConfigurationError("period_assignments must be a list")

    try:
        config = TeachingConfiguration.from_dict(data)
        assignments = [PeriodAssignment.from_dict(x) for x in raw_assignments]
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    return config, assignments


def load_configuration(path: str | Path) -> tuple[TeachingConfiguration, list[PeriodAssignment]]:
    """
    Read a configuration JSON file.
    Raises ConfigurationError if the file is missing, unreadable or malformed.
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read configuration {p}: {exc}") from exc
    return parse_configuration(data)


def configuration_to_dict(config: TeachingConfiguration, assignments: list[PeriodAssignment]) -> dict[str, Any]:
    data = config.to_dict()
    data["period_assignments"] = [pa.to_dict() for pa in assignments]
    return data


def validate_configuration(
    config: TeachingConfiguration | None, assignments: list[PeriodAssignment] | None
) -> ValidationResult:
    """
    Check a configuration before generation.

    Errors block generation, warnings do not (a missing period simply
    produces no events, an unassigned period produces Error events).
    """
    errors: list[str] = []
    warnings: list[str] = []

    if config is None:
        return ValidationResult(False, False, ["No schedule configuration available"], [])

    assignments = assignments or []

    if config.end_date < config.start_date:
        errors.append("End date must not be before start date")

    if not (1 <= config.periods_per_day <= MAX_PERIODS_PER_DAY):
        errors.append(f"Periods per day must be between 1 and {MAX_PERIODS_PER_DAY}")

    day_numbers = teaching_day_numbers(config.teaching_days)
    if not day_numbers:
        errors.append("At least one teaching day must be selected")

    unknown = [d for d in config.teaching_days if not teaching_day_numbers([d])]
    if unknown:
        warnings.append(f"Unknown teaching day names ignored: {', '.join(unknown)}")

    if not assignments:
        errors.append("No period assignments configured")

    seen: set[int] = set()
    for pa in assignments:
        if not (1 <= pa.period <= config.periods_per_day):
            errors.append(f"Period {pa.period} is outside 1..{config.periods_per_day}")
        if pa.period in seen:
            errors.append(f"Period {pa.period} is assigned more than once")
        seen.add(pa.period)
        if pa.course_id is not None and pa.special_period_type:
            errors.append(f"Period {pa.period} cannot have both a course and a special period type")

    for period in range(1, config.periods_per_day + 1):
        if assignments and period not in seen:
            warnings.append(f"Missing assignment for period {period}")

    unassigned = [pa for pa in assignments if pa.is_unassigned]
    if unassigned:
        warnings.append(f"{len(unassigned)} periods have no course or special period assignment")

    if assignments and not any(pa.is_course for pa in assignments):
        warnings.append("No periods assigned to courses")

    if day_numbers and config.end_date >= config.start_date:
        if not teaching_days_between(config.start_date, config.end_date, day_numbers):
            warnings.append("Date range contains no teaching day")

    is_valid = not errors
    return ValidationResult(
        is_valid=is_valid,
        can_generate=is_valid and len(unassigned) < len(assignments),
        errors=errors,
        warnings=warnings,
    )
