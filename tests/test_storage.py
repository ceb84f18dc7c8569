"""
Unit tests for the local schedule file.

Storage contract:
- Missing/invalid file -> None
- Saving clears the unsaved-changes flag
- configuration, assignments, lesson lists, events and version survive a save/load
"""

import json
import tempfile
import unittest
from datetime import date
from pathlib import Path

from lessonplan.generate import generate_schedule
from lessonplan.model import EventTypes, PeriodAssignment, TeachingConfiguration
from lessonplan.storage import load_schedule, save_schedule


def _generated():
    config = TeachingConfiguration(
        teaching_days=["Monday", "Wednesday"],
        periods_per_day=2,
        start_date=date(2025, 9, 1),
        end_date=date(2025, 9, 12),
        title="Fall",
        school_year="2025-2026",
    )
    assignments = [
        PeriodAssignment(period=1, course_id=7, room="B12"),
        PeriodAssignment(period=2, special_period_type=EventTypes.LUNCH),
    ]
    lesson_lists = {7: [101, 102]}
    schedule, _ = generate_schedule(config, assignments, lesson_lists, schedule_id=3)
    return schedule, assignments, lesson_lists


class TestStorage(unittest.TestCase):
    def test_load_missing_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.assertIsNone(load_schedule(Path(d) / "missing.json"))

    def test_load_broken_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "schedule.json"
            p.write_text("{broken", encoding="utf-8")
            self.assertIsNone(load_schedule(p))

            p.write_text(json.dumps({"events": [{"id": 1}]}), encoding="utf-8")
            self.assertIsNone(load_schedule(p))

            p.write_text("[]", encoding="utf-8")
            self.assertIsNone(load_schedule(p))

    def test_save_and_load_roundtrip(self) -> None:
        schedule, assignments, lesson_lists = _generated()
        self.assertTrue(schedule.has_unsaved_changes)

        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "schedule.json"
            saved = save_schedule(schedule, p, assignments, lesson_lists)
            self.assertEqual(saved, p)
            self.assertFalse(schedule.has_unsaved_changes)

            stored = load_schedule(p)
            self.assertIsNotNone(stored)
            self.assertEqual(stored.schedule.events(), schedule.events())
            self.assertEqual(stored.schedule.version, schedule.version)
            self.assertEqual(stored.schedule.schedule_id, 3)
            self.assertEqual(stored.schedule.config, schedule.config)
            self.assertEqual(stored.assignments, assignments)
            self.assertEqual(stored.lesson_lists, lesson_lists)

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data["lesson_lists"], {"7": [101, 102]})
            self.assertEqual(data["events"][0]["date"], "2025-09-01")


if __name__ == "__main__":
    unittest.main()
