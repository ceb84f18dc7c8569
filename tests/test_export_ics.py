import tempfile
import unittest
from datetime import date
from pathlib import Path

from lessonplan.export_ics import export_events_to_ics
from lessonplan.model import EventCategories, EventTypes, ScheduleEvent


def _events() -> list[ScheduleEvent]:
    return [
        ScheduleEvent(
            id=-1,
            schedule_id=1,
            course_id=7,
            date=date(2026, 2, 19),
            period=3,
            lesson_id=42,
            event_type=EventTypes.LESSON,
            event_category=EventCategories.LESSON,
        ),
        ScheduleEvent(
            id=-2,
            schedule_id=1,
            date=date(2026, 2, 20),
            period=1,
            event_type=EventTypes.ASSEMBLY,
            event_category=EventCategories.SPECIAL_DAY,
            comment="Spring assembly, gym",
        ),
        ScheduleEvent(id=-3, schedule_id=1, date=date(2026, 2, 20), period=2, event_type=EventTypes.ERROR),
    ]


class TestExportICS(unittest.TestCase):
    def test_export_creates_file_and_contains_calendar(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "out.ics"
            n = export_events_to_ics(_events(), out)
            self.assertEqual(n, 2)
            text = out.read_text(encoding="utf-8")
            self.assertIn("BEGIN:VCALENDAR", text)
            self.assertIn("BEGIN:VEVENT", text)
            self.assertIn("DTSTART;VALUE=DATE:20260219", text)
            self.assertIn("DTEND;VALUE=DATE:20260220", text)
            self.assertIn("SUMMARY:P3 Course 7 Lesson 42", text)
            self.assertIn("SUMMARY:P1 Assembly", text)
            self.assertIn("DESCRIPTION:Spring assembly\\, gym", text)
            self.assertNotIn("Error", text)

    def test_export_can_include_errors(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            out = Path(d) / "out.ics"
            n = export_events_to_ics(_events(), out, include_errors=True)
            self.assertEqual(n, 3)
            self.assertIn("SUMMARY:P2 Error", out.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
