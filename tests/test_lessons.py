"""
Unit tests for flattening course trees into ordered lesson id lists.
"""

import unittest

from lessonplan.lessons import collect_lesson_ids, lesson_count, lesson_lists_from_courses

COURSE = {
    "id": 7,
    "topics": [
        {
            "id": 2,
            "sortOrder": 1,
            "lessons": [{"id": 201, "sortOrder": 0}],
        },
        {
            "id": 1,
            "sortOrder": 0,
            "subTopics": [
                {
                    "id": 10,
                    "sortOrder": 1,
                    "lessons": [{"id": 112, "sortOrder": 1}, {"id": 111, "sortOrder": 0}],
                }
            ],
            "lessons": [
                {"id": 101, "sortOrder": 0},
                {"id": 102, "sortOrder": 2},
                {"id": 199, "sortOrder": 3, "archived": True},
            ],
        },
    ],
}


class TestLessons(unittest.TestCase):
    def test_topics_subtopics_and_lessons_follow_sort_order(self) -> None:
        self.assertEqual(collect_lesson_ids(COURSE), [101, 111, 112, 102, 201])

    def test_archived_lessons_are_skipped(self) -> None:
        self.assertNotIn(199, collect_lesson_ids(COURSE))
        self.assertEqual(lesson_count(COURSE), 5)

    def test_sub_topic_wins_tie_with_lesson(self) -> None:
        course = {
            "id": 1,
            "topics": [
                {
                    "id": 1,
                    "sortOrder": 0,
                    "lessons": [{"id": 5, "sortOrder": 0}],
                    "subTopics": [{"id": 2, "sortOrder": 0, "lessons": [{"id": 6, "sortOrder": 0}]}],
                }
            ],
        }
        self.assertEqual(collect_lesson_ids(course), [6, 5])

    def test_lesson_lists_by_course_id(self) -> None:
        lists = lesson_lists_from_courses([COURSE, {"id": 8}, {"title": "no id"}, "junk"])
        self.assertEqual(set(lists), {7, 8})
        self.assertEqual(lists[8], [])


if __name__ == "__main__":
    unittest.main()
