"""
Lesson list derivation.

Courses arrive as trees (the same JSON the course editor stores):

    course -> topics -> (sub topics -> lessons | lessons)

Every node carries a "sortOrder". The generator needs one flat, ordered list
of lesson ids per course, which is built here:
- topics are visited by sortOrder
- inside a topic, sub topics and direct lessons share ONE sortOrder sequence
- lessons inside a sub topic are visited by their own sortOrder
"""

from __future__ import annotations

from typing import Any, Iterable


def _sort_key(node: dict[str, Any]) -> int:
    try:
        return int(node.get("sortOrder", 0) or 0)
    except (TypeError, ValueError):
        return 0


def _node_id(node: dict[str, Any]) -> int | None:
    try:
        return int(node["id"])
    except (KeyError, TypeError, ValueError):
        return None


def _visible(nodes: Any) -> list[dict[str, Any]]:
    if not isinstance(nodes, list):
        return []
    return [n for n in nodes if isinstance(n, dict) and not n.get("archived", False)]


def collect_lesson_ids(course: dict[str, Any]) -> list[int]:
    """
    Flatten one course tree into its ordered list of lesson ids.
    """
    out: list[int] = []

    for topic in sorted(_visible(course.get("topics")), key=_sort_key):
        children: list[tuple[int, str, dict[str, Any]]] = []
        for sub in _visible(topic.get("subTopics")):
            children.append((_sort_key(sub), "subtopic", sub))
        for lesson in _visible(topic.get("lessons")):
            children.append((_sort_key(lesson), "lesson", lesson))

        # stable sort: on equal sortOrder sub topics come first
        children.sort(key=lambda c: c[0])

        for _, kind, node in children:
            if kind == "lesson":
                lid = _node_id(node)
                if lid is not None:
                    out.append(lid)
                continue
            for lesson in sorted(_visible(node.get("lessons")), key=_sort_key):
                lid = _node_id(lesson)
                if lid is not None:
                    out.append(lid)

    return out


def lesson_count(course: dict[str, Any]) -> int:
    return len(collect_lesson_ids(course))


def lesson_lists_from_courses(courses: Iterable[dict[str, Any]]) -> dict[int, list[int]]:
    """
    Build {course_id: [lesson ids]} for every course that has an id.
    """
    lists: dict[int, list[int]] = {}
    for course in courses:
        if not isinstance(course, dict):
            continue
        cid = _node_id(course)
        if cid is None:
            continue
        lists[cid] = collect_lesson_ids(course)
    return lists
