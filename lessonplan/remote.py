from __future__ import annotations

from typing import Any, Iterable

import requests

from lessonplan.model import ScheduleEvent
from lessonplan.state import Schedule


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

API_PREFIX = "/api"
TIMEOUT_SECONDS = 30


def _api_url(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + API_PREFIX + path


def _headers(token: str | None) -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


# ---------------------------------------------------------------------------
# Wire format (camelCase, as the backend expects it)
# ---------------------------------------------------------------------------


def event_to_resource(ev: ScheduleEvent) -> dict[str, Any]:
    return {
        "id": ev.id,
        "scheduleId": ev.schedule_id,
        "courseId": ev.course_id,
        "date": ev.date.isoformat(),
        "period": ev.period,
        "lessonId": ev.lesson_id,
        "eventType": ev.event_type,
        "eventCategory": ev.event_category,
        "comment": ev.comment,
    }


def event_from_resource(data: dict[str, Any]) -> ScheduleEvent:
    return ScheduleEvent.from_dict(
        {
            "id": data["id"],
            "schedule_id": data.get("scheduleId"),
            "course_id": data.get("courseId"),
            "date": data["date"],
            "period": data["period"],
            "lesson_id": data.get("lessonId"),
            "event_type": data.get("eventType") or "Error",
            "event_category": data.get("eventCategory"),
            "comment": data.get("comment"),
        }
    )


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


def fetch_schedule(base_url: str, schedule_id: int, token: str | None = None) -> Schedule:
    """
    Load one schedule with its events from the backend.

    Returns a persisted (in_memory=False) Schedule. The teaching configuration
    is not part of the response; callers attach it themselves.
    """
    resp = requests.get(
        _api_url(base_url, f"/Schedule/{schedule_id}"), headers=_headers(token), timeout=TIMEOUT_SECONDS
    )
    resp.raise_for_status()

    data = resp.json()
    events = [event_from_resource(x) for x in data.get("scheduleEvents") or []]
    return Schedule(
        schedule_id=int(data.get("id") or schedule_id),
        title=str(data.get("title") or ""),
        events=events,
        in_memory=False,
    )


def push_schedule_events(
    base_url: str, schedule_id: int, events: Iterable[ScheduleEvent], token: str | None = None
) -> list[ScheduleEvent]:
    """
    Replace all events of a schedule on the backend.
    Returns the events as stored by the backend (with persisted ids).
    """
    payload = [event_to_resource(ev) for ev in events]
    resp = requests.put(
        _api_url(base_url, f"/Schedule/{schedule_id}/events"),
        json=payload,
        headers=_headers(token),
        timeout=TIMEOUT_SECONDS,
    )
    resp.raise_for_status()

    data = resp.json()
    stored = data.get("scheduleEvents") if isinstance(data, dict) else data
    return [event_from_resource(x) for x in stored or []]


def update_schedule_event(base_url: str, event: ScheduleEvent, token: str | None = None) -> ScheduleEvent:
    """
    Update a single persisted event (positive id).
    """
    if event.id <= 0:
        raise ValueError(f"Event {event.id} was never persisted; push the schedule first")

    resp = requests.put(
        _api_url(base_url, f"/ScheduleEvent/{event.id}"),
        json=event_to_resource(event),
        headers=_headers(token),
        timeout=TIMEOUT_SECONDS,
    )
    resp.raise_for_status()
    return event_from_resource(resp.json())
