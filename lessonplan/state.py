"""
Schedule aggregate: the single in-memory owner of a schedule's events.

Every mutation goes through this class and bumps `version` exactly once.
The version counter is the only change signal observers get; there is no
field-level diffing. Observers that want push notifications register a
callback with subscribe().

Shifting reads all events of a period, computes new dates and then writes
many events back. That sequence must not interleave with another shift or
a generation on the same schedule, so callers hold `schedule.lock` across it
(the lock is re-entrant, mutations inside take it again).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Callable, Iterable, Optional

from lessonplan.model import ScheduleEvent, TeachingConfiguration

_LOG = logging.getLogger(__name__)


class EventNotFoundError(KeyError):
    """Raised when an event id does not exist in the schedule."""


Listener = Callable[["Schedule"], None]


class Schedule:
    def __init__(
        self,
        schedule_id: int = 0,
        title: str = "",
        config: Optional[TeachingConfiguration] = None,
        events: Iterable[ScheduleEvent] = (),
        in_memory: bool = True,
        version: int = 0,
    ) -> None:
        self.schedule_id = schedule_id
        self.title = title
        self.config = config
        self.in_memory = in_memory
        self.lock = threading.RLock()

        self._events: dict[int, ScheduleEvent] = {}
        self._version = version
        self._unsaved = False
        self._listeners: list[Listener] = []

        for ev in events:
            self._events[ev.id] = replace(ev)

    # ------------------------------------------------------------------
    # Read views
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def has_unsaved_changes(self) -> bool:
        return self._unsaved

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def events(self) -> list[ScheduleEvent]:
        """
        All events sorted by (date, period). Returned objects are copies.
        """
        with self.lock:
            out = [replace(ev) for ev in self._events.values()]
        out.sort(key=lambda ev: (ev.date, ev.period, ev.id))
        return out

    def get_event(self, event_id: int) -> ScheduleEvent:
        with self.lock:
            try:
                return replace(self._events[event_id])
            except KeyError:
                raise EventNotFoundError(event_id) from None

    def events_for_period(self, period: int) -> list[ScheduleEvent]:
        return [ev for ev in self.events() if ev.period == period]

    def events_for_date(self, day: date) -> list[ScheduleEvent]:
        return [ev for ev in self.events() if ev.date == day]

    def event_at(self, day: date, period: int) -> Optional[ScheduleEvent]:
        with self.lock:
            for ev in self._events.values():
                if ev.date == day and ev.period == period:
                    return replace(ev)
        return None

    def next_local_id(self) -> int:
        """
        Next id for an in-memory event: negative and below every existing id.
        """
        with self.lock:
            lowest = min(self._events, default=0)
        return min(lowest, 0) - 1

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_events(self, events: Iterable[ScheduleEvent]) -> None:
        """
        Replace the whole event collection (e.g. after generation).
        """
        with self.lock:
            self._events = {ev.id: replace(ev) for ev in events}
            _LOG.debug("Schedule %s: set %d events", self.schedule_id, len(self._events))
            self._changed()

    def upsert_event(self, event: ScheduleEvent) -> None:
        with self.lock:
            self._events[event.id] = replace(event)
            self._changed()

    def remove_event(self, event_id: int) -> ScheduleEvent:
        with self.lock:
            try:
                removed = self._events.pop(event_id)
            except KeyError:
                raise EventNotFoundError(event_id) from None
            self._changed()
            return removed

    def apply(self, upserts: Iterable[ScheduleEvent] = (), removals: Iterable[int] = ()) -> None:
        """
        Apply a batch of changes with a single version increment.
        Unknown ids in removals are ignored.
        """
        with self.lock:
            for event_id in removals:
                self._events.pop(event_id, None)
            for ev in upserts:
                self._events[ev.id] = replace(ev)
            self._changed()

    def mark_saved(self) -> None:
        with self.lock:
            self._unsaved = False

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked after every mutation.
        Returns a function that removes the callback again.
        """
        with self.lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self.lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self._version += 1
        if self.in_memory:
            self._unsaved = True
        for listener in list(self._listeners):
            listener(self)
