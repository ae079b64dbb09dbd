"""In-memory repositories for calendar events and their timelines."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence

from eventcal.domain.models import Event, TimelineEntry
from eventcal.services.series import is_series_member


class EventRepository:
    """Ordered store for Event instances, keyed by id.

    Writers go through :meth:`mutate`, which applies a whole
    filter-then-append update under one lock so a series replacement is
    never observed half done.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}
        self._lock = threading.Lock()

    def add(self, event: Event) -> None:
        with self._lock:
            self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        with self._lock:
            return list(self._store.values())

    def list_series(self, series_id: str) -> list[Event]:
        """Return the seed and every generated instance of a series."""
        return [e for e in self.list_all() if is_series_member(e, series_id)]

    def mutate(
        self, update: Callable[[list[Event]], Sequence[Event]]
    ) -> list[Event]:
        """Atomically replace the collection with ``update(current)``.

        Returns the new collection.
        """
        with self._lock:
            new_events = list(update(list(self._store.values())))
            self._store = {e.id: e for e in new_events}
            return new_events

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_event(self, event_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.event_id == event_id],
            key=lambda e: e.timestamp,
        )

    def clear(self) -> None:
        self._entries.clear()
