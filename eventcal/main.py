"""FastAPI application: entry point for the recurring-event calendar service."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime

from fastapi import FastAPI, HTTPException, Path

from eventcal.domain.bus import EventBus
from eventcal.domain.events import (
    ConflictDetected,
    EventRescheduled,
    SeriesCreated,
    SeriesDeleted,
    SeriesUpdated,
)
from eventcal.domain.handlers import HandlerRegistry
from eventcal.domain.models import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    DeleteSeriesResponse,
    Event,
    EventCreateRequest,
    EventUpdateRequest,
    RescheduleRequest,
    RescheduleResponse,
    TimelineEntry,
)
from eventcal.logging_config import configure_logging
from eventcal.repos.memory import EventRepository, TimelineRepository
from eventcal.services.conflicts import (
    SeriesConflict,
    find_conflicts,
    find_series_conflicts,
)
from eventcal.services.dates import month_days
from eventcal.services.day_lookup import events_by_day, on_day
from eventcal.services.recurrence import expand
from eventcal.services.series import (
    is_series_member,
    remove_series,
    replace_series,
    series_root_id,
)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    yield


app = FastAPI(title="Event Calendar Service", lifespan=lifespan)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    timeline_repo=timeline_repo,
)


class SeriesConflictError(Exception):
    """Raised inside a store update to abort a conflicting create/edit."""

    def __init__(self, conflicts: list[SeriesConflict]) -> None:
        super().__init__(f"{len(conflicts)} conflicting occurrence(s)")
        self.conflicts = conflicts


# ── Helpers ───────────────────────────────────────────────────────────


def _commit_series(
    seed: Event, allow_conflicts: bool
) -> tuple[list[str], list[Event], list[SeriesConflict]]:
    """Replace *seed*'s series in the store, checking conflicts under the lock.

    Returns ``(removed_ids, series_events, conflicts)``.
    """
    now = datetime.now(seed.start.tzinfo)
    removed_ids: list[str] = []
    conflicts: list[SeriesConflict] = []

    def update(pool: list[Event]) -> list[Event]:
        nonlocal removed_ids, conflicts
        instances = expand(seed, seed.recurrence_rule, now=now)
        conflicts = find_series_conflicts(instances, pool, exclude_series=seed.id)
        if conflicts and not allow_conflicts:
            raise SeriesConflictError(conflicts)
        removed_ids = [e.id for e in pool if is_series_member(e, seed.id)]
        return replace_series(seed, seed.recurrence_rule, pool, now=now)

    new_pool = event_repo.mutate(update)
    series = [e for e in new_pool if is_series_member(e, seed.id)]
    return removed_ids, series, conflicts


def _publish_conflicts(
    event_id: str, conflicts: list[SeriesConflict], blocking: bool
) -> None:
    conflicting_ids = list(
        dict.fromkeys(c.id for sc in conflicts for c in sc.conflicts)
    )
    event_bus.publish(
        ConflictDetected(
            event_id=event_id,
            conflicting_event_ids=conflicting_ids,
            blocking=blocking,
        )
    )


def _conflict_http_error(conflicts: list[SeriesConflict]) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": "Event conflicts with existing events",
            "conflicts": [
                {
                    "instance_id": sc.instance.id,
                    "start": sc.instance.start.isoformat(),
                    "conflicting_event_ids": [c.id for c in sc.conflicts],
                    "conflicting": [f"{c.title} ({c.id})" for c in sc.conflicts],
                }
                for sc in conflicts
            ],
        },
    )


def _get_or_404(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/events", response_model=list[Event], status_code=201)
def create_event(body: EventCreateRequest) -> list[Event]:
    """Store a new event, expanding it into its series when it recurs."""
    seed = body.event.to_event()
    try:
        _, series, conflicts = _commit_series(seed, body.allow_conflicts)
    except SeriesConflictError as exc:
        _publish_conflicts(seed.id, exc.conflicts, blocking=True)
        raise _conflict_http_error(exc.conflicts) from exc

    event_bus.publish(
        SeriesCreated(series_id=seed.id, event_ids=[e.id for e in series])
    )
    if conflicts:
        _publish_conflicts(seed.id, conflicts, blocking=False)
    return series


@app.get("/events", response_model=list[Event])
def list_events() -> list[Event]:
    """Return all stored events, generated instances included."""
    return event_repo.list_all()


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    """Return a single event by id."""
    return _get_or_404(event_id)


@app.put("/events/{event_id}", response_model=list[Event])
def update_event(event_id: str, body: EventUpdateRequest) -> list[Event]:
    """Edit the series *event_id* belongs to and regenerate all its instances."""
    stored = _get_or_404(event_id)
    seed = body.event.to_event(event_id=series_root_id(stored))
    try:
        removed_ids, series, conflicts = _commit_series(seed, body.allow_conflicts)
    except SeriesConflictError as exc:
        _publish_conflicts(seed.id, exc.conflicts, blocking=True)
        raise _conflict_http_error(exc.conflicts) from exc

    event_bus.publish(
        SeriesUpdated(
            series_id=seed.id,
            removed_ids=removed_ids,
            event_ids=[e.id for e in series],
        )
    )
    if conflicts:
        _publish_conflicts(seed.id, conflicts, blocking=False)
    return series


@app.delete("/events/{event_id}", response_model=DeleteSeriesResponse)
def delete_event(event_id: str) -> DeleteSeriesResponse:
    """Delete the whole series *event_id* belongs to."""
    stored = _get_or_404(event_id)
    root_id = series_root_id(stored)
    removed_ids: list[str] = []

    def update(pool: list[Event]) -> list[Event]:
        nonlocal removed_ids
        removed_ids = [e.id for e in pool if is_series_member(e, root_id)]
        return remove_series(root_id, pool)

    event_repo.mutate(update)

    event_bus.publish(SeriesDeleted(series_id=root_id, removed_ids=removed_ids))
    return DeleteSeriesResponse(deleted=removed_ids)


@app.post("/events/{event_id}/reschedule", response_model=RescheduleResponse)
def reschedule_event(event_id: str, body: RescheduleRequest) -> RescheduleResponse:
    """Move one stored event to a new start (drag and drop).

    Overlaps never block the move; they come back as ``warnings``.
    """
    stored = _get_or_404(event_id)
    moved = stored.model_copy(update={"start": body.start})
    warnings: list[Event] = []

    def update(pool: list[Event]) -> list[Event]:
        nonlocal warnings
        if not any(e.id == moved.id for e in pool):
            # Deleted since it was looked up.
            raise HTTPException(status_code=404, detail="Event not found")
        warnings = find_conflicts(moved, pool, exclude_id=moved.id)
        return [moved if e.id == moved.id else e for e in pool]

    event_repo.mutate(update)
    event_bus.publish(
        EventRescheduled(
            event_id=moved.id, previous_start=stored.start, start=moved.start
        )
    )
    if warnings:
        event_bus.publish(
            ConflictDetected(
                event_id=moved.id,
                conflicting_event_ids=[e.id for e in warnings],
            )
        )
    return RescheduleResponse(event=moved, warnings=warnings)


@app.post("/conflicts/check", response_model=ConflictCheckResponse)
def check_conflicts(body: ConflictCheckRequest) -> ConflictCheckResponse:
    """Report stored events overlapping a candidate, without changing anything."""
    conflicts = find_conflicts(body.candidate, event_repo.list_all(), body.exclude_id)
    return ConflictCheckResponse(has_conflicts=bool(conflicts), conflicts=conflicts)


@app.get("/days/{day}/events", response_model=list[Event])
def list_events_on_day(day: date) -> list[Event]:
    """Return the events (seeds and instances) starting on *day*."""
    return on_day(day, event_repo.list_all())


@app.get("/months/{year}/{month}", response_model=dict[str, list[Event]])
def list_events_in_month(
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=1, le=12),
) -> dict[str, list[Event]]:
    """Return each day of the month mapped to the events on that day."""
    by_day = events_by_day(month_days(year, month), event_repo.list_all())
    return {day.isoformat(): events for day, events in by_day.items()}


@app.get("/events/{event_id}/timeline", response_model=list[TimelineEntry])
def get_event_timeline(event_id: str) -> list[TimelineEntry]:
    """Return the activity timeline recorded for an event or series."""
    entries = timeline_repo.list_for_event(event_id)
    if not entries and event_repo.get(event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return entries
