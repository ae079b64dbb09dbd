"""Service for detecting scheduling conflicts between events."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from eventcal.domain.models import Event
from eventcal.services.dates import match_awareness
from eventcal.services.series import is_series_member

# Every event occupies the same fixed window; events carry no duration.
EVENT_DURATION = timedelta(hours=1)


@dataclass(frozen=True)
class SeriesConflict:
    """One candidate instance of a series and the events it overlaps."""

    instance: Event
    conflicts: list[Event]


def event_window(
    event: Event, reference: datetime | None = None
) -> tuple[datetime, datetime]:
    """Return the half-open ``[start, end)`` window the event occupies.

    With *reference*, the start is first given the reference's naive/aware
    flavour so the window can be compared against it.
    """
    start = event.start
    if reference is not None:
        start = match_awareness(start, reference)
    return start, start + EVENT_DURATION


def windows_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    return start_a < end_b and start_b < end_a


def find_conflicts(
    candidate: Event,
    pool: Sequence[Event],
    exclude_id: str | None = None,
) -> list[Event]:
    """Return the members of *pool* whose window overlaps *candidate*'s.

    Overlap rule: conflict if new_start < existing_end AND existing_start < new_end.
    Exact boundary touches (end == start) are NOT considered conflicts.

    *exclude_id* drops the event with exactly that id, so an event being
    edited does not clash with its own stored copy. Other instances of the
    same series are still checked.
    """
    new_start, new_end = event_window(candidate)
    return [
        event
        for event in pool
        if event.id != exclude_id
        and windows_overlap(new_start, new_end, *event_window(event, new_start))
    ]


def find_series_conflicts(
    instances: Sequence[Event],
    pool: Sequence[Event],
    exclude_series: str | None = None,
) -> list[SeriesConflict]:
    """Check every instance of a candidate series against *pool*.

    Members of *exclude_series* are left out of the pool, which lets an edited
    series be checked without clashing against its own previous instances.
    """
    if exclude_series is not None:
        pool = [e for e in pool if not is_series_member(e, exclude_series)]

    results: list[SeriesConflict] = []
    for instance in instances:
        overlapping = find_conflicts(instance, pool)
        if overlapping:
            results.append(SeriesConflict(instance=instance, conflicts=overlapping))
    return results
