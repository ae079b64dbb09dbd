"""Service answering which events fall on a given calendar day."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime

from eventcal.domain.models import Event
from eventcal.services.dates import same_day


def on_day(day: date | datetime, pool: Sequence[Event]) -> list[Event]:
    """Return the events whose start falls on *day*, in pool order.

    Only year, month and day-of-month are compared; time of day is ignored.
    """
    return [event for event in pool if same_day(event.start, day)]


def events_by_day(
    days: Iterable[date], pool: Sequence[Event]
) -> dict[date, list[Event]]:
    """Run :func:`on_day` once per day, as a month view does per cell."""
    return {day: on_day(day, pool) for day in days}
