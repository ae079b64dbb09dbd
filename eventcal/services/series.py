"""Series mutation policy: how editing or deleting a recurring event replaces
its previously generated instances."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from eventcal.config import EngineSettings
from eventcal.domain.models import Event, RecurrenceRule
from eventcal.services.recurrence import expand


def is_series_member(event: Event, series_id: str) -> bool:
    """True if *event* is the seed or a generated instance of *series_id*.

    Membership is read from ``series_id`` and, for records that only follow
    the id convention, from an id prefixed by ``{series_id}_``.
    """
    return (
        event.id == series_id
        or event.series_id == series_id
        or event.id.startswith(series_id + "_")
    )


def series_root_id(event: Event) -> str:
    return event.series_id or event.id


def remove_series(series_id: str, pool: Sequence[Event]) -> list[Event]:
    """Return *pool* without any member of the series."""
    return [e for e in pool if not is_series_member(e, series_id)]


def replace_series(
    seed: Event,
    rule: RecurrenceRule | None,
    pool: Sequence[Event],
    *,
    horizon: datetime | None = None,
    now: datetime | None = None,
    settings: EngineSettings | None = None,
) -> list[Event]:
    """Drop every existing member of *seed*'s series, then add the new set.

    With no rule the seed is added on its own. Otherwise the series is fully
    regenerated from *seed*, never patched, so calling this twice with the
    same arguments leaves the same pool.
    """
    remaining = remove_series(seed.id, pool)
    return remaining + expand(seed, rule, horizon, now=now, settings=settings)
