"""Service for expanding a seed event and its recurrence rule into a bounded,
ordered list of concrete occurrences."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from eventcal.config import EngineSettings, get_settings
from eventcal.domain.models import (
    CustomRule,
    DailyRule,
    Event,
    RecurrenceRule,
    WeeklyRule,
)
from eventcal.services.dates import (
    MonthRollover,
    add_days,
    add_months,
    match_awareness,
    next_weekday_in,
)

logger = logging.getLogger(__name__)


def expand(
    seed: Event,
    rule: RecurrenceRule | None,
    horizon: datetime | None = None,
    *,
    now: datetime | None = None,
    settings: EngineSettings | None = None,
) -> list[Event]:
    """Expand *seed* under *rule* into the full list of series instances.

    The seed itself is always the first element, unmodified. Each further
    instance is a copy of the seed with a new ``start``, an id of the form
    ``{seed.id}_{n}`` (n counting from 1) and ``series_id`` set to the seed id.

    Generation stops when the count including the seed reaches
    ``rule.max_occurrences`` (default from settings, 100), or when the next
    start would fall strictly after ``rule.end_date``. Without an end date,
    *horizon* bounds the series; it defaults to ``settings.horizon_days``
    after *now*.

    A ``None`` rule (recurrence kind ``none``) yields ``[seed]``.
    """
    if rule is None:
        return [seed]

    settings = settings or get_settings()
    bound = rule.end_date or horizon or _default_horizon(seed, now, settings)
    bound = match_awareness(bound, seed.start)
    cap = rule.max_occurrences or settings.default_max_occurrences

    occurrences = [seed]
    current = seed.start
    step = 1
    while len(occurrences) < cap and current < bound:
        candidate = _next_start(seed.start, current, step, rule, settings.month_rollover)
        if candidate > bound:
            break
        occurrences.append(
            seed.model_copy(
                update={
                    "id": f"{seed.id}_{step}",
                    "start": candidate,
                    "series_id": seed.id,
                }
            )
        )
        current = candidate
        step += 1

    logger.debug(
        "Expanded %s (%s) into %d occurrence(s) up to %s",
        seed.id,
        rule.kind,
        len(occurrences),
        bound.isoformat(),
    )
    return occurrences


def _next_start(
    anchor: datetime,
    current: datetime,
    step: int,
    rule: RecurrenceRule,
    rollover: MonthRollover,
) -> datetime:
    """Return the start of occurrence number *step* (the seed being 0)."""
    if isinstance(rule, DailyRule):
        return add_days(current, 1)

    if isinstance(rule, WeeklyRule):
        if rule.weekdays:
            return next_weekday_in(current, rule.weekdays)
        return add_days(current, 7)

    interval = max(rule.interval, 1) if isinstance(rule, CustomRule) else 1
    if isinstance(rule, CustomRule) and rule.weekdays:
        return next_weekday_in(current, rule.weekdays, interval)

    # Monthly, or custom without weekdays (every `interval` months).
    if rollover == MonthRollover.CLAMP:
        # Measured from the anchor so a clamped month does not drag later
        # occurrences off the original day of month.
        return add_months(anchor, step * interval, rollover)
    return add_months(current, interval, rollover)


def _default_horizon(
    seed: Event, now: datetime | None, settings: EngineSettings
) -> datetime:
    now = now or datetime.now(seed.start.tzinfo)
    return now + timedelta(days=settings.horizon_days)

