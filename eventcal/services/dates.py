"""Calendar date arithmetic used by the recurrence expander and day lookup."""

from __future__ import annotations

import calendar
from collections.abc import Collection
from datetime import date, datetime, time, timedelta
from enum import StrEnum

from dateutil.relativedelta import relativedelta


class MonthRollover(StrEnum):
    """What a month step does when the target month is too short.

    ``CLAMP`` lands on the last day of the target month (Jan 31 -> Feb 29).
    ``OVERFLOW`` carries the surplus days into the following month
    (Jan 31 -> Mar 2 in a leap year), the plain day-overflow behaviour of
    setting month and day independently.
    """

    CLAMP = "clamp"
    OVERFLOW = "overflow"


def weekday_index(value: date) -> int:
    """Return the weekday with Sunday as 0 and Saturday as 6."""
    return value.isoweekday() % 7


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def add_months(
    value: datetime,
    months: int,
    rollover: MonthRollover = MonthRollover.CLAMP,
) -> datetime:
    """Step *value* by whole calendar months, keeping the time of day."""
    if rollover == MonthRollover.CLAMP:
        return value + relativedelta(months=months)

    first_of_target = value.replace(day=1) + relativedelta(months=months)
    return first_of_target + timedelta(days=value.day - 1)


def next_weekday_in(
    current: datetime,
    weekdays: Collection[int],
    interval: int = 1,
) -> datetime:
    """Return the first day strictly after *current* whose weekday is in *weekdays*.

    The scan covers ``7 * interval`` days. When nothing matches (an empty
    set), the result is ``current`` plus ``7 * interval`` days.
    """
    window = 7 * max(interval, 1)
    candidate = current
    for _ in range(window):
        candidate = add_days(candidate, 1)
        if weekday_index(candidate) in weekdays:
            return candidate
    return add_days(current, window)


def same_day(value: datetime | date, day: datetime | date) -> bool:
    return (
        value.year == day.year
        and value.month == day.month
        and value.day == day.day
    )


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def month_days(year: int, month: int) -> list[date]:
    """Every date of the given month, first to last."""
    _, days_in_month = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, days_in_month + 1)]


def match_awareness(value: datetime, reference: datetime) -> datetime:
    """Give *value* the same naive/aware flavour as *reference*.

    An aware value compared against a naive reference keeps its wall-clock
    time and loses its zone; a naive value borrows the reference's zone.
    """
    if reference.tzinfo is None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    if reference.tzinfo is not None and value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value
