"""Tests for the day lookup service."""

from datetime import date, datetime

from eventcal.domain.models import DailyRule, Event
from eventcal.services.day_lookup import events_by_day, on_day
from eventcal.services.recurrence import expand


def _make_event(start: datetime, title: str) -> Event:
    return Event(title=title, start=start)


def _boundary_pool() -> list[Event]:
    return [
        _make_event(datetime(2023, 12, 31, 23, 30), "New year's eve"),
        _make_event(datetime(2024, 1, 1, 0, 0), "New year"),
        _make_event(datetime(2024, 1, 31, 8, 0), "Month end"),
        _make_event(datetime(2024, 2, 1, 8, 0), "Month start"),
        _make_event(datetime(2024, 1, 1, 18, 0), "Dinner"),
    ]


def test_on_day_across_year_boundary():
    pool = _boundary_pool()
    assert [e.title for e in on_day(date(2023, 12, 31), pool)] == ["New year's eve"]
    assert [e.title for e in on_day(date(2024, 1, 1), pool)] == ["New year", "Dinner"]


def test_on_day_across_month_boundary():
    pool = _boundary_pool()
    assert [e.title for e in on_day(date(2024, 1, 31), pool)] == ["Month end"]
    assert [e.title for e in on_day(date(2024, 2, 1), pool)] == ["Month start"]


def test_on_day_accepts_datetime_and_ignores_its_time():
    pool = _boundary_pool()
    assert len(on_day(datetime(2024, 1, 1, 12, 0), pool)) == 2


def test_on_day_matches_full_date_not_day_of_month():
    pool = [_make_event(datetime(2024, 3, 1, 9, 0), "March")]
    assert on_day(date(2024, 4, 1), pool) == []
    assert on_day(date(2023, 3, 1), pool) == []


def test_on_day_empty_pool():
    assert on_day(date(2024, 1, 1), []) == []


def test_on_day_finds_generated_instances():
    seed = Event(id="run", title="Morning run", start=datetime(2024, 1, 30, 7, 0))
    pool = expand(seed, DailyRule(max_occurrences=4), now=seed.start)

    found = on_day(date(2024, 2, 1), pool)
    assert [e.id for e in found] == ["run_2"]


def test_events_by_day_covers_every_requested_day():
    pool = _boundary_pool()
    days = [date(2024, 1, 1), date(2024, 1, 2)]
    result = events_by_day(days, pool)

    assert list(result) == days
    assert len(result[date(2024, 1, 1)]) == 2
    assert result[date(2024, 1, 2)] == []
