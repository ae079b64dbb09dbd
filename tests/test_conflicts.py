"""Tests for the conflict-detection service."""

from datetime import datetime, timedelta, timezone

from eventcal.domain.models import Event
from eventcal.services.conflicts import (
    EVENT_DURATION,
    event_window,
    find_conflicts,
    find_series_conflicts,
)


def _make_event(start: datetime, title: str = "Existing", **overrides) -> Event:
    return Event(title=title, start=start, **overrides)


def test_event_window_is_one_hour():
    start = datetime(2025, 1, 1, 9, 0)
    assert EVENT_DURATION == timedelta(hours=1)
    assert event_window(_make_event(start)) == (start, datetime(2025, 1, 1, 10, 0))


def test_no_overlap():
    """Events that don't overlap should not be returned as conflicts."""
    existing = [_make_event(datetime(2025, 1, 1, 8, 0))]
    candidate = _make_event(datetime(2025, 1, 1, 10, 0), title="New")
    assert find_conflicts(candidate, existing) == []


def test_partial_overlap():
    """A candidate starting inside an existing window is a conflict."""
    existing = _make_event(datetime(2025, 1, 1, 14, 0), title="A")
    candidate = _make_event(datetime(2025, 1, 1, 14, 30), title="B")

    assert find_conflicts(candidate, [existing]) == [existing]


def test_exact_boundary_no_conflict():
    """When existing end == candidate start, there is no conflict (boundary touch)."""
    existing = _make_event(datetime(2025, 1, 1, 14, 0), title="A")
    candidate = _make_event(datetime(2025, 1, 1, 15, 0), title="C")

    assert find_conflicts(candidate, [existing]) == []
    assert find_conflicts(existing, [candidate]) == []


def test_identical_start_conflicts():
    existing = _make_event(datetime(2025, 1, 1, 9, 0))
    candidate = _make_event(datetime(2025, 1, 1, 9, 0), title="Same slot")
    assert find_conflicts(candidate, [existing]) == [existing]


def test_conflict_is_symmetric():
    base = datetime(2025, 3, 10, 12, 0)
    offsets = [-90, -60, -59, -1, 0, 1, 30, 59, 60, 61, 120]
    for minutes in offsets:
        a = _make_event(base, title="A")
        b = _make_event(base + timedelta(minutes=minutes), title="B")
        assert bool(find_conflicts(a, [b])) == bool(find_conflicts(b, [a])), minutes


def test_exclude_id_skips_only_that_event():
    start = datetime(2025, 1, 1, 9, 0)
    own = _make_event(start, id="series")
    sibling = _make_event(start, id="series_1", series_id="series")
    candidate = _make_event(start + timedelta(minutes=15), id="series")

    assert find_conflicts(candidate, [own, sibling], exclude_id="series") == [sibling]


def test_results_follow_pool_order():
    start = datetime(2025, 1, 1, 9, 0)
    pool = [
        _make_event(start + timedelta(minutes=30), title="later"),
        _make_event(start - timedelta(minutes=30), title="earlier"),
        _make_event(start + timedelta(hours=3), title="unrelated"),
    ]
    conflicts = find_conflicts(_make_event(start, title="New"), pool)
    assert [c.title for c in conflicts] == ["later", "earlier"]


def test_empty_pool():
    assert find_conflicts(_make_event(datetime(2025, 1, 1, 9, 0)), []) == []


def test_aware_timestamps():
    existing = _make_event(datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc))
    candidate = _make_event(datetime(2025, 1, 1, 9, 45, tzinfo=timezone.utc))
    assert find_conflicts(candidate, [existing]) == [existing]


# ---------------------------------------------------------------------------
# find_series_conflicts
# ---------------------------------------------------------------------------


def test_series_conflicts_report_each_clashing_instance():
    base = datetime(2025, 1, 6, 9, 0)
    instances = [
        _make_event(base, id="s"),
        _make_event(base + timedelta(days=1), id="s_1", series_id="s"),
        _make_event(base + timedelta(days=2), id="s_2", series_id="s"),
    ]
    blocker = _make_event(base + timedelta(days=1, minutes=30), title="Dentist")

    results = find_series_conflicts(instances, [blocker])

    assert len(results) == 1
    assert results[0].instance.id == "s_1"
    assert results[0].conflicts == [blocker]


def test_series_conflicts_ignore_own_series():
    base = datetime(2025, 1, 6, 9, 0)
    old_seed = _make_event(base, id="s")
    old_instance = _make_event(base + timedelta(days=1), id="s_1", series_id="s")
    other = _make_event(base + timedelta(days=1), title="Other")

    new_seed = _make_event(base + timedelta(minutes=30), id="s")
    new_instance = _make_event(
        base + timedelta(days=1, minutes=30), id="s_1", series_id="s"
    )
    results = find_series_conflicts(
        [new_seed, new_instance], [old_seed, old_instance, other], exclude_series="s"
    )

    assert len(results) == 1
    assert results[0].instance.id == "s_1"
    assert results[0].conflicts == [other]


def test_aware_candidate_against_naive_pool():
    existing = _make_event(datetime(2024, 1, 1, 10, 0))
    candidate = _make_event(
        datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc), title="New"
    )
    assert find_conflicts(candidate, [existing]) == [existing]


def test_naive_candidate_against_aware_pool():
    existing = _make_event(datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))
    touching = _make_event(datetime(2024, 1, 1, 11, 0), title="New")
    overlapping = _make_event(datetime(2024, 1, 1, 10, 59), title="New")

    assert find_conflicts(touching, [existing]) == []
    assert find_conflicts(overlapping, [existing]) == [existing]


def test_series_conflicts_with_mixed_awareness():
    blocker = _make_event(datetime(2024, 1, 2, 9, 30))
    instances = [
        _make_event(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc), id="s"),
        _make_event(
            datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc), id="s_1", series_id="s"
        ),
    ]
    results = find_series_conflicts(instances, [blocker])
    assert [r.instance.id for r in results] == ["s_1"]
