"""Domain events emitted when the calendar's event collection changes."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SeriesCreated(BaseModel):
    """Fired when a new event (and any generated instances) is stored."""

    series_id: str
    event_ids: list[str]


class SeriesUpdated(BaseModel):
    """Fired when a series is regenerated from an edited seed."""

    series_id: str
    removed_ids: list[str]
    event_ids: list[str]


class SeriesDeleted(BaseModel):
    series_id: str
    removed_ids: list[str]


class EventRescheduled(BaseModel):
    """Fired when a single stored event is moved to a new start."""

    event_id: str
    previous_start: datetime
    start: datetime


class ConflictDetected(BaseModel):
    """Fired when a committed change overlaps existing events."""

    event_id: str
    conflicting_event_ids: list[str]
    blocking: bool = False
