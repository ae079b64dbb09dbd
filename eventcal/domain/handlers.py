"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from eventcal.domain.bus import EventBus
from eventcal.domain.events import (
    ConflictDetected,
    EventRescheduled,
    SeriesCreated,
    SeriesDeleted,
    SeriesUpdated,
)
from eventcal.domain.models import TimelineEntry, TimelineEntryType
from eventcal.repos.memory import EventRepository, TimelineRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(SeriesCreated, self.on_series_created)
        self.bus.subscribe(SeriesUpdated, self.on_series_updated)
        self.bus.subscribe(SeriesDeleted, self.on_series_deleted)
        self.bus.subscribe(EventRescheduled, self.on_event_rescheduled)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_series_created(self, event: SeriesCreated) -> None:
        if self.event_repo.get(event.series_id) is None:
            return
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.series_id,
                type=TimelineEntryType.CREATED,
                payload={"event_ids": event.event_ids},
            )
        )
        logger.info(
            "Created series %s with %d event(s)", event.series_id, len(event.event_ids)
        )

    def on_series_updated(self, event: SeriesUpdated) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.series_id,
                type=TimelineEntryType.UPDATED,
                payload={
                    "removed_ids": event.removed_ids,
                    "event_ids": event.event_ids,
                },
            )
        )
        logger.info(
            "Regenerated series %s: %d removed, %d added",
            event.series_id,
            len(event.removed_ids),
            len(event.event_ids),
        )

    def on_series_deleted(self, event: SeriesDeleted) -> None:
        # The series is gone from the store; its timeline is kept.
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.series_id,
                type=TimelineEntryType.DELETED,
                payload={"removed_ids": event.removed_ids},
            )
        )
        logger.info(
            "Deleted series %s (%d event(s))", event.series_id, len(event.removed_ids)
        )

    def on_event_rescheduled(self, event: EventRescheduled) -> None:
        if self.event_repo.get(event.event_id) is None:
            return
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.RESCHEDULED,
                payload={
                    "previous_start": event.previous_start.isoformat(),
                    "start": event.start.isoformat(),
                },
            )
        )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.CONFLICT_DETECTED,
                payload={
                    "conflicting_event_ids": event.conflicting_event_ids,
                    "blocking": event.blocking,
                },
            )
        )
        if event.blocking:
            logger.warning(
                "Rejected change to %s: conflicts with %s",
                event.event_id,
                ", ".join(event.conflicting_event_ids),
            )
        else:
            logger.info(
                "Event %s overlaps %s",
                event.event_id,
                ", ".join(event.conflicting_event_ids),
            )
