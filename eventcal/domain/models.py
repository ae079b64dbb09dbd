"""Domain models for the recurring-event calendar."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from eventcal.services.dates import end_of_day

DEFAULT_COLOR = "#3B82F6"


class RecurrenceKind(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    RESCHEDULED = "rescheduled"
    CONFLICT_DETECTED = "conflict_detected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Recurrence rules (one variant per kind)
# ---------------------------------------------------------------------------


class _RuleBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    end_date: datetime | None = None
    max_occurrences: int | None = None

    @field_validator("end_date", mode="before")
    @classmethod
    def _bare_date_is_inclusive(cls, value: Any) -> Any:
        # A date without a time bounds the whole of that day.
        if isinstance(value, str) and len(value) == 10:
            value = date.fromisoformat(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            return end_of_day(value)
        return value

    @field_validator("max_occurrences")
    @classmethod
    def _non_positive_cap_means_default(cls, value: int | None) -> int | None:
        # Runs after coercion, so "0" and 0.0 from JSON are caught too.
        if value is not None and value <= 0:
            return None
        return value


class _WeekdayRule(_RuleBase):
    # 0=Sunday .. 6=Saturday
    weekdays: frozenset[int] = frozenset()

    @field_validator("weekdays", mode="before")
    @classmethod
    def _missing_weekdays_mean_empty(cls, value: Any) -> Any:
        return frozenset() if value is None else value

    @field_validator("weekdays")
    @classmethod
    def _keep_valid_weekdays(cls, value: frozenset[int]) -> frozenset[int]:
        return frozenset(d for d in value if 0 <= d <= 6)


class DailyRule(_RuleBase):
    kind: Literal["daily"] = "daily"


class WeeklyRule(_WeekdayRule):
    kind: Literal["weekly"] = "weekly"


class MonthlyRule(_RuleBase):
    kind: Literal["monthly"] = "monthly"


class CustomRule(_WeekdayRule):
    """Every *interval* weeks on ``weekdays``, or every *interval* months."""

    kind: Literal["custom"] = "custom"
    interval: int = 1

    @field_validator("interval", mode="before")
    @classmethod
    def _missing_interval_is_one(cls, value: Any) -> Any:
        return 1 if value is None else value

    @field_validator("interval")
    @classmethod
    def _positive_interval(cls, value: int) -> int:
        return max(value, 1)


RecurrenceRule = Annotated[
    Union[DailyRule, WeeklyRule, MonthlyRule, CustomRule],
    Field(discriminator="kind"),
]


def _rule_kind(rule: Any) -> str | None:
    if isinstance(rule, BaseModel):
        return getattr(rule, "kind", None)
    if isinstance(rule, dict):
        return rule.get("kind")
    return None


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class _EventFields(BaseModel):
    title: str
    start: datetime
    description: str | None = None
    category: str | None = None
    color: str = DEFAULT_COLOR
    recurrence: RecurrenceKind = RecurrenceKind.NONE
    recurrence_rule: RecurrenceRule | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value

    @model_validator(mode="before")
    @classmethod
    def _reconcile_recurrence(cls, data: Any) -> Any:
        """Keep ``recurrence`` and ``recurrence_rule`` describing the same kind."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        kind = data.get("recurrence")
        rule = data.get("recurrence_rule")

        if rule is None:
            if kind is not None and kind != RecurrenceKind.NONE:
                data["recurrence_rule"] = {"kind": str(kind)}
        elif isinstance(rule, dict) and "kind" not in rule:
            if kind is None or kind == RecurrenceKind.NONE:
                data["recurrence_rule"] = None
            else:
                data["recurrence_rule"] = {**rule, "kind": str(kind)}
        elif kind is None:
            data["recurrence"] = _rule_kind(rule)
        elif kind == RecurrenceKind.NONE:
            data["recurrence_rule"] = None
        elif kind != _rule_kind(rule):
            raise ValueError(
                f"recurrence {kind!r} does not match rule kind {_rule_kind(rule)!r}"
            )
        return data


class Event(_EventFields):
    """A single calendar entry: a standalone event, a series seed, or an instance.

    Generated instances carry ``series_id`` (the seed's id) and an id of the
    form ``{seed_id}_{n}``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    series_id: str | None = None


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventInput(_EventFields):
    """Event fields as submitted by a client, without an id."""

    def to_event(self, event_id: str | None = None) -> Event:
        fields = self.model_dump()
        if event_id is not None:
            fields["id"] = event_id
        return Event.model_validate(fields)


class EventCreateRequest(BaseModel):
    event: EventInput
    allow_conflicts: bool = False


class EventUpdateRequest(BaseModel):
    event: EventInput
    allow_conflicts: bool = False


class RescheduleRequest(BaseModel):
    start: datetime


class RescheduleResponse(BaseModel):
    event: Event
    warnings: list[Event] = Field(default_factory=list)


class ConflictCheckRequest(BaseModel):
    candidate: Event
    exclude_id: str | None = None


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    conflicts: list[Event] = Field(default_factory=list)


class DeleteSeriesResponse(BaseModel):
    deleted: list[str]
