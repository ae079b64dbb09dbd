"""Runtime settings for the calendar engine and its HTTP service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from eventcal.services.dates import MonthRollover


class EngineSettings(BaseSettings):
    """Settings read from ``EVENTCAL_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="EVENTCAL_", extra="ignore")

    # Forward bound for rules without an end date.
    horizon_days: int = Field(default=365, gt=0)
    default_max_occurrences: int = Field(default=100, gt=0)
    month_rollover: MonthRollover = MonthRollover.CLAMP

    log_level: str = "INFO"
    log_file: str | None = None


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()
