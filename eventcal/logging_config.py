"""Process-wide logging setup for the calendar service.

``configure_logging()`` sets the root level and format, a stderr handler and,
when a log file is configured, a rotating file handler.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from eventcal.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3


def _resolve_level(raw: str) -> int:
    return getattr(logging, raw.strip().upper(), logging.INFO)


def configure_logging(*, level: int | None = None, log_file: str | None = None) -> None:
    """Configure the root logger once at startup.

    Args:
        level: Log level. If None, taken from ``EVENTCAL_LOG_LEVEL``.
        log_file: Rotating log file path. If None, from ``EVENTCAL_LOG_FILE``.
    """
    settings = get_settings()
    if level is None:
        level = _resolve_level(settings.log_level)
    if log_file is None:
        log_file = settings.log_file

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)
    # Drop existing handlers so repeated calls (tests, reloads) don't duplicate.
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=_MAX_BYTES,
                backupCount=_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as exc:
            root.warning(
                "Could not open log file %s: %s; logging to stderr only", log_file, exc
            )
