"""Centralized logging helpers.

Provides one place to configure the root logger, build structured ``extra``
payloads, and time operations for DEBUG traces. Kept free of project imports
other than ``constants`` so every module can use it without cycles.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants

# LogRecord attributes that must not be overwritten through ``extra``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    The level comes from ``level`` when given, otherwise from the
    ``JAVA_EBUILDER_LOG_LEVEL`` environment variable, defaulting to INFO.

    Args:
        level: Optional level name overriding the environment.
        log_file: Optional path of an additional log file.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not any(getattr(h, "_java_ebuilder", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        handler._java_ebuilder = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        file_handler._java_ebuilder = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    root.setLevel(level_value)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    ``None`` values are dropped and names that collide with LogRecord
    attributes are prefixed with ``ctx_``.
    """
    result: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        name = f"ctx_{key}" if key in _RESERVED_ATTRS else key
        result[name] = value
    return result


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when ``logger`` would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, up to now when still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
