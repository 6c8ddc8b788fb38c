"""Measurement helpers: value parsing, dates, change from previous entry.

Pure functions; no I/O.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Any, Optional

from bodytrack.core.constants import MEASUREMENT_FIELDS, MEASUREMENT_PRECISION


def parse_measurement_value(raw: Any) -> Optional[float]:
    """Parse form input into a circumference.

    Empty or unparsable input (including NaN and infinities) returns None,
    meaning "absent", never zero. Negative numbers are returned as-is so that
    validation can report them.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return round(value, MEASUREMENT_PRECISION)


def parse_calendar_date(value: Any) -> Optional[date]:
    """Parse an ISO date, or the date part of an ISO timestamp. None if invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    # API timestamps: 2024-03-01T00:00:00.000Z
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def get_today_date(today: Optional[date] = None) -> str:
    """Today's date as YYYY-MM-DD."""
    return (today or date.today()).isoformat()


def get_date_range(days: int, today: Optional[date] = None) -> tuple[str, str]:
    """(start, end) ISO dates covering the last `days` days, ending today."""
    if days < 0:
        raise ValueError("days must be non-negative")
    end = today or date.today()
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


def calculate_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """current - previous, rounded to the measurement precision; None if either is absent."""
    if current is None or previous is None:
        return None
    return round(float(current) - float(previous), MEASUREMENT_PRECISION)


def measurement_changes(current: Any, previous: Any) -> dict[str, Optional[float]]:
    """Per-field change between two records (objects exposing the circumference attributes)."""
    return {
        field: calculate_change(getattr(current, field, None), getattr(previous, field, None))
        for field in MEASUREMENT_FIELDS
    }


def is_recent_measurement(value: Any, days: int = 7, today: Optional[date] = None) -> bool:
    """True when the measurement date is within `days` of today (either direction)."""
    parsed = parse_calendar_date(value)
    if parsed is None:
        return False
    ref = today or date.today()
    return abs((ref - parsed).days) <= days
