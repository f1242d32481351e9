from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any

_SECONDS_PER_DAY = 24 * 60 * 60


def parse_instant(value: Any) -> datetime:
    """
    Parse an ISO-8601 date or datetime into an aware UTC datetime.
    Bare dates are midnight UTC; naive datetimes are taken as UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"not a date: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def nights_between(start: Any, end: Any) -> int:
    delta = parse_instant(end) - parse_instant(start)
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)
