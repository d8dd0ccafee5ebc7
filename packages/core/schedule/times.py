from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from dateutil.parser import isoparse


EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    """Naive values are treated as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def parse_instant(value: Any) -> dt.datetime:
    """Parse an ISO-8601 string (or pass through a datetime) into a UTC instant.

    Raises ValueError for anything that is not a recognisable instant.
    """
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = isoparse(value.strip())
        except (OverflowError, TypeError) as exc:
            raise ValueError(f"Not an ISO-8601 instant: {value!r}") from exc
    else:
        raise ValueError(f"Not an ISO-8601 instant: {value!r}")
    try:
        return as_utc(parsed)
    except OverflowError as exc:
        raise ValueError(f"Instant out of range: {value!r}") from exc


def to_iso(value: Optional[dt.datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


def epoch_millis(value: dt.datetime) -> int:
    return (as_utc(value) - EPOCH) // dt.timedelta(milliseconds=1)
