from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .models import Occurrence
from .times import as_utc


DATE_PRESETS = ("today", "this-week", "this-month", "next-7-days", "next-30-days", "custom")


@dataclass(frozen=True)
class ScheduleFilters:
    kinds: Tuple[str, ...] = ()
    colors: Tuple[str, ...] = ()
    start: Optional[dt.datetime] = None
    end: Optional[dt.datetime] = None


def date_range_for_preset(preset: str, now: dt.datetime) -> Tuple[dt.datetime, dt.datetime]:
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end_of_day = dt.timedelta(days=1) - dt.timedelta(milliseconds=1)
    if preset == "today":
        return today, today + end_of_day
    if preset == "this-week":
        # Weeks start on Sunday.
        start_of_week = today - dt.timedelta(days=(today.weekday() + 1) % 7)
        return start_of_week, start_of_week + dt.timedelta(days=7) - dt.timedelta(milliseconds=1)
    if preset == "this-month":
        start_of_month = today.replace(day=1)
        next_month = (start_of_month + dt.timedelta(days=32)).replace(day=1)
        return start_of_month, next_month - dt.timedelta(seconds=1)
    if preset == "next-7-days":
        return today, today + dt.timedelta(days=7)
    if preset == "next-30-days":
        return today, today + dt.timedelta(days=30)
    if preset == "custom":
        return today, now
    raise ValueError(f"Unknown date preset: {preset}")


def filter_occurrences(
    occurrences: Iterable[Occurrence], filters: ScheduleFilters
) -> List[Occurrence]:
    kinds = set(filters.kinds)
    colors = {color.lower() for color in filters.colors}
    start = as_utc(filters.start) if filters.start else None
    end = as_utc(filters.end) if filters.end else None

    result = []
    for occurrence in occurrences:
        if kinds and occurrence.kind not in kinds:
            continue
        if colors and (occurrence.color or "").lower() not in colors:
            continue
        occurrence_start = as_utc(occurrence.start)
        if start and occurrence_start < start:
            continue
        if end and occurrence_start > end:
            continue
        result.append(occurrence)
    return result
