from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, List, Optional

from .config import DEFAULT_TASK_DURATION_MINUTES
from .models import KIND_TASK, TASK_COLOR, ExternalTask, Occurrence
from .times import parse_instant, utc_now


logger = logging.getLogger("unified_schedule.tasks")

TASK_ID_PREFIX = "task_"


def _timestamp_or(value: Optional[str], fallback: dt.datetime) -> dt.datetime:
    try:
        return parse_instant(value)
    except ValueError:
        return fallback


def synthesize(
    task: ExternalTask,
    owner_id: str,
    now: Optional[dt.datetime] = None,
    duration: dt.timedelta = dt.timedelta(minutes=DEFAULT_TASK_DURATION_MINUTES),
) -> Optional[Occurrence]:
    if not task.due_date:
        return None
    try:
        due = parse_instant(task.due_date)
        end = due + duration
    except (ValueError, OverflowError):
        logger.warning("task_due_date_invalid id=%s due_date=%r", task.id, task.due_date)
        return None

    now = now or utc_now()
    return Occurrence(
        id=f"{TASK_ID_PREFIX}{task.id}",
        owner_id=owner_id,
        title=task.title,
        description=task.description,
        start=due,
        end=end,
        all_day=False,
        kind=KIND_TASK,
        color=TASK_COLOR,
        location=None,
        created_at=_timestamp_or(task.created_at, now),
        updated_at=_timestamp_or(task.updated_at, now),
        base_event_id=task.id,
    )


def synthesize_all(
    tasks: Iterable[ExternalTask],
    owner_id: str,
    now: Optional[dt.datetime] = None,
    duration: dt.timedelta = dt.timedelta(minutes=DEFAULT_TASK_DURATION_MINUTES),
) -> List[Occurrence]:
    now = now or utc_now()
    occurrences = []
    for task in tasks:
        occurrence = synthesize(task, owner_id, now=now, duration=duration)
        if occurrence is not None:
            occurrences.append(occurrence)
    return occurrences
