"""Expansion of recurring base items into concrete occurrences.

Every instance is computed from the base start (``start + k * step``) rather
than from the previous instance, so monthly and yearly rules that land on a
clamped day (Jan 31 -> Feb 28) return to the original day afterwards.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .config import DEFAULT_MAX_INSTANCES
from .errors import InvalidRecurrenceError
from .models import FREQUENCIES, BaseItem, Occurrence, OccurrenceId, RecurrenceRule
from .times import as_utc, epoch_millis


logger = logging.getLogger("unified_schedule.recurrence")


def validate_rule(rule: RecurrenceRule) -> RecurrenceRule:
    if rule.frequency not in FREQUENCIES:
        raise InvalidRecurrenceError(f"Unknown recurrence frequency: {rule.frequency!r}")
    if isinstance(rule.interval, bool) or not isinstance(rule.interval, int):
        raise InvalidRecurrenceError("Recurrence interval must be an integer")
    if rule.interval < 1:
        raise InvalidRecurrenceError("Recurrence interval must be at least 1")
    return rule


def _offset(rule: RecurrenceRule, steps: int) -> relativedelta:
    count = rule.interval * steps
    if rule.frequency == "daily":
        return relativedelta(days=count)
    if rule.frequency == "weekly":
        return relativedelta(weeks=count)
    if rule.frequency == "monthly":
        return relativedelta(months=count)
    return relativedelta(years=count)


def effective_ceiling(rule: RecurrenceRule, horizon_cap: dt.datetime) -> dt.datetime:
    horizon_cap = as_utc(horizon_cap)
    if rule.end_date is None:
        return horizon_cap
    return min(as_utc(rule.end_date), horizon_cap)


def expand(
    base: BaseItem,
    horizon_cap: dt.datetime,
    max_instances: int = DEFAULT_MAX_INSTANCES,
) -> List[Occurrence]:
    rule: Optional[RecurrenceRule] = base.recurrence
    if rule is None:
        raise InvalidRecurrenceError(f"Base item {base.id} has no recurrence rule")
    validate_rule(rule)

    ceiling = effective_ceiling(rule, horizon_cap)
    duration = base.end - base.start
    first = Occurrence.from_base_item(base, base_event_id=base.id)
    occurrences = [first]

    steps = 1
    while len(occurrences) < max_instances:
        try:
            start = base.start + _offset(rule, steps)
            end = start + duration
        except (OverflowError, ValueError):
            logger.warning("recurrence_out_of_range id=%s steps=%s", base.id, steps)
            break
        if as_utc(start) > ceiling:
            break
        instance_id = OccurrenceId(base.id, epoch_millis(start)).encode()
        occurrences.append(first.shifted(instance_id, start, end))
        steps += 1

    if len(occurrences) >= max_instances:
        logger.debug(
            "recurrence_capped id=%s frequency=%s instances=%s",
            base.id,
            rule.frequency,
            len(occurrences),
        )
    return occurrences
