from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from .errors import EventNotFoundError, InvalidEventError
from .models import DEFAULT_EVENT_COLOR, KIND_EVENT, BaseItem, OccurrenceId, RecurrenceRule
from .recurrence import validate_rule
from .times import parse_instant, utc_now

if TYPE_CHECKING:
    from packages.core.storage.base import BaseItemStore


logger = logging.getLogger("unified_schedule.service")

UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "start",
        "end",
        "all_day",
        "color",
        "location",
        "recurrence",
    }
)


def resolve_base_id(item_or_instance_id: str) -> str:
    return OccurrenceId.parse(item_or_instance_id).base_id


def _instant(name: str, value: Any) -> dt.datetime:
    try:
        return parse_instant(value)
    except ValueError as exc:
        raise InvalidEventError(f"{name} is not a valid instant: {value!r}") from exc


def _check_span(start: dt.datetime, end: dt.datetime) -> None:
    if end < start:
        raise InvalidEventError("end must not be before start")


def _recurrence(value: Any) -> Optional[RecurrenceRule]:
    if value is None:
        return None
    if isinstance(value, dict):
        try:
            value = RecurrenceRule.from_dict(value)
        except (KeyError, ValueError) as exc:
            raise InvalidEventError(f"Invalid recurrence: {exc}") from exc
    return validate_rule(value)


def create_event(
    store: BaseItemStore,
    owner_id: str,
    title: str,
    start: Any,
    end: Any,
    description: Optional[str] = None,
    all_day: bool = False,
    color: Optional[str] = None,
    location: Optional[str] = "",
    recurrence: Any = None,
    now: Optional[dt.datetime] = None,
) -> BaseItem:
    if not title or not title.strip():
        raise InvalidEventError("title is required")
    start_at = _instant("start", start)
    end_at = _instant("end", end)
    _check_span(start_at, end_at)
    now = now or utc_now()
    payload: Dict[str, Any] = {
        "title": title.strip(),
        "description": description.strip() if description else description,
        "start": start_at,
        "end": end_at,
        "all_day": all_day,
        "kind": KIND_EVENT,
        "color": color or DEFAULT_EVENT_COLOR,
        "location": location.strip() if location else "",
        "recurrence": _recurrence(recurrence),
        "created_at": now,
        "updated_at": now,
    }
    item_id = store.insert(owner_id, payload)
    logger.info(
        "event_created owner=%s id=%s recurring=%s",
        owner_id,
        item_id,
        payload["recurrence"] is not None,
    )
    return BaseItem(id=item_id, owner_id=owner_id, **payload)


def get_event(store: BaseItemStore, owner_id: str, item_or_instance_id: str) -> Optional[BaseItem]:
    return store.get(owner_id, resolve_base_id(item_or_instance_id))


def update_event(
    store: BaseItemStore,
    owner_id: str,
    item_or_instance_id: str,
    changes: Dict[str, Any],
    now: Optional[dt.datetime] = None,
) -> BaseItem:
    """Apply a partial patch. Keys absent from ``changes`` are left untouched."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidEventError(f"Unsupported fields: {', '.join(sorted(unknown))}")

    item_id = resolve_base_id(item_or_instance_id)
    current = store.get(owner_id, item_id)
    if current is None:
        raise EventNotFoundError(owner_id, item_id)

    fields: Dict[str, Any] = dict(changes)
    if "title" in fields:
        if not fields["title"] or not fields["title"].strip():
            raise InvalidEventError("title is required")
        fields["title"] = fields["title"].strip()
    if "start" in fields:
        fields["start"] = _instant("start", fields["start"])
    if "end" in fields:
        fields["end"] = _instant("end", fields["end"])
    if "recurrence" in fields:
        fields["recurrence"] = _recurrence(fields["recurrence"])
    if "all_day" in fields and not isinstance(fields["all_day"], bool):
        raise InvalidEventError("all_day must be true or false")
    if "color" in fields and not fields["color"]:
        fields["color"] = DEFAULT_EVENT_COLOR
    _check_span(fields.get("start", current.start), fields.get("end", current.end))
    fields["updated_at"] = now or utc_now()

    store.patch(owner_id, item_id, fields)
    logger.info(
        "event_updated owner=%s id=%s fields=%s", owner_id, item_id, ",".join(sorted(changes))
    )
    updated = store.get(owner_id, item_id)
    if updated is None:
        raise EventNotFoundError(owner_id, item_id)
    return updated


def delete_event(store: BaseItemStore, owner_id: str, item_or_instance_id: str) -> str:
    """Delete the base item behind an id; instance ids remove their whole series."""
    item_id = resolve_base_id(item_or_instance_id)
    store.delete_by_id(owner_id, item_id)
    logger.info(
        "event_deleted owner=%s id=%s requested=%s", owner_id, item_id, item_or_instance_id
    )
    return item_id
