from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException, Query

from apps.api.schemas.schedule import (
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
    OccurrenceResponse,
    RecurrencePayload,
)
from packages.core.schedule import (
    BaseItem,
    EventNotFoundError,
    InvalidEventError,
    Occurrence,
    ScheduleAggregator,
    ScheduleFilters,
    create_event,
    date_range_for_preset,
    delete_event,
    filter_occurrences,
    get_event,
    load_settings,
    update_event,
)
from packages.core.schedule.models import RecurrenceRule
from packages.core.schedule.times import parse_instant, to_iso, utc_now
from packages.core.storage.sqlite import SQLiteScheduleStore


router = APIRouter(prefix="/schedule", tags=["schedule"])


def _store() -> SQLiteScheduleStore:
    return SQLiteScheduleStore(db_path=load_settings().db_path)


def _recurrence(rule: Optional[RecurrenceRule]) -> Optional[RecurrencePayload]:
    if rule is None:
        return None
    return RecurrencePayload(
        frequency=rule.frequency, interval=rule.interval, end_date=to_iso(rule.end_date)
    )


def _fields(item: Union[BaseItem, Occurrence]) -> Dict[str, Any]:
    return {
        "id": item.id,
        "owner_id": item.owner_id,
        "title": item.title,
        "description": item.description,
        "start": to_iso(item.start),
        "end": to_iso(item.end),
        "all_day": item.all_day,
        "kind": item.kind,
        "color": item.color,
        "location": item.location,
        "recurrence": _recurrence(item.recurrence),
        "created_at": to_iso(item.created_at),
        "updated_at": to_iso(item.updated_at),
    }


def _filters(
    kind: Optional[List[str]],
    color: Optional[List[str]],
    preset: Optional[str],
    start: Optional[str],
    end: Optional[str],
) -> ScheduleFilters:
    try:
        range_start = parse_instant(start) if start else None
        range_end = parse_instant(end) if end else None
        if preset and preset != "custom":
            range_start, range_end = date_range_for_preset(preset, utc_now())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ScheduleFilters(
        kinds=tuple(kind or ()),
        colors=tuple(color or ()),
        start=range_start,
        end=range_end,
    )


@router.get("/{owner_id}", response_model=List[OccurrenceResponse])
def schedule(
    owner_id: str,
    kind: Optional[List[str]] = Query(default=None),
    color: Optional[List[str]] = Query(default=None),
    preset: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[OccurrenceResponse]:
    filters = _filters(kind, color, preset, start, end)
    store = _store()
    occurrences = ScheduleAggregator(store, store).get_schedule(owner_id)
    return [
        OccurrenceResponse(**_fields(occurrence), base_event_id=occurrence.base_event_id)
        for occurrence in filter_occurrences(occurrences, filters)
    ]


@router.post("/{owner_id}/events", response_model=EventResponse)
def create(owner_id: str, payload: EventCreateRequest) -> EventResponse:
    try:
        item = create_event(
            _store(),
            owner_id,
            title=payload.title,
            start=payload.start,
            end=payload.end,
            description=payload.description,
            all_day=payload.all_day,
            color=payload.color,
            location=payload.location,
            recurrence=payload.recurrence.model_dump() if payload.recurrence else None,
        )
    except InvalidEventError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return EventResponse(**_fields(item))


@router.get("/{owner_id}/events/{event_id}", response_model=EventResponse)
def get(owner_id: str, event_id: str) -> EventResponse:
    item = get_event(_store(), owner_id, event_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventResponse(**_fields(item))


@router.patch("/{owner_id}/events/{event_id}", response_model=EventResponse)
def update(owner_id: str, event_id: str, payload: EventUpdateRequest) -> EventResponse:
    try:
        item = update_event(_store(), owner_id, event_id, payload.model_dump(exclude_unset=True))
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Event not found") from exc
    except InvalidEventError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return EventResponse(**_fields(item))


@router.delete("/{owner_id}/events/{event_id}")
def delete(owner_id: str, event_id: str) -> Dict[str, Any]:
    try:
        base_id = delete_event(_store(), owner_id, event_id)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Event not found") from exc
    return {"status": "deleted", "id": base_id}
