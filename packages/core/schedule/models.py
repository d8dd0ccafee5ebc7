from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional

from .times import parse_instant, to_iso


FREQUENCIES = ("daily", "weekly", "monthly", "yearly")

KIND_EVENT = "event"
KIND_TASK = "task"

DEFAULT_EVENT_COLOR = "#3b82f6"
TASK_COLOR = "#22c55e"


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: str
    interval: int = 1
    end_date: Optional[dt.datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequency": self.frequency,
            "interval": self.interval,
            "end_date": to_iso(self.end_date),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RecurrenceRule":
        end_date = raw.get("end_date")
        return cls(
            frequency=raw["frequency"],
            interval=raw.get("interval", 1),
            end_date=parse_instant(end_date) if end_date else None,
        )


@dataclass(frozen=True)
class BaseItem:
    id: str
    owner_id: str
    title: str
    start: dt.datetime
    end: dt.datetime
    created_at: dt.datetime
    updated_at: dt.datetime
    description: Optional[str] = None
    all_day: bool = False
    kind: str = KIND_EVENT
    color: str = DEFAULT_EVENT_COLOR
    location: Optional[str] = ""
    recurrence: Optional[RecurrenceRule] = None


@dataclass(frozen=True)
class Occurrence:
    id: str
    owner_id: str
    title: str
    start: dt.datetime
    end: dt.datetime
    created_at: dt.datetime
    updated_at: dt.datetime
    description: Optional[str] = None
    all_day: bool = False
    kind: str = KIND_EVENT
    color: str = DEFAULT_EVENT_COLOR
    location: Optional[str] = None
    recurrence: Optional[RecurrenceRule] = None
    base_event_id: Optional[str] = None

    @classmethod
    def from_base_item(
        cls, item: BaseItem, base_event_id: Optional[str] = None
    ) -> "Occurrence":
        return cls(
            id=item.id,
            owner_id=item.owner_id,
            title=item.title,
            start=item.start,
            end=item.end,
            created_at=item.created_at,
            updated_at=item.updated_at,
            description=item.description,
            all_day=item.all_day,
            kind=item.kind,
            color=item.color,
            location=item.location,
            recurrence=None if base_event_id else item.recurrence,
            base_event_id=base_event_id,
        )

    def shifted(self, occurrence_id: str, start: dt.datetime, end: dt.datetime) -> "Occurrence":
        return replace(self, id=occurrence_id, start=start, end=end, recurrence=None)


@dataclass(frozen=True)
class ExternalTask:
    id: str
    title: str
    status: str
    priority: str
    created_at: str
    updated_at: str
    description: Optional[str] = None
    due_date: Optional[str] = None
    assignee_ids: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class OccurrenceId:
    """Composite key of a generated instance: the base id plus its start in epoch ms."""

    base_id: str
    timestamp_ms: Optional[int] = None

    def encode(self) -> str:
        if self.timestamp_ms is None:
            return self.base_id
        return f"{self.base_id}_{self.timestamp_ms}"

    @classmethod
    def parse(cls, raw: str) -> "OccurrenceId":
        base_id, sep, suffix = raw.partition("_")
        if not sep:
            return cls(base_id=raw)
        try:
            timestamp_ms: Optional[int] = int(suffix)
        except ValueError:
            timestamp_ms = None
        return cls(base_id=base_id, timestamp_ms=timestamp_ms)
