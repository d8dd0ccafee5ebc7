from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RecurrencePayload(BaseModel):
    frequency: str = Field(..., description="daily, weekly, monthly or yearly")
    interval: int = Field(default=1, description="Step count between instances")
    end_date: Optional[str] = Field(default=None, description="ISO-8601 last possible start")


class EventCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    start: str = Field(..., description="ISO-8601 start datetime")
    end: str = Field(..., description="ISO-8601 end datetime")
    description: Optional[str] = None
    all_day: bool = False
    color: Optional[str] = None
    location: Optional[str] = ""
    recurrence: Optional[RecurrencePayload] = None


class EventUpdateRequest(BaseModel):
    title: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    description: Optional[str] = None
    all_day: Optional[bool] = None
    color: Optional[str] = None
    location: Optional[str] = None
    recurrence: Optional[RecurrencePayload] = None


class EventResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: Optional[str]
    start: str
    end: str
    all_day: bool
    kind: str
    color: str
    location: Optional[str]
    recurrence: Optional[RecurrencePayload]
    created_at: str
    updated_at: str


class OccurrenceResponse(EventResponse):
    base_event_id: Optional[str]
