from .schedule import (
    EventCreateRequest,
    EventResponse,
    EventUpdateRequest,
    OccurrenceResponse,
    RecurrencePayload,
)

__all__ = [
    "EventCreateRequest",
    "EventResponse",
    "EventUpdateRequest",
    "OccurrenceResponse",
    "RecurrencePayload",
]
