from __future__ import annotations


class ScheduleError(Exception):
    """Base error for the schedule engine."""


class InvalidEventError(ScheduleError, ValueError):
    """Raised when a base item payload is rejected."""


class InvalidRecurrenceError(InvalidEventError):
    """Raised when a recurrence rule cannot be expanded."""


class EventNotFoundError(ScheduleError, LookupError):
    def __init__(self, owner_id: str, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.owner_id = owner_id
        self.event_id = event_id
