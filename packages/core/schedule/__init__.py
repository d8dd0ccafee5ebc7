from .aggregator import ScheduleAggregator
from .config import ScheduleSettings, load_settings
from .errors import (
    EventNotFoundError,
    InvalidEventError,
    InvalidRecurrenceError,
    ScheduleError,
)
from .filters import ScheduleFilters, date_range_for_preset, filter_occurrences
from .models import BaseItem, ExternalTask, Occurrence, OccurrenceId, RecurrenceRule
from .recurrence import expand
from .service import create_event, delete_event, get_event, update_event
from .tasks import synthesize, synthesize_all

__all__ = [
    "BaseItem",
    "EventNotFoundError",
    "ExternalTask",
    "InvalidEventError",
    "InvalidRecurrenceError",
    "Occurrence",
    "OccurrenceId",
    "RecurrenceRule",
    "ScheduleAggregator",
    "ScheduleError",
    "ScheduleFilters",
    "ScheduleSettings",
    "create_event",
    "date_range_for_preset",
    "delete_event",
    "expand",
    "filter_occurrences",
    "get_event",
    "load_settings",
    "synthesize",
    "synthesize_all",
    "update_event",
]
