from .base import BaseItemStore, TaskStore
from .sqlite import SQLiteScheduleStore

__all__ = [
    "BaseItemStore",
    "TaskStore",
    "SQLiteScheduleStore",
]
