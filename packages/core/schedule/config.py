from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from typing import Optional, Union

from dateutil.relativedelta import relativedelta


BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
DEFAULT_DB_PATH = os.path.join(BASE_DIR, "apps", "api", "data", "schedule.db")
DEFAULT_MAX_INSTANCES = 365
DEFAULT_TASK_DURATION_MINUTES = 60


@dataclass(frozen=True)
class ScheduleSettings:
    horizon_days: Optional[int] = None
    max_instances: int = DEFAULT_MAX_INSTANCES
    task_duration_minutes: int = DEFAULT_TASK_DURATION_MINUTES
    sort_output: bool = False
    db_path: str = DEFAULT_DB_PATH

    @property
    def horizon(self) -> Union[relativedelta, dt.timedelta]:
        if self.horizon_days is None:
            return relativedelta(years=1)
        return dt.timedelta(days=self.horizon_days)

    @property
    def task_duration(self) -> dt.timedelta:
        return dt.timedelta(minutes=self.task_duration_minutes)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    value = int(raw)
    if value <= 0:
        raise RuntimeError(f"{name} must be a positive integer")
    return value


def load_settings() -> ScheduleSettings:
    return ScheduleSettings(
        horizon_days=_env_int("SCHEDULE_HORIZON_DAYS", None),
        max_instances=_env_int("SCHEDULE_MAX_INSTANCES", DEFAULT_MAX_INSTANCES),
        task_duration_minutes=_env_int(
            "SCHEDULE_TASK_DURATION_MINUTES", DEFAULT_TASK_DURATION_MINUTES
        ),
        sort_output=os.getenv("SCHEDULE_SORT_OUTPUT", "false").lower() == "true",
        db_path=os.getenv("SCHEDULE_DB_PATH", DEFAULT_DB_PATH),
    )
