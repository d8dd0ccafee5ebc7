from __future__ import annotations

import datetime as dt
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import TYPE_CHECKING, List, Optional

from .config import ScheduleSettings, load_settings
from .errors import InvalidRecurrenceError
from .models import BaseItem, Occurrence
from .recurrence import expand
from .tasks import synthesize_all
from .times import as_utc, utc_now

if TYPE_CHECKING:
    from packages.core.storage.base import BaseItemStore, TaskStore


logger = logging.getLogger("unified_schedule.aggregator")


class ScheduleAggregator:
    """Merges task-derived occurrences with the owner's expanded base items.

    Output is tasks first, then base items in store order. Nothing is
    re-sorted unless ``settings.sort_output`` is set.
    """

    def __init__(
        self,
        event_store: BaseItemStore,
        task_store: TaskStore,
        settings: Optional[ScheduleSettings] = None,
    ) -> None:
        self._event_store = event_store
        self._task_store = task_store
        self._settings = settings or load_settings()

    def horizon_cap(self, now: dt.datetime) -> dt.datetime:
        return as_utc(now) + self._settings.horizon

    def get_schedule(self, owner_id: str, now: Optional[dt.datetime] = None) -> List[Occurrence]:
        now = now or utc_now()
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="schedule-read") as pool:
            items_future = pool.submit(self._event_store.list_by_owner, owner_id)
            tasks_future = pool.submit(self._task_store.list_by_assignee, owner_id)
            items = items_future.result()
            tasks = tasks_future.result()

        cap = self.horizon_cap(now)
        occurrences = synthesize_all(
            tasks, owner_id, now=now, duration=self._settings.task_duration
        )
        task_count = len(occurrences)
        for item in items:
            occurrences.extend(self._occurrences_for(item, cap))

        if self._settings.sort_output:
            occurrences.sort(key=lambda occurrence: as_utc(occurrence.start))

        logger.info(
            "schedule_built owner=%s tasks=%s events=%s occurrences=%s",
            owner_id,
            task_count,
            len(items),
            len(occurrences),
        )
        return occurrences

    def _occurrences_for(self, item: BaseItem, cap: dt.datetime) -> List[Occurrence]:
        if item.recurrence is None:
            return [Occurrence.from_base_item(item)]
        try:
            return expand(item, cap, max_instances=self._settings.max_instances)
        except InvalidRecurrenceError as exc:
            logger.warning("recurrence_invalid id=%s error=%s", item.id, exc)
            return [replace(Occurrence.from_base_item(item), recurrence=None)]
