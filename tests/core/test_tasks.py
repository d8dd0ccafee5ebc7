import datetime as dt
import logging

from packages.core.schedule.models import TASK_COLOR, ExternalTask
from packages.core.schedule.tasks import synthesize, synthesize_all


UTC = dt.timezone.utc
NOW = dt.datetime(2026, 3, 1, tzinfo=UTC)


def _task(task_id="t1", due_date="2026-03-10T15:00:00Z", created_at="2026-02-01T00:00:00Z"):
    return ExternalTask(
        id=task_id,
        title="File taxes",
        description="Federal and state",
        status="todo",
        priority="high",
        due_date=due_date,
        assignee_ids=frozenset({"user-1"}),
        created_at=created_at,
        updated_at=created_at,
    )


def test_synthesize_task_with_due_date():
    occurrence = synthesize(_task(), "user-1", now=NOW)

    assert occurrence is not None
    assert occurrence.id == "task_t1"
    assert occurrence.kind == "task"
    assert occurrence.color == TASK_COLOR
    assert occurrence.all_day is False
    assert occurrence.base_event_id == "t1"
    assert occurrence.owner_id == "user-1"
    assert occurrence.start == dt.datetime(2026, 3, 10, 15, 0, tzinfo=UTC)
    assert occurrence.end - occurrence.start == dt.timedelta(hours=1)
    assert occurrence.created_at == dt.datetime(2026, 2, 1, tzinfo=UTC)
    assert occurrence.recurrence is None


def test_task_without_due_date_is_skipped():
    assert synthesize(_task(due_date=None), "user-1", now=NOW) is None


def test_unparseable_due_date_is_logged_and_skipped(caplog):
    with caplog.at_level(logging.WARNING, logger="unified_schedule.tasks"):
        occurrence = synthesize(_task(due_date="not-a-date"), "user-1", now=NOW)

    assert occurrence is None
    assert "task_due_date_invalid" in caplog.text


def test_unparseable_timestamps_fall_back_to_now():
    occurrence = synthesize(_task(created_at="yesterday"), "user-1", now=NOW)

    assert occurrence is not None
    assert occurrence.created_at == NOW
    assert occurrence.updated_at == NOW


def test_synthesize_all_drops_invalid_tasks():
    tasks = [_task("a"), _task("b", due_date="not-a-date"), _task("c", due_date=None)]

    occurrences = synthesize_all(tasks, "user-1", now=NOW)

    assert [occurrence.id for occurrence in occurrences] == ["task_a"]


def test_out_of_range_due_dates_are_skipped(caplog):
    tasks = [
        _task("early", due_date="0001-01-01T00:00:00+01:00"),
        _task("late", due_date="9999-12-31T23:30:00Z"),
        _task("ok"),
    ]

    with caplog.at_level(logging.WARNING, logger="unified_schedule.tasks"):
        occurrences = synthesize_all(tasks, "user-1", now=NOW)

    assert [occurrence.id for occurrence in occurrences] == ["task_ok"]
    assert caplog.text.count("task_due_date_invalid") == 2
