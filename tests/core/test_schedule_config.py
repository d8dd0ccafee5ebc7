import datetime as dt
import os

import pytest
from dateutil.relativedelta import relativedelta

from packages.core.schedule.config import ScheduleSettings, load_settings


def test_load_settings_defaults(monkeypatch):
    for name in (
        "SCHEDULE_HORIZON_DAYS",
        "SCHEDULE_MAX_INSTANCES",
        "SCHEDULE_TASK_DURATION_MINUTES",
        "SCHEDULE_SORT_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.max_instances == 365
    assert settings.sort_output is False
    assert settings.horizon == relativedelta(years=1)
    assert settings.task_duration == dt.timedelta(hours=1)


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("SCHEDULE_HORIZON_DAYS", "30")
    monkeypatch.setenv("SCHEDULE_SORT_OUTPUT", "TRUE")
    monkeypatch.setenv("SCHEDULE_DB_PATH", "/tmp/schedule.db")

    settings = load_settings()

    assert settings.horizon == dt.timedelta(days=30)
    assert settings.sort_output is True
    assert settings.db_path == "/tmp/schedule.db"


def test_load_settings_rejects_non_positive(monkeypatch):
    monkeypatch.setenv("SCHEDULE_MAX_INSTANCES", "0")

    with pytest.raises(RuntimeError):
        load_settings()


def test_settings_are_frozen():
    with pytest.raises(AttributeError):
        ScheduleSettings().sort_output = True


def test_default_db_path_is_independent_of_cwd(monkeypatch, tmp_path):
    monkeypatch.delenv("SCHEDULE_DB_PATH", raising=False)
    monkeypatch.chdir(tmp_path)

    db_path = load_settings().db_path

    assert os.path.isabs(db_path)
    assert db_path.endswith(os.path.join("apps", "api", "data", "schedule.db"))
    assert not db_path.startswith(str(tmp_path))
