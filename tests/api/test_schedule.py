from fastapi.testclient import TestClient

from apps.api.main import app
from apps.api.routes import schedule as schedule_module
from packages.core.schedule.models import ExternalTask
from packages.core.storage.sqlite import SQLiteScheduleStore


def _client(monkeypatch, tmp_path):
    store = SQLiteScheduleStore(db_path=str(tmp_path / "schedule.db"))
    monkeypatch.setattr(schedule_module, "_store", lambda: store)
    return TestClient(app), store


def test_schedule_event_crud(monkeypatch, tmp_path):
    client, _ = _client(monkeypatch, tmp_path)

    create_resp = client.post(
        "/schedule/user-1/events",
        json={
            "title": "Piano lesson",
            "start": "2099-01-05T16:00:00Z",
            "end": "2099-01-05T17:00:00Z",
            "location": "Studio",
        },
    )
    assert create_resp.status_code == 200
    event = create_resp.json()
    assert event["kind"] == "event"
    assert event["color"] == "#3b82f6"
    assert event["recurrence"] is None

    get_resp = client.get(f"/schedule/user-1/events/{event['id']}")
    assert get_resp.status_code == 200
    assert get_resp.json()["location"] == "Studio"

    update_resp = client.patch(
        f"/schedule/user-1/events/{event['id']}",
        json={"title": "Piano recital"},
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["title"] == "Piano recital"
    assert update_resp.json()["location"] == "Studio"

    delete_resp = client.delete(f"/schedule/user-1/events/{event['id']}_4071139200000")
    assert delete_resp.status_code == 200
    assert delete_resp.json() == {"status": "deleted", "id": event["id"]}

    missing_resp = client.get(f"/schedule/user-1/events/{event['id']}")
    assert missing_resp.status_code == 404


def test_schedule_rejects_invalid_recurrence(monkeypatch, tmp_path):
    client, _ = _client(monkeypatch, tmp_path)

    response = client.post(
        "/schedule/user-1/events",
        json={
            "title": "Broken",
            "start": "2099-01-05T16:00:00Z",
            "end": "2099-01-05T17:00:00Z",
            "recurrence": {"frequency": "daily", "interval": 0},
        },
    )
    assert response.status_code == 400


def test_schedule_delete_missing_returns_404(monkeypatch, tmp_path):
    client, _ = _client(monkeypatch, tmp_path)

    response = client.delete("/schedule/user-1/events/abc123_1699999999000")
    assert response.status_code == 404


def test_schedule_lists_tasks_then_expanded_events(monkeypatch, tmp_path):
    client, store = _client(monkeypatch, tmp_path)
    store.upsert_task(
        ExternalTask(
            id="t1",
            title="Renew passport",
            status="todo",
            priority="high",
            due_date="2099-02-01T09:00:00Z",
            assignee_ids=frozenset({"user-1"}),
            created_at="2026-01-01T00:00:00Z",
            updated_at="2026-01-01T00:00:00Z",
        )
    )
    client.post(
        "/schedule/user-1/events",
        json={
            "title": "Book club",
            "start": "2026-10-01T18:00:00Z",
            "end": "2026-10-01T19:00:00Z",
            "recurrence": {
                "frequency": "weekly",
                "interval": 1,
                "end_date": "2026-10-15T18:00:00Z",
            },
        },
    )

    response = client.get("/schedule/user-1")
    assert response.status_code == 200
    payload = response.json()
    assert payload[0]["id"] == "task_t1"
    assert payload[0]["kind"] == "task"
    assert payload[0]["base_event_id"] == "t1"
    events = payload[1:]
    assert len(events) == 3
    assert all(item["recurrence"] is None for item in events)
    assert len({item["base_event_id"] for item in events}) == 1

    tasks_only = client.get("/schedule/user-1", params={"kind": "task"})
    assert [item["id"] for item in tasks_only.json()] == ["task_t1"]


def test_schedule_patch_rejects_null_all_day(monkeypatch, tmp_path):
    client, _ = _client(monkeypatch, tmp_path)
    event = client.post(
        "/schedule/user-1/events",
        json={"title": "Fair", "start": "2099-03-01T00:00:00Z", "end": "2099-03-02T00:00:00Z"},
    ).json()

    response = client.patch(f"/schedule/user-1/events/{event['id']}", json={"all_day": None})

    assert response.status_code == 400
    assert client.get(f"/schedule/user-1/events/{event['id']}").json()["all_day"] is False
