"""Tests for the planner application layer."""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from yearplanner.adapters.api_client import SyncError
from yearplanner.config import Config
from yearplanner.planner import Planner


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state.json"


@pytest.fixture
def planner(state_path):
    return Planner(Config(), state_path=state_path)


@pytest.fixture
def client():
    client = MagicMock()
    client.fetch_items.return_value = []
    client.push_items.return_value = {"success": True}
    return client


def read_state(path):
    return json.loads(path.read_text())


class TestLocalPersistence:
    def test_starts_empty_without_state(self, planner):
        assert planner.events == []
        assert planner.tasks == []
        assert planner.cloud_sync_enabled is False

    def test_malformed_state_is_empty(self, state_path):
        state_path.write_text("[not json")
        planner = Planner(Config(), state_path=state_path)
        assert planner.events == []

    def test_every_mutation_is_saved(self, planner, state_path):
        event = planner.add_event("Midsummer", "06-20", "06-22")
        assert read_state(state_path)["events"][0]["id"] == event.id

        planner.update_event(event.id, title="Midsommar")
        assert read_state(state_path)["events"][0]["title"] == "Midsommar"

        planner.delete_event(event.id)
        assert read_state(state_path)["events"] == []

    def test_reload_from_state(self, planner, state_path):
        planner.add_task("Taxes", "05-02", subtask_titles=["Gather receipts", "  ", "File"])
        reloaded = Planner(Config(), state_path=state_path)
        assert [t.title for t in reloaded.tasks] == ["Taxes"]
        assert [st.title for st in reloaded.tasks[0].subtasks] == ["Gather receipts", "File"]


class TestEditing:
    def test_add_event_defaults_to_recurring(self, planner):
        assert planner.add_event("Birthday", "03-14").recurring is True

    def test_update_unknown_returns_none(self, planner):
        assert planner.update_event("nope", title="x") is None
        assert planner.update_task("nope", title="x") is None

    def test_delete_unknown_returns_false(self, planner):
        assert planner.delete_event("nope") is False
        assert planner.delete_task("nope") is False

    def test_update_task_replaces_subtasks(self, planner):
        task = planner.add_task("Garden", "04-15", subtask_titles=["Rake"])
        task.subtasks[0].completed = True
        planner.update_task(task.id, subtask_titles=["Rake", "Plant"])
        assert [(st.title, st.completed) for st in task.subtasks] == [("Rake", False), ("Plant", False)]

    def test_update_task_keeps_subtasks_when_not_given(self, planner):
        task = planner.add_task("Garden", "04-15", subtask_titles=["Rake"])
        planner.update_task(task.id, title="Yard")
        assert task.title == "Yard"
        assert [st.title for st in task.subtasks] == ["Rake"]

    def test_toggle_subtask(self, planner):
        task = planner.add_task("Garden", "04-15", subtask_titles=["Rake"])
        subtask = planner.toggle_subtask(task.id, task.subtasks[0].id)
        assert subtask.completed is True
        assert task.is_completed is True
        planner.toggle_subtask(task.id, subtask.id)
        assert task.is_completed is False

    def test_toggle_subtask_unknown(self, planner):
        task = planner.add_task("Garden", "04-15")
        assert planner.toggle_subtask(task.id, "missing") is None
        assert planner.toggle_subtask("missing", "missing") is None

    def test_toggle_task(self, planner):
        task = planner.add_task("Call mom", "2025-05-11", recurring=False)
        planner.toggle_task(task.id)
        assert task.is_completed is True


class TestCloudSync:
    def test_load_from_cloud_replaces_local(self, state_path, client):
        client.fetch_items.side_effect = lambda dt: (
            [{"id": "c1", "title": "Cloud", "startDate": "01-01", "recurring": True}] if dt == "events" else []
        )
        planner = Planner(Config(), state_path=state_path, client=client)

        assert planner.load_from_cloud() is True
        assert [e.id for e in planner.events] == ["c1"]
        assert planner.last_sync_time is not None
        assert read_state(state_path)["lastSyncTime"] == planner.last_sync_time

    def test_empty_cloud_keeps_local(self, state_path, client):
        Planner(Config(), state_path=state_path).add_event("Local", "02-02")
        planner = Planner(Config(), state_path=state_path, client=client)

        assert planner.load_from_cloud() is False
        assert [e.title for e in planner.events] == ["Local"]

    def test_network_failure_keeps_local(self, state_path, client):
        Planner(Config(), state_path=state_path).add_event("Local", "02-02")
        client.fetch_items.side_effect = SyncError("offline")
        planner = Planner(Config(), state_path=state_path, client=client)

        assert planner.load_from_cloud() is False
        assert [e.title for e in planner.events] == ["Local"]

    def test_mutation_pushes_both_collections(self, state_path, client):
        planner = Planner(Config(), state_path=state_path, client=client)
        planner.add_event("Party", "2025-07-01", recurring=False)

        pushed = {call.args[0]: call.args[1] for call in client.push_items.call_args_list}
        assert [e["title"] for e in pushed["events"]] == ["Party"]
        assert pushed["tasks"] == []
        assert planner.last_sync_time is not None

    def test_push_failure_does_not_roll_back(self, state_path, client):
        client.push_items.side_effect = SyncError("offline")
        planner = Planner(Config(), state_path=state_path, client=client)

        event = planner.add_event("Party", "07-01")

        assert planner.events == [event]
        assert read_state(state_path)["events"][0]["id"] == event.id
        assert planner.last_sync_time is None

    def test_client_built_from_config(self, state_path):
        config = Config(enable_cloud_storage=True, api_base_url="https://api.example.com", user_id="me")
        planner = Planner(config, state_path=state_path)
        assert planner.cloud_sync_enabled is True
        assert planner.client.user_id == "me"

    def test_no_client_without_api_url(self, state_path):
        planner = Planner(Config(enable_cloud_storage=True), state_path=state_path)
        assert planner.cloud_sync_enabled is False
        assert planner.load_from_cloud() is False


class TestViews:
    def test_timeline(self, planner):
        planner.add_event("Vacation", "2025-07-01", "2025-07-14", recurring=False)
        planner.add_task("Pack", "2025-06-30", recurring=False)
        days = planner.timeline(date(2025, 6, 28))
        assert [d.date for d in days] == [date(2025, 6, 30), date(2025, 7, 1), date(2025, 7, 14)]

    def test_future_overview_months_then_quarters(self, planner):
        planner.add_event("Feb", "02-10")
        planner.add_event("Sep", "09-10")
        titles = [b.title for b in planner.future_overview(date(2025, 1, 15))]
        assert titles == ["February", "2025 Q3", "2026 Q1", "2026 Q3"]

    def test_analytics(self, planner):
        planner.add_event("Yearly", "01-01")
        planner.add_event("Once", "2025-01-01", recurring=False)
        task = planner.add_task("Done", "01-01")
        planner.toggle_task(task.id)
        stats = planner.analytics()
        assert stats["totalEvents"] == 2
        assert stats["recurringEvents"] == 1
        assert stats["completedTasks"] == 1

    def test_export_backup_locally(self, planner):
        planner.add_event("Yearly", "01-01")
        document = planner.export_backup()
        assert document["version"] == "1.0.0"
        assert [e["title"] for e in document["data"]["events"]] == ["Yearly"]
        assert document["data"]["tasks"] == []

    def test_export_backup_falls_back_on_sync_error(self, state_path, client):
        client.export_backup.side_effect = SyncError("offline")
        planner = Planner(Config(), state_path=state_path, client=client)
        assert planner.export_backup()["data"] == {"events": [], "tasks": []}
