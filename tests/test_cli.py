"""Tests for the command line interface."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from yearplanner.cli import main
from yearplanner.config import Config


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state.json"


@pytest.fixture
def runner(state_path):
    with patch("yearplanner.cli.load_config", return_value=Config()), patch(
        "yearplanner.planner.STATE_FILE", state_path
    ):
        yield CliRunner()


def stored(state_path):
    return json.loads(state_path.read_text())


class TestEditing:
    def test_add_event(self, runner, state_path):
        result = runner.invoke(main, ["add-event", "Midsommar", "--start", "06-20", "--end", "06-21"])
        assert result.exit_code == 0
        assert "Added event" in result.output
        event = stored(state_path)["events"][0]
        assert event["title"] == "Midsommar"
        assert event["recurring"] is True

    def test_add_task_with_subtasks(self, runner, state_path):
        result = runner.invoke(
            main, ["add-task", "Taxes", "--due", "2025-05-02", "--once", "--subtask", "Receipts", "--subtask", "File"]
        )
        assert result.exit_code == 0
        task = stored(state_path)["tasks"][0]
        assert task["recurring"] is False
        assert [st["title"] for st in task["subtasks"]] == ["Receipts", "File"]

    def test_edit_unknown_event_fails(self, runner):
        result = runner.invoke(main, ["edit-event", "missing", "--title", "x"])
        assert result.exit_code == 1
        assert "no event with id missing" in result.output

    def test_delete_event(self, runner, state_path):
        runner.invoke(main, ["add-event", "Party", "--start", "07-01"])
        event_id = stored(state_path)["events"][0]["id"]

        result = runner.invoke(main, ["delete-event", event_id, "--yes"])

        assert result.exit_code == 0
        assert stored(state_path)["events"] == []

    def test_toggle_task(self, runner, state_path):
        runner.invoke(main, ["add-task", "Call mom", "--due", "05-11"])
        task_id = stored(state_path)["tasks"][0]["id"]

        result = runner.invoke(main, ["toggle-task", task_id])

        assert result.exit_code == 0
        assert "[x] Call mom" in result.output
        assert stored(state_path)["tasks"][0]["completed"] is True

    def test_toggle_unknown_task_fails(self, runner):
        result = runner.invoke(main, ["toggle-task", "missing"])
        assert result.exit_code == 1


class TestViews:
    def test_events_empty(self, runner):
        result = runner.invoke(main, ["events"])
        assert result.exit_code == 0
        assert "No events." in result.output

    def test_events_json(self, runner):
        runner.invoke(main, ["add-event", "Late", "--start", "12-01"])
        runner.invoke(main, ["add-event", "Early", "--start", "01-05"])
        result = runner.invoke(main, ["events", "--json"])
        assert [e["title"] for e in json.loads(result.output)] == ["Early", "Late"]

    def test_timeline(self, runner):
        runner.invoke(main, ["add-event", "Vacation", "--start", "2025-07-01", "--end", "2025-07-14", "--once"])
        runner.invoke(main, ["add-task", "Pack", "--due", "2025-07-01", "--once"])

        result = runner.invoke(main, ["timeline", "--date", "2025-06-30"])

        assert result.exit_code == 0
        assert "Summer planning" in result.output
        assert "### Tomorrow" in result.output
        assert "Vacation (Start)" in result.output
        assert "Pack" in result.output

    def test_timeline_ongoing(self, runner):
        runner.invoke(main, ["add-event", "Vacation", "--start", "2025-07-01", "--end", "2025-07-14", "--once"])
        result = runner.invoke(main, ["timeline", "--date", "2025-07-05", "--json"])
        days = json.loads(result.output)
        assert days[0]["ongoing"] is True
        assert days[0]["events"][0]["marker"] == "(Jul 1) Ongoing"

    def test_summary_needs_month_or_quarter(self, runner):
        result = runner.invoke(main, ["summary", "2025"])
        assert result.exit_code == 1
        assert "exactly one" in result.output

    def test_summary_month(self, runner):
        runner.invoke(main, ["add-event", "Midsommar", "--start", "06-20"])
        result = runner.invoke(main, ["summary", "2025", "--month", "6"])
        assert result.exit_code == 0
        assert "June 2025" in result.output
        assert "Midsommar" in result.output
        assert "No tasks planned" in result.output

    def test_analytics(self, runner):
        runner.invoke(main, ["add-event", "Midsommar", "--start", "06-20"])
        data = json.loads(runner.invoke(main, ["analytics"]).output)
        assert data["totalEvents"] == 1
        assert data["recurringEvents"] == 1


class TestSyncAndExport:
    def test_sync_requires_cloud(self, runner):
        result = runner.invoke(main, ["sync"])
        assert result.exit_code == 1
        assert "not configured" in result.output

    def test_export(self, runner, tmp_path):
        runner.invoke(main, ["add-event", "Midsommar", "--start", "06-20"])
        output = tmp_path / "backup.json"

        result = runner.invoke(main, ["export", "-o", str(output)])

        assert result.exit_code == 0
        document = json.loads(output.read_text())
        assert document["version"] == "1.0.0"
        assert document["data"]["events"][0]["title"] == "Midsommar"
