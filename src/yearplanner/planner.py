"""Application layer shared by the CLI.

Holds the in-memory event and task collections, writes the local state file
on every mutation and mirrors the collections to the backend when cloud
storage is enabled.
"""

import logging
from datetime import date, datetime
from pathlib import Path

from .adapters.api_client import PlannerAPIClient, SyncError
from .adapters.local_state import LocalState, LocalStateFile
from .config import STATE_FILE, Config
from .core import analytics
from .core.buckets import Bucket, MonthCompletion, dashboard, future_months, future_summary, quarterly_overview
from .core.items import Event, Subtask, Task, generate_id
from .core.timeline import TimelineDay, build_timeline, sort_events, sort_tasks, unfinished_tasks

logger = logging.getLogger(__name__)


def _new_subtasks(titles: list[str]) -> list[Subtask]:
    return [Subtask(id=generate_id(), title=t.strip()) for t in titles if t.strip()]


class Planner:
    """Events and tasks for one user, persisted locally and optionally synced."""

    def __init__(
        self,
        config: Config,
        state_path: Path | str | None = None,
        client: PlannerAPIClient | None = None,
    ):
        self.config = config
        self.state_file = LocalStateFile(state_path or STATE_FILE)
        state = self.state_file.load()
        self.events = [Event.from_dict(e) for e in state.events]
        self.tasks = [Task.from_dict(t) for t in state.tasks]
        self.last_sync_time = state.last_sync_time

        if client is None and config.enable_cloud_storage and config.api_base_url:
            client = PlannerAPIClient(config.api_base_url, config.user_id)
        self.client = client

    @property
    def cloud_sync_enabled(self) -> bool:
        return self.client is not None

    # ============== Persistence ==============

    def _write_local(self) -> None:
        self.state_file.save(
            LocalState(
                events=[e.to_dict() for e in self.events],
                tasks=[t.to_dict() for t in self.tasks],
                last_sync_time=self.last_sync_time,
            )
        )

    def save(self) -> None:
        """Persist locally, then push to the cloud if enabled."""
        self._write_local()
        if self.client:
            self.save_to_cloud()

    def load_from_cloud(self) -> bool:
        """
        Replace local data with the cloud copy.

        Only happens when the cloud holds at least one event or task. Network
        failures keep the local data. Returns True if local data was replaced.
        """
        if not self.client:
            logger.info("Cloud storage unavailable: API URL missing")
            return False

        try:
            cloud_events = self.client.fetch_items("events")
            cloud_tasks = self.client.fetch_items("tasks")
        except SyncError as e:
            logger.warning(f"Could not load from cloud: {e}")
            return False

        if not cloud_events and not cloud_tasks:
            return False

        self.events = [Event.from_dict(e) for e in cloud_events]
        self.tasks = [Task.from_dict(t) for t in cloud_tasks]
        self.last_sync_time = analytics.utc_now_iso()
        self._write_local()
        logger.info("Data loaded from cloud")
        return True

    def save_to_cloud(self) -> bool:
        """Push both collections. A failure is logged; local data is kept as is."""
        if not self.client:
            return False

        try:
            self.client.push_items("events", [e.to_dict() for e in self.events])
            self.client.push_items("tasks", [t.to_dict() for t in self.tasks])
        except SyncError as e:
            logger.error(f"Could not save to cloud: {e}")
            return False

        self.last_sync_time = analytics.utc_now_iso()
        self._write_local()
        logger.info("Data saved to cloud")
        return True

    # ============== Events ==============

    def find_event(self, event_id: str) -> Event | None:
        return next((e for e in self.events if e.id == event_id), None)

    def add_event(
        self,
        title: str,
        start_date: str,
        end_date: str = "",
        recurring: bool = True,
        description: str = "",
    ) -> Event:
        event = Event(
            id=generate_id(),
            title=title,
            start_date=start_date,
            end_date=end_date,
            recurring=recurring,
            description=description,
        )
        self.events.append(event)
        self.save()
        return event

    def update_event(self, event_id: str, **changes) -> Event | None:
        """Edit an event in place. Returns None if the id is unknown."""
        event = self.find_event(event_id)
        if event is None:
            return None
        for name in ("title", "start_date", "end_date", "recurring", "description"):
            if changes.get(name) is not None:
                setattr(event, name, changes[name])
        self.save()
        return event

    def delete_event(self, event_id: str) -> bool:
        before = len(self.events)
        self.events = [e for e in self.events if e.id != event_id]
        if len(self.events) == before:
            return False
        self.save()
        return True

    # ============== Tasks ==============

    def find_task(self, task_id: str) -> Task | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def add_task(
        self,
        title: str,
        due_date: str,
        recurring: bool = True,
        description: str = "",
        subtask_titles: list[str] | None = None,
    ) -> Task:
        task = Task(
            id=generate_id(),
            title=title,
            due_date=due_date,
            recurring=recurring,
            description=description,
            subtasks=_new_subtasks(subtask_titles or []),
        )
        self.tasks.append(task)
        self.save()
        return task

    def update_task(self, task_id: str, subtask_titles: list[str] | None = None, **changes) -> Task | None:
        """
        Edit a task in place. Returns None if the id is unknown.

        Passing subtask_titles replaces the subtask list with fresh,
        uncompleted subtasks.
        """
        task = self.find_task(task_id)
        if task is None:
            return None
        for name in ("title", "due_date", "recurring", "description"):
            if changes.get(name) is not None:
                setattr(task, name, changes[name])
        if subtask_titles is not None:
            task.subtasks = _new_subtasks(subtask_titles)
        self.save()
        return task

    def delete_task(self, task_id: str) -> bool:
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.id != task_id]
        if len(self.tasks) == before:
            return False
        self.save()
        return True

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Subtask | None:
        task = self.find_task(task_id)
        subtask = task.find_subtask(subtask_id) if task else None
        if subtask is None:
            return None
        subtask.completed = not subtask.completed
        self.save()
        return subtask

    def toggle_task(self, task_id: str) -> Task | None:
        """Flip a task's own completed flag (only meaningful without subtasks)."""
        task = self.find_task(task_id)
        if task is None:
            return None
        task.completed = not task.completed
        self.save()
        return task

    # ============== Views ==============

    def timeline(self, now: date | datetime | None = None) -> list[TimelineDay]:
        return build_timeline(self.events, self.tasks, now or datetime.now())

    def sorted_events(self) -> list[Event]:
        return sort_events(self.events)

    def sorted_tasks(self) -> list[Task]:
        return sort_tasks(self.tasks)

    def unfinished_tasks(self) -> list[Task]:
        return unfinished_tasks(self.tasks)

    def future_overview(self, now: date | datetime | None = None) -> list[Bucket]:
        """Next three months followed by the later quarters."""
        now = now or datetime.now()
        return future_months(self.events, self.tasks, now) + quarterly_overview(self.events, self.tasks, now)

    def summary(self, year: int, month: int | None = None, quarter: int | None = None) -> Bucket:
        return future_summary(self.events, self.tasks, year, month=month, quarter=quarter)

    def dashboard(self, now: date | datetime | None = None) -> tuple[MonthCompletion, MonthCompletion]:
        return dashboard(self.tasks, now or datetime.now())

    def analytics(self) -> dict:
        return analytics.summarize(
            [e.to_dict() for e in self.events],
            [t.to_dict() for t in self.tasks],
        )

    def local_backup(self) -> dict:
        return analytics.backup_document(
            {
                "events": [e.to_dict() for e in self.events],
                "tasks": [t.to_dict() for t in self.tasks],
            }
        )

    def export_backup(self) -> dict:
        """Backup document from the server, or built locally without one."""
        if not self.client:
            return self.local_backup()
        try:
            return self.client.export_backup()
        except SyncError as e:
            logger.warning(f"Could not export backup from cloud, using local data: {e}")
            return self.local_backup()
