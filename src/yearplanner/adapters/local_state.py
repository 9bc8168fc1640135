"""On-device state file - the planner's local copy of events and tasks."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class LocalState:
    """Raw event and task records plus the last successful sync time."""

    events: list[dict] = field(default_factory=list)
    tasks: list[dict] = field(default_factory=list)
    last_sync_time: str | None = None


class LocalStateFile:
    """JSON file holding a LocalState."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> LocalState:
        """Load state. A missing or malformed file reads as empty state."""
        if not self.path.exists():
            return LocalState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return LocalState()
        if not isinstance(data, dict):
            return LocalState()

        events = data.get("events")
        tasks = data.get("tasks")
        return LocalState(
            events=events if isinstance(events, list) else [],
            tasks=tasks if isinstance(tasks, list) else [],
            last_sync_time=data.get("lastSyncTime"),
        )

    def save(self, state: LocalState) -> None:
        """Write state to file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(
                {
                    "events": state.events,
                    "tasks": state.tasks,
                    "lastSyncTime": state.last_sync_time,
                },
                indent=2,
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )
