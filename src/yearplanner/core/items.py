"""Event and task domain objects - no I/O dependencies."""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import date

from .dates import MonthDay, parse_full_date, parse_month_day

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Millisecond timestamp in base 36 plus a random suffix."""
    suffix = "".join(random.choices(_BASE36, k=11))
    return _to_base36(int(time.time() * 1000)) + suffix


@dataclass
class Event:
    """A calendar event, either a yearly anchor range or a fixed date range."""

    id: str
    title: str
    start_date: str
    end_date: str = ""
    recurring: bool = False
    description: str = ""

    @property
    def is_multi_day(self) -> bool:
        """True when the event has an end distinct from its start."""
        if not self.end_date:
            return False
        if self.recurring:
            return self.start_anchor() != self.end_anchor()
        return self.start_day() != self.end_day()

    def start_anchor(self) -> MonthDay:
        return parse_month_day(self.start_date)

    def end_anchor(self) -> MonthDay:
        """End anchor, defaulting to the start anchor."""
        return parse_month_day(self.end_date) if self.end_date else self.start_anchor()

    def start_day(self) -> date:
        return parse_full_date(self.start_date)

    def end_day(self) -> date:
        """Absolute end date, defaulting to the start date."""
        return parse_full_date(self.end_date) if self.end_date else self.start_day()

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        """Create Event from its stored JSON form."""
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            start_date=data.get("startDate", "") or "",
            end_date=data.get("endDate", "") or "",
            recurring=bool(data.get("recurring", False)),
            description=data.get("description", "") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "description": self.description,
            "recurring": self.recurring,
        }


@dataclass
class Subtask:
    """A checklist entry under a task."""

    id: str
    title: str
    completed: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Subtask":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            completed=bool(data.get("completed", False)),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "completed": self.completed}


@dataclass
class Task:
    """A task with a single due anchor and optional subtasks."""

    id: str
    title: str
    due_date: str
    recurring: bool = False
    description: str = ""
    subtasks: list[Subtask] = field(default_factory=list)
    completed: bool = False

    @property
    def is_completed(self) -> bool:
        """
        Completion state.

        Without subtasks the task's own flag decides; with subtasks every
        subtask must be done and the own flag is ignored.
        """
        if not self.subtasks:
            return self.completed
        return all(st.completed for st in self.subtasks)

    def due_anchor(self) -> MonthDay:
        return parse_month_day(self.due_date)

    def due_day(self) -> date:
        return parse_full_date(self.due_date)

    def find_subtask(self, subtask_id: str) -> Subtask | None:
        return next((st for st in self.subtasks if st.id == subtask_id), None)

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from its stored JSON form."""
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            due_date=data.get("dueDate", "") or "",
            recurring=bool(data.get("recurring", False)),
            description=data.get("description", "") or "",
            subtasks=[Subtask.from_dict(st) for st in data.get("subtasks") or []],
            completed=bool(data.get("completed", False)),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "dueDate": self.due_date,
            "description": self.description,
            "subtasks": [st.to_dict() for st in self.subtasks],
            "completed": self.completed,
            "recurring": self.recurring,
        }


def dedupe_by_id(items: list) -> list:
    """Keep the first occurrence of each item id, preserving order."""
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique
