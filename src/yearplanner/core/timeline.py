"""Rolling timeline resolution - pure functions, no I/O."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .dates import MonthDay, anchor_in_year, as_date, parse_month_day
from .format import ONGOING, format_short_date
from .items import Event, Task
from .recurrence import MarkedEvent, event_markers_for_date, is_date_in_range, tasks_for_date

TIMELINE_DAYS = 30


@dataclass
class TimelineDay:
    """One bucket of the timeline."""

    date: date
    events: list[MarkedEvent] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    is_ongoing: bool = False

    @property
    def has_items(self) -> bool:
        return bool(self.events or self.tasks)


def _ongoing_start(event: Event, today: date) -> date | None:
    """Start occurrence of an event in progress on `today`, or None if it isn't."""
    if event.recurring:
        start = event.start_anchor()
        if not is_date_in_range(MonthDay.of(today), start, event.end_anchor()):
            return None
        return anchor_in_year(start, today.year)

    start = event.start_day()
    if start <= today <= event.end_day():
        return start
    return None


def get_ongoing_events(events: list[Event], now: date | datetime) -> list[MarkedEvent]:
    """
    Multi-day events whose range contains today.

    The marker carries the start date when the event began before today and
    is a bare "Ongoing" on its first day.
    """
    today = as_date(now)
    ongoing = []
    for event in events:
        if not event.is_multi_day:
            continue
        start = _ongoing_start(event, today)
        if start is None:
            continue
        if today > start:
            marker = f"({format_short_date(start)}) {ONGOING}"
        else:
            marker = ONGOING
        ongoing.append(MarkedEvent(event, marker))
    return ongoing


def build_timeline(
    events: list[Event],
    tasks: list[Task],
    now: date | datetime,
    days: int = TIMELINE_DAYS,
) -> list[TimelineDay]:
    """
    Build the sparse day-by-day timeline starting at `now`.

    Ongoing events lead in their own bucket and are not repeated on later
    days. Days without events or tasks are dropped. Items keep collection
    order within a day.
    """
    today = as_date(now)
    timeline: list[TimelineDay] = []

    ongoing = get_ongoing_events(events, today)
    ongoing_ids = {m.event.id for m in ongoing}
    if ongoing:
        timeline.append(TimelineDay(date=today, events=ongoing, is_ongoing=True))

    for offset in range(days):
        day = today + timedelta(days=offset)
        markers = event_markers_for_date(events, day)
        if offset > 0:
            markers = [m for m in markers if m.event.id not in ongoing_ids]
        bucket = TimelineDay(date=day, events=markers, tasks=tasks_for_date(tasks, day))
        if bucket.has_items:
            timeline.append(bucket)

    return timeline


def unfinished_tasks(tasks: list[Task]) -> list[Task]:
    """Tasks not yet completed, in collection order."""
    return [t for t in tasks if not t.is_completed]


def subtask_progress(task: Task) -> tuple[int, int, float]:
    """(done, total, percent) across a task's subtasks."""
    total = len(task.subtasks)
    done = sum(1 for st in task.subtasks if st.completed)
    percent = (done / total) * 100 if total else 0.0
    return done, total, percent


def _recurring_first_key(recurring: bool, value: str) -> tuple:
    if recurring:
        md = parse_month_day(value)
        return (0, md.month, md.day, "")
    return (1, 0, 0, value.split("T")[0])


def sort_events(events: list[Event]) -> list[Event]:
    """Recurring events by anchor first, then fixed events by date."""
    return sorted(events, key=lambda e: _recurring_first_key(e.recurring, e.start_date))


def sort_tasks(tasks: list[Task]) -> list[Task]:
    """Recurring tasks by anchor first, then fixed tasks by due date."""
    return sorted(tasks, key=lambda t: _recurring_first_key(t.recurring, t.due_date))
