"""Display formatting for dates, events and tasks."""

from datetime import date, timedelta

from .dates import parse_full_date, parse_month_day
from .items import Event, Task

MONTH_ABBR = ["", "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
MARKER_LABELS = {"start": "Start", "end": "End"}
ONGOING = "Ongoing"


def format_short_date(d: date) -> str:
    """E.g. "Jan 1"."""
    return f"{MONTH_ABBR[d.month]} {d.day}"


def format_full_date(value: str | date) -> str:
    """E.g. "January 1, 2025"."""
    d = parse_full_date(value) if isinstance(value, str) else value
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def format_anchor(value: str) -> str:
    """A recurring "MM-DD" anchor as "Jun 1"."""
    md = parse_month_day(value)
    return f"{MONTH_ABBR[md.month]} {md.day}"


def format_month(d: date) -> str:
    """Month name, e.g. "March"."""
    return d.strftime("%B")


def format_timeline_date(d: date, today: date | None = None) -> str:
    """Today / Tomorrow / short date."""
    today = today or date.today()
    if d == today:
        return "Today"
    if d == today + timedelta(days=1):
        return "Tomorrow"
    return format_short_date(d)


def format_event_date(event: Event) -> str:
    if event.recurring:
        if event.end_date:
            return f"{format_anchor(event.start_date)} - {format_anchor(event.end_date)} (yearly)"
        return f"{format_anchor(event.start_date)} (yearly)"
    if event.end_date and event.is_multi_day:
        return f"{format_full_date(event.start_date)} - {format_full_date(event.end_date)}"
    return format_full_date(event.start_date)


def format_task_date(task: Task) -> str:
    if task.recurring:
        return f"{format_anchor(task.due_date)} (yearly)"
    return format_full_date(task.due_date)


def format_marker(marker: str) -> str:
    """Human label for a boundary marker; ongoing markers pass through."""
    return MARKER_LABELS.get(marker, marker)


def format_count(count: int) -> str:
    return f"{count} item" if count == 1 else f"{count} items"
