"""Recurrence matching - which events and tasks fall on a given day."""

from dataclasses import dataclass
from datetime import date, datetime

from .dates import MonthDay, as_date, is_same_day
from .items import Event, Task

START = "start"
END = "end"


@dataclass
class MarkedEvent:
    """An event placed on a day, with its boundary or ongoing marker."""

    event: Event
    marker: str = ""


def is_date_in_range(probe: MonthDay, start: MonthDay, end: MonthDay) -> bool:
    """
    Check whether a month/day falls inside an anchor range.

    Ranges that cross a month boundary match the tail of the start month, the
    head of the end month, and any month numerically between the two. A range
    running from December into January therefore only matches its two
    boundary months.
    """
    if start.month == end.month:
        return probe.month == start.month and start.day <= probe.day <= end.day
    return (
        (probe.month == start.month and probe.day >= start.day)
        or (probe.month == end.month and probe.day <= end.day)
        or start.month < probe.month < end.month
    )


def matches_date(item: Event | Task, when: date | datetime) -> bool:
    """Whether an event's range (or a task's due day) covers a calendar day."""
    day = as_date(when)
    if isinstance(item, Task):
        if item.recurring:
            return item.due_anchor() == MonthDay.of(day)
        return is_same_day(item.due_day(), day)

    if item.recurring:
        return is_date_in_range(MonthDay.of(day), item.start_anchor(), item.end_anchor())
    return item.start_day() <= day <= item.end_day()


def boundary_marker(event: Event, when: date | datetime) -> str:
    """Return "start", "end" or "" for a multi-day event on a given day."""
    if not event.is_multi_day:
        return ""
    day = as_date(when)
    if event.recurring:
        probe = MonthDay.of(day)
        if probe == event.start_anchor():
            return START
        if probe == event.end_anchor():
            return END
        return ""
    if is_same_day(day, event.start_day()):
        return START
    if is_same_day(day, event.end_day()):
        return END
    return ""


def events_for_date(events: list[Event], when: date | datetime) -> list[Event]:
    """All events active on a day, interior days of ranges included."""
    return [e for e in events if matches_date(e, when)]


def event_markers_for_date(events: list[Event], when: date | datetime) -> list[MarkedEvent]:
    """
    Events to show on a timeline day.

    Single-day events appear on their day. Multi-day events appear only on
    their start and end days, tagged with the boundary marker; interior days
    are left out.
    """
    marked = []
    for event in events:
        if event.is_multi_day:
            marker = boundary_marker(event, when)
            if marker:
                marked.append(MarkedEvent(event, marker))
        elif matches_date(event, when):
            marked.append(MarkedEvent(event))
    return marked


def tasks_for_date(tasks: list[Task], when: date | datetime) -> list[Task]:
    """Tasks due on a day."""
    return [t for t in tasks if matches_date(t, when)]
