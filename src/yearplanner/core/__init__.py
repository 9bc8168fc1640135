"""Functional core - pure business logic with no I/O."""

from .items import Event, Subtask, Task, generate_id, dedupe_by_id
from .dates import MonthDay, parse_month_day, is_same_day
from .recurrence import (
    MarkedEvent,
    is_date_in_range,
    matches_date,
    boundary_marker,
    events_for_date,
    event_markers_for_date,
    tasks_for_date,
)
from .timeline import TimelineDay, get_ongoing_events, build_timeline, unfinished_tasks
from .buckets import Bucket, MonthCompletion, events_for_month, tasks_for_month, quarterly_overview

__all__ = [
    # Items
    "Event",
    "Subtask",
    "Task",
    "generate_id",
    "dedupe_by_id",
    # Dates
    "MonthDay",
    "parse_month_day",
    "is_same_day",
    # Recurrence
    "MarkedEvent",
    "is_date_in_range",
    "matches_date",
    "boundary_marker",
    "events_for_date",
    "event_markers_for_date",
    "tasks_for_date",
    # Timeline
    "TimelineDay",
    "get_ongoing_events",
    "build_timeline",
    "unfinished_tasks",
    # Buckets
    "Bucket",
    "MonthCompletion",
    "events_for_month",
    "tasks_for_month",
    "quarterly_overview",
]
