"""Month and quarter bucketing for forward-looking summaries."""

from dataclasses import dataclass, field
from datetime import date, datetime

from .dates import add_months, as_date, quarter_months, quarter_of
from .format import format_month
from .items import Event, Task, dedupe_by_id


@dataclass
class Bucket:
    """A month or quarter with the items that fall in it."""

    kind: str  # "month" or "quarter"
    year: int
    index: int  # month 1-12 or quarter 1-4
    title: str
    events: list[Event] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.events) + len(self.tasks)


@dataclass
class MonthCompletion:
    """Completion stats for one month's tasks."""

    year: int
    month: int
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        return round(self.completed / self.total * 100)


def events_for_month(events: list[Event], month_date: date | datetime) -> list[Event]:
    """
    Events touching a calendar month.

    Recurring events match in every year when either anchor sits in the month
    or the month lies numerically between the anchors. Fixed events match
    their own year and month.
    """
    d = as_date(month_date)
    month = d.month
    matched = []
    for event in events:
        if event.recurring:
            start, end = event.start_anchor(), event.end_anchor()
            if start.month == month or end.month == month or start.month < month < end.month:
                matched.append(event)
        else:
            start = event.start_day()
            if (start.year, start.month) == (d.year, month):
                matched.append(event)
    return matched


def tasks_for_month(tasks: list[Task], month_date: date | datetime) -> list[Task]:
    """Tasks due in a calendar month (any year for recurring tasks)."""
    d = as_date(month_date)
    matched = []
    for task in tasks:
        if task.recurring:
            if task.due_anchor().month == d.month:
                matched.append(task)
        else:
            due = task.due_day()
            if (due.year, due.month) == (d.year, d.month):
                matched.append(task)
    return matched


def month_bucket(events: list[Event], tasks: list[Task], year: int, month: int) -> Bucket:
    first = date(year, month, 1)
    return Bucket(
        kind="month",
        year=year,
        index=month,
        title=format_month(first),
        events=events_for_month(events, first),
        tasks=tasks_for_month(tasks, first),
    )


def quarter_bucket(events: list[Event], tasks: list[Task], year: int, quarter: int) -> Bucket:
    """All items of a quarter's three months, deduplicated by id."""
    q_events: list[Event] = []
    q_tasks: list[Task] = []
    for month in quarter_months(quarter):
        first = date(year, month, 1)
        q_events.extend(events_for_month(events, first))
        q_tasks.extend(tasks_for_month(tasks, first))
    return Bucket(
        kind="quarter",
        year=year,
        index=quarter,
        title=f"{year} Q{quarter}",
        events=dedupe_by_id(q_events),
        tasks=dedupe_by_id(q_tasks),
    )


def future_months(
    events: list[Event],
    tasks: list[Task],
    now: date | datetime,
    count: int = 3,
) -> list[Bucket]:
    """The next `count` months after the current one, non-empty only."""
    today = as_date(now)
    buckets = []
    for offset in range(1, count + 1):
        first = add_months(today, offset)
        bucket = month_bucket(events, tasks, first.year, first.month)
        if bucket.count:
            buckets.append(bucket)
    return buckets


def quarterly_overview(events: list[Event], tasks: list[Task], now: date | datetime) -> list[Bucket]:
    """
    Non-empty quarters of this year and next that lie beyond the near term.

    The near term ends with the quarter containing now + 3 months; only
    quarters strictly after it are reported.
    """
    today = as_date(now)
    horizon = add_months(today, 3)
    cutoff = (horizon.year, quarter_of(horizon))

    buckets = []
    for year in (today.year, today.year + 1):
        for quarter in range(1, 5):
            if (year, quarter) <= cutoff:
                continue
            bucket = quarter_bucket(events, tasks, year, quarter)
            if bucket.count:
                buckets.append(bucket)
    return buckets


def future_summary(
    events: list[Event],
    tasks: list[Task],
    year: int,
    month: int | None = None,
    quarter: int | None = None,
) -> Bucket:
    """Items of a single month or quarter, for the summary view."""
    if month is not None:
        bucket = month_bucket(events, tasks, year, month)
        bucket.events = dedupe_by_id(bucket.events)
        bucket.tasks = dedupe_by_id(bucket.tasks)
        return bucket
    if quarter is not None:
        return quarter_bucket(events, tasks, year, quarter)
    raise ValueError("Either month or quarter is required")


def month_completion(tasks: list[Task], month_date: date | datetime) -> MonthCompletion:
    d = as_date(month_date)
    month_tasks = tasks_for_month(tasks, d)
    return MonthCompletion(
        year=d.year,
        month=d.month,
        completed=sum(1 for t in month_tasks if t.is_completed),
        total=len(month_tasks),
    )


def dashboard(tasks: list[Task], now: date | datetime) -> tuple[MonthCompletion, MonthCompletion]:
    """(previous month, current month) task completion."""
    today = as_date(now)
    previous = add_months(today, -1)
    return month_completion(tasks, previous), month_completion(tasks, today)
