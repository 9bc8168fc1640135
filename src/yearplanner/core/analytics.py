"""Usage analytics and backup documents over raw stored items."""

from datetime import datetime, timezone

from .items import Task

BACKUP_VERSION = "1.0.0"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def is_task_completed(data: dict) -> bool:
    """Completion state of a stored task record."""
    return Task.from_dict(data).is_completed


def summarize(events: list[dict], tasks: list[dict], now: str | None = None) -> dict:
    """
    Counts for the analytics endpoint.

    Items count as recurring unless their flag is explicitly false, so records
    saved without the key are reported as recurring.
    """
    return {
        "totalEvents": len(events),
        "totalTasks": len(tasks),
        "completedTasks": sum(1 for t in tasks if is_task_completed(t)),
        "recurringEvents": sum(1 for e in events if e.get("recurring") is not False),
        "recurringTasks": sum(1 for t in tasks if t.get("recurring") is not False),
        "lastUpdated": now or utc_now_iso(),
    }


def backup_document(data: dict[str, list], now: str | None = None) -> dict:
    """Wrap per-type item lists in the export envelope."""
    return {
        "version": BACKUP_VERSION,
        "exportDate": now or utc_now_iso(),
        "data": data,
    }


def backup_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"year-planner-backup-{now.date().isoformat()}.json"
