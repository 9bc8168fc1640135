"""Year Planner CLI."""

import json
import logging
import sys
from datetime import date
from pathlib import Path

import click

from .config import load_config
from .core.dates import season_for
from .core.format import (
    format_count,
    format_event_date,
    format_marker,
    format_month,
    format_task_date,
    format_timeline_date,
)
from .core.items import Event, Task
from .core.timeline import subtask_progress
from .planner import Planner

SEASON_TITLES = {
    "spring": "Spring planning",
    "summer": "Summer planning",
    "autumn": "Autumn planning",
    "winter": "Winter planning",
}


def _load_planner() -> Planner:
    """Planner with local state, refreshed from the cloud when enabled."""
    planner = Planner(load_config())
    if planner.cloud_sync_enabled:
        planner.load_from_cloud()
    return planner


def _parse_day(value: str | None) -> date:
    return date.fromisoformat(value) if value else date.today()


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.version_option(package_name="yearplanner")
def main():
    """Year Planner - yearly events and tasks."""
    pass


# ============== Views ==============


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Start day (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def timeline(target_date: str | None, as_json: bool):
    """Show the next 30 days."""
    planner = _load_planner()
    today = _parse_day(target_date)
    days = planner.timeline(today)

    if as_json:
        _echo_json(
            [
                {
                    "date": day.date.isoformat(),
                    "ongoing": day.is_ongoing,
                    "events": [{**m.event.to_dict(), "marker": m.marker} for m in day.events],
                    "tasks": [t.to_dict() for t in day.tasks],
                }
                for day in days
            ]
        )
        return

    click.echo(f"{SEASON_TITLES[season_for(today)]} - {today.strftime('%A, %B %d, %Y')}\n")
    if not days:
        click.echo("Nothing planned for the next 30 days.")
        return

    for day in days:
        click.echo("### " + ("Ongoing" if day.is_ongoing else format_timeline_date(day.date, today)))
        for marked in day.events:
            if day.is_ongoing:
                suffix = f" {marked.marker}"
            elif marked.marker:
                suffix = f" ({format_marker(marked.marker)})"
            else:
                suffix = ""
            click.echo(f"  • {marked.event.title}{suffix}")
        for task in day.tasks:
            click.echo(f"  ☐ {task.title}")
        click.echo()


def _show_event(event: Event) -> None:
    click.echo(f"[{event.id}] {event.title}")
    click.echo(f"    {format_event_date(event)}")
    if event.description:
        click.echo(f"    {event.description}")


def _show_task(task: Task, with_subtasks: bool = True) -> None:
    mark = "x" if task.is_completed else " "
    click.echo(f"[{mark}] [{task.id}] {task.title}")
    click.echo(f"    {format_task_date(task)}")
    if task.description:
        click.echo(f"    {task.description}")
    if task.subtasks:
        done, total, _ = subtask_progress(task)
        click.echo(f"    {done}/{total} subtasks completed")
        if with_subtasks:
            for st in task.subtasks:
                click.echo(f"      [{'x' if st.completed else ' '}] [{st.id}] {st.title}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def events(as_json: bool):
    """List all events."""
    planner = _load_planner()
    sorted_events = planner.sorted_events()
    if as_json:
        _echo_json([e.to_dict() for e in sorted_events])
        return
    if not sorted_events:
        click.echo("No events.")
        return
    for event in sorted_events:
        _show_event(event)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(as_json: bool):
    """List all tasks."""
    planner = _load_planner()
    sorted_tasks = planner.sorted_tasks()
    if as_json:
        _echo_json([t.to_dict() for t in sorted_tasks])
        return
    if not sorted_tasks:
        click.echo("No tasks.")
        return
    for task in sorted_tasks:
        _show_task(task)


@main.command()
def unfinished():
    """List tasks that are not completed."""
    planner = _load_planner()
    open_tasks = planner.unfinished_tasks()
    if not open_tasks:
        click.echo("All tasks completed.")
        return
    for task in open_tasks:
        _show_task(task, with_subtasks=False)


@main.command()
@click.option("--date", "-d", "target_date", default=None, help="Reference day (YYYY-MM-DD)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def overview(target_date: str | None, as_json: bool):
    """Upcoming months and later quarters."""
    planner = _load_planner()
    buckets = planner.future_overview(_parse_day(target_date))
    if as_json:
        _echo_json(
            [
                {"kind": b.kind, "year": b.year, "index": b.index, "title": b.title, "count": b.count}
                for b in buckets
            ]
        )
        return
    if not buckets:
        click.echo("Nothing planned ahead.")
        return
    for bucket in buckets:
        click.echo(f"{bucket.title:12} {format_count(bucket.count)}")


@main.command()
@click.argument("year", type=int)
@click.option("--month", "-m", type=click.IntRange(1, 12), default=None)
@click.option("--quarter", "-q", type=click.IntRange(1, 4), default=None)
def summary(year: int, month: int | None, quarter: int | None):
    """Events and tasks of one month or quarter."""
    if (month is None) == (quarter is None):
        click.echo("Error: pass exactly one of --month or --quarter", err=True)
        sys.exit(1)

    planner = _load_planner()
    bucket = planner.summary(year, month=month, quarter=quarter)
    title = bucket.title if bucket.kind == "quarter" else f"{bucket.title} {year}"
    click.echo(f"{title}\n")

    click.echo("Events:")
    if not bucket.events:
        click.echo("  No events planned")
    for event in bucket.events:
        click.echo(f"  • {event.title} ({format_event_date(event)})")

    click.echo("\nTasks:")
    if not bucket.tasks:
        click.echo("  No tasks planned")
    for task in bucket.tasks:
        click.echo(f"  • {task.title} ({format_task_date(task)})")
        names = [st.title for st in task.subtasks[:3]]
        if len(task.subtasks) > 3:
            names.append(f"+{len(task.subtasks) - 3} more")
        if names:
            click.echo(f"      {', '.join(names)}")


@main.command("dashboard")
@click.option("--date", "-d", "target_date", default=None, help="Reference day (YYYY-MM-DD)")
def dashboard_cmd(target_date: str | None):
    """Task completion for the previous and current month."""
    planner = _load_planner()
    for stats in planner.dashboard(_parse_day(target_date)):
        label = f"{format_month(date(stats.year, stats.month, 1))} {stats.year}"
        click.echo(f"{label:16} {stats.percentage:3}%  ({stats.completed} of {stats.total} tasks completed)")


@main.command("analytics")
def analytics_cmd():
    """Item counts."""
    _echo_json(_load_planner().analytics())


# ============== Editing ==============


@main.command("add-event")
@click.argument("title")
@click.option("--start", "start_date", required=True, help="MM-DD when recurring, else YYYY-MM-DD")
@click.option("--end", "end_date", default="", help="Optional end, same format as --start")
@click.option("--once", is_flag=True, help="Fixed dates instead of a yearly event")
@click.option("--description", default="")
def add_event(title: str, start_date: str, end_date: str, once: bool, description: str):
    """Add an event (yearly unless --once)."""
    planner = _load_planner()
    event = planner.add_event(title, start_date, end_date, recurring=not once, description=description)
    click.echo(f"✓ Added event {event.id}")


@main.command("edit-event")
@click.argument("event_id")
@click.option("--title", default=None)
@click.option("--start", "start_date", default=None)
@click.option("--end", "end_date", default=None)
@click.option("--recurring/--once", default=None)
@click.option("--description", default=None)
def edit_event(event_id: str, title, start_date, end_date, recurring, description):
    """Edit an event."""
    planner = _load_planner()
    event = planner.update_event(
        event_id,
        title=title,
        start_date=start_date,
        end_date=end_date,
        recurring=recurring,
        description=description,
    )
    if event is None:
        click.echo(f"Error: no event with id {event_id}", err=True)
        sys.exit(1)
    click.echo(f"✓ Updated event {event.id}")


@main.command("delete-event")
@click.argument("event_id")
@click.confirmation_option(prompt="Are you sure you want to delete this event?")
def delete_event(event_id: str):
    """Delete an event."""
    if not _load_planner().delete_event(event_id):
        click.echo(f"Error: no event with id {event_id}", err=True)
        sys.exit(1)
    click.echo("✓ Deleted")


@main.command("add-task")
@click.argument("title")
@click.option("--due", "due_date", required=True, help="MM-DD when recurring, else YYYY-MM-DD")
@click.option("--once", is_flag=True, help="Fixed date instead of a yearly task")
@click.option("--description", default="")
@click.option("--subtask", "subtasks", multiple=True, help="Subtask title (repeatable)")
def add_task(title: str, due_date: str, once: bool, description: str, subtasks: tuple[str, ...]):
    """Add a task (yearly unless --once)."""
    planner = _load_planner()
    task = planner.add_task(
        title,
        due_date,
        recurring=not once,
        description=description,
        subtask_titles=list(subtasks),
    )
    click.echo(f"✓ Added task {task.id}")


@main.command("edit-task")
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--due", "due_date", default=None)
@click.option("--recurring/--once", default=None)
@click.option("--description", default=None)
@click.option("--subtask", "subtasks", multiple=True, help="Replace subtasks (repeatable)")
def edit_task(task_id: str, title, due_date, recurring, description, subtasks: tuple[str, ...]):
    """Edit a task."""
    planner = _load_planner()
    task = planner.update_task(
        task_id,
        subtask_titles=list(subtasks) if subtasks else None,
        title=title,
        due_date=due_date,
        recurring=recurring,
        description=description,
    )
    if task is None:
        click.echo(f"Error: no task with id {task_id}", err=True)
        sys.exit(1)
    click.echo(f"✓ Updated task {task.id}")


@main.command("delete-task")
@click.argument("task_id")
@click.confirmation_option(prompt="Are you sure you want to delete this task?")
def delete_task(task_id: str):
    """Delete a task."""
    if not _load_planner().delete_task(task_id):
        click.echo(f"Error: no task with id {task_id}", err=True)
        sys.exit(1)
    click.echo("✓ Deleted")


@main.command("toggle-subtask")
@click.argument("task_id")
@click.argument("subtask_id")
def toggle_subtask(task_id: str, subtask_id: str):
    """Mark a subtask done or not done."""
    subtask = _load_planner().toggle_subtask(task_id, subtask_id)
    if subtask is None:
        click.echo(f"Error: no subtask {subtask_id} on task {task_id}", err=True)
        sys.exit(1)
    click.echo(f"[{'x' if subtask.completed else ' '}] {subtask.title}")


@main.command("toggle-task")
@click.argument("task_id")
def toggle_task(task_id: str):
    """Mark a task without subtasks done or not done."""
    task = _load_planner().toggle_task(task_id)
    if task is None:
        click.echo(f"Error: no task with id {task_id}", err=True)
        sys.exit(1)
    if task.subtasks:
        click.echo("Note: completion of tasks with subtasks follows the subtasks.")
    click.echo(f"[{'x' if task.is_completed else ' '}] {task.title}")


# ============== Sync ==============


@main.command()
def sync():
    """Pull from the cloud, or push local data when the cloud is empty."""
    planner = Planner(load_config())
    if not planner.cloud_sync_enabled:
        click.echo("Error: cloud storage is not configured (API_BASE_URL, ENABLE_CLOUD_STORAGE)", err=True)
        sys.exit(1)

    if planner.load_from_cloud():
        click.echo(f"✓ Loaded {len(planner.events)} events and {len(planner.tasks)} tasks from the cloud")
    elif planner.save_to_cloud():
        click.echo("✓ Local data saved to the cloud")
    else:
        click.echo("Sync failed; local data unchanged.", err=True)
        sys.exit(1)


@main.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
def export(output: Path | None):
    """Export a backup document."""
    document = _load_planner().export_backup()
    output = output or Path(f"year-planner-backup-{date.today().isoformat()}.json")
    output.write_text(json.dumps(document, indent=2, ensure_ascii=False))
    click.echo(f"✓ Backup saved to {output}")


@main.command()
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Port (default from config)")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def serve(host: str | None, port: int | None, debug: bool):
    """Run the planner API server."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )

    import uvicorn

    from .server import create_app

    config = load_config()
    try:
        app = create_app(config=config)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    host = host or config.host
    port = port or config.port
    click.echo(f"Year Planner API running on http://{host}:{port}")
    click.echo(f"Environment: {config.environment}")
    click.echo(f"Storage type: {config.storage_type.value}")
    uvicorn.run(app, host=host, port=port, log_level="debug" if debug else "info")


if __name__ == "__main__":
    main()
