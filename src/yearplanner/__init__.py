"""Year Planner - yearly events and tasks with optional cloud sync."""

__version__ = "1.0.0"
