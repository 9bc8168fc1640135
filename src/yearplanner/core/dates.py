"""Pure date helpers - month/day anchors, quarters, seasons."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class MonthDay:
    """A year-agnostic month/day anchor ("MM-DD")."""

    month: int
    day: int

    @classmethod
    def of(cls, d: date) -> "MonthDay":
        return cls(d.month, d.day)


def parse_month_day(value: str) -> MonthDay:
    """Split an "MM-DD" anchor into month and day.

    Only valid for recurring anchors. Malformed input raises ValueError.
    """
    month, day = value.split("-")[:2]
    return MonthDay(int(month), int(day))


def parse_full_date(value: str) -> date:
    """Parse an ISO calendar date, ignoring any time component."""
    return date.fromisoformat(value.split("T")[0])


def is_same_day(a: date, b: date) -> bool:
    """Compare calendar year, month and day-of-month."""
    return a.year == b.year and a.month == b.month and a.day == b.day


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def anchor_in_year(anchor: MonthDay, year: int) -> date:
    """The anchor's occurrence in a given year.

    Feb 29 lands on Feb 28 in non-leap years.
    """
    last_day = calendar.monthrange(year, anchor.month)[1]
    return date(year, anchor.month, min(anchor.day, last_day))


def add_months(d: date, months: int) -> date:
    """First day of the month `months` after d's month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def quarter_of(d: date) -> int:
    """Calendar quarter (1-4) containing d."""
    return (d.month - 1) // 3 + 1


def quarter_months(quarter: int) -> list[int]:
    """The three month numbers of a quarter."""
    first = (quarter - 1) * 3 + 1
    return [first, first + 1, first + 2]


def season_for(d: date) -> str:
    """Meteorological season for a date."""
    if 3 <= d.month <= 5:
        return "spring"
    if 6 <= d.month <= 8:
        return "summer"
    if 9 <= d.month <= 11:
        return "autumn"
    return "winter"
