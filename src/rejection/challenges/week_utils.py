"""Week and day boundary utilities for weekly challenges.

Challenge weeks are ISO 8601 weeks: Monday is day 1 and week 1 is the week
holding the year's first Thursday, so week 1 may start in late December.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


def get_week_number(dt: datetime | date) -> int:
    """ISO week number of ``dt``."""
    return dt.isocalendar()[1]


def get_current_week(now: datetime | None = None) -> tuple[int, int]:
    """(ISO week, ISO year) for now."""
    if now is None:
        now = datetime.now(timezone.utc)
    iso = now.isocalendar()
    return iso[1], iso[0]


def get_weeks_in_year(year: int) -> int:
    """52 or 53; December 28th always falls in the last ISO week."""
    return date(year, 12, 28).isocalendar()[1]


def get_week_range(week: int, year: int) -> tuple[date, date]:
    """(Monday, Sunday) of ISO week ``week`` in ``year``."""
    if not 1 <= week <= get_weeks_in_year(year):
        msg = f"Week {week} does not exist in {year}"
        raise ValueError(msg)
    monday = date.fromisocalendar(year, week, 1)
    return monday, monday + timedelta(days=6)


def get_day_window(now: datetime | None = None) -> tuple[datetime, datetime]:
    """(today 00:00 UTC, tomorrow 00:00 UTC) for the UTC day containing ``now``."""
    if now is None:
        now = datetime.now(timezone.utc)
    today = now.astimezone(timezone.utc).date()
    start = datetime.combine(today, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)
