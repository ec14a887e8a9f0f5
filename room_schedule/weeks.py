"""ISO week numbering and week file bounds.

Bookings are published as one file per ISO week. The helpers here map a day
to the ``(year, week)`` that names its file and decide whether a day falls
inside the week that is already loaded. Nothing in this module does I/O.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Tuple, Union

from .models import WeekPartition, parse_wall_time

DayLike = Union[date, datetime, str]

DEFAULT_PATH_TEMPLATE = "{year}/week-{week}.json"


def to_day(value: DayLike) -> date:
    """Return the calendar day of ``value`` with time-of-day and offset dropped.

    Raises:
        ValueError: if ``value`` is a string that is not an ISO date or timestamp.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_wall_time(value)
    if parsed is None:
        raise ValueError(f"not an ISO date: {value!r}")
    return parsed.date()


def week_identifier(value: DayLike) -> Tuple[int, int]:
    """Return ``(year, week)`` of the ISO-8601 week containing ``value``.

    Weeks start on Monday and week 1 holds the year's first Thursday, so the
    day is moved to the Thursday of its own week and counted from 1 January
    of that Thursday's year.
    """
    day = to_day(value)
    thursday = day + timedelta(days=4 - day.isoweekday())
    days_since_jan1 = (thursday - date(thursday.year, 1, 1)).days
    return thursday.year, math.ceil((days_since_jan1 + 1) / 7)


def iso_week_bounds(value: DayLike) -> Tuple[date, date]:
    """Monday and Sunday of the ISO week containing ``value``."""
    day = to_day(value)
    monday = day - timedelta(days=day.isoweekday() - 1)
    return monday, monday + timedelta(days=6)


def partition_contains(partition: WeekPartition, value: DayLike) -> bool:
    """True if the day of ``value`` lies within the loaded week, bounds included."""
    return partition.weekStart <= to_day(value) <= partition.weekEnd


def partition_path(year: int, week: int, template: str = DEFAULT_PATH_TEMPLATE) -> str:
    """Relative path of the file for ``(year, week)``."""
    return template.format(year=year, week=week)
