"""Day-key helpers: the join key between calendar dates and usage entries.

A day key is the local-calendar date written as ``YYYY-MM-DD``. Parsing is
strict and locale independent so that ``parse_day_key(day_key(d)) == d``
holds for every date.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

DAY_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def local_date(value: date | datetime) -> date:
    """Return the local-calendar day for a date or datetime.

    Aware datetimes are converted to the local timezone first; naive ones
    are taken as already local.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def day_key(value: date | datetime) -> str:
    day = local_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_day_key(key: str) -> Optional[date]:
    """Parse a day key back into a date, or ``None`` if it is not one."""

    if not isinstance(key, str) or not DAY_KEY_PATTERN.fullmatch(key):
        return None
    year, month, day = (int(part) for part in key.split("-"))
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_day_key(key: str) -> bool:
    return parse_day_key(key) is not None


def format_display_date(value: date) -> str:
    """Header format used by the statistics period lines (``dd.MM.yyyy``)."""

    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"


__all__ = [
    "DAY_KEY_PATTERN",
    "day_key",
    "format_display_date",
    "is_day_key",
    "local_date",
    "parse_day_key",
]
