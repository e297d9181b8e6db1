"""Date helpers for ``dd.MM.yyyy`` transaction records.

Transaction dates travel as ``"dd.MM.yyyy"`` strings and are only turned
into datetimes at the point of comparison.  Unparseable strings become
``NaT``, which compares false against every datetime, so a malformed
record quietly falls out of every month or week bucket instead of
raising.

Calendar construction mirrors the overflow rules used by the dashboard
front end: asking for day 31 of a 30-day month lands on the 1st of the
following month, and month offsets outside ``1..12`` roll across years.
"""

from __future__ import annotations

import calendar
import math
from datetime import datetime, timedelta
from typing import Iterable, Optional

import pandas as pd

DATE_FORMAT = "%d.%m.%Y"
ONE_DAY = timedelta(days=1)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    return now if now is not None else datetime.now()


def parse_date(value) -> pd.Timestamp:
    """Parse a ``dd.MM.yyyy`` string, returning ``NaT`` when it is malformed."""
    if value is None or value == "":
        return pd.NaT
    return pd.to_datetime(value, format=DATE_FORMAT, errors="coerce")


def parse_dates(values: Iterable) -> pd.Series:
    """Vectorised :func:`parse_date` over any iterable of date strings."""
    series = pd.Series(list(values), dtype=object)
    if series.empty:
        return pd.Series(dtype="datetime64[ns]")
    return pd.to_datetime(series, format=DATE_FORMAT, errors="coerce")


def format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


def month_shift(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return ``(year, month)`` moved by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def days_in_month(year: int, month: int) -> int:
    year, month = month_shift(year, month, 0)
    return calendar.monthrange(year, month)[1]


def make_date(year: int, month: int, day: int) -> datetime:
    """Build midnight of ``day`` in ``month``/``year`` with overflow.

    ``month`` may fall outside ``1..12`` and ``day`` may exceed the length
    of the month; both roll forward the way a calendar would.
    """
    year, month = month_shift(year, month, 0)
    return datetime(year, month, 1) + timedelta(days=day - 1)


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def add_months(value: datetime, months: int) -> datetime:
    """Shift ``value`` by whole months, keeping the time of day."""
    shifted = make_date(value.year, value.month + months, value.day)
    return shifted.replace(
        hour=value.hour,
        minute=value.minute,
        second=value.second,
        microsecond=value.microsecond,
    )


def days_between_ceil(target: datetime, now: datetime) -> int:
    """Whole days from ``now`` until ``target``, rounded up."""
    return math.ceil((target - now) / ONE_DAY)


def in_month(value, month: int, year: int) -> bool:
    if value is None or pd.isna(value):
        return False
    return value.month == month and value.year == year
