"""Pure date math for the ledger: ISO weeks, weekends and month grids.

Weeks always run Monday to Sunday regardless of locale.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import TYPE_CHECKING

from time_ledger.exceptions import InvalidPeriod

if TYPE_CHECKING:
    from collections.abc import Iterator

_ONE_DAY = timedelta(days=1)
WORKDAYS_PER_WEEK = 5


def coerce_date(value: date | str) -> date:
    """Return ``value`` as a date, parsing ISO ``YYYY-MM-DD`` strings."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidPeriod(f"Not a valid calendar date: {value!r}", value) from None


def week_start(value: date) -> date:
    """Return the Monday of the ISO week containing ``value``."""
    return value - timedelta(days=value.weekday())


def ensure_week_start(value: date) -> date:
    """Reject week identifiers that are not Mondays."""
    if value.weekday() != 0:
        raise InvalidPeriod(f"Week start {value.isoformat()} is not a Monday", value)
    return value


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5


def week_days(start: date) -> list[date]:
    """The five working days (Mon-Fri) of the week beginning ``start``."""
    monday = week_start(start)
    return [monday + timedelta(days=i) for i in range(WORKDAYS_PER_WEEK)]


def iter_days(start: date, end_exclusive: date) -> Iterator[date]:
    """Yield every calendar day in ``[start, end_exclusive)``."""
    current = start
    while current < end_exclusive:
        yield current
        current += _ONE_DAY


def month_grid(year: int, month: int) -> list[list[date | None]]:
    """Build a Monday-first 7-column grid for a month.

    Days outside the month are ``None``. The grid has as many rows as the
    month spans ISO weeks (4 to 6).
    """
    if not 1 <= month <= 12:
        raise InvalidPeriod(f"Month must be between 1 and 12, got {month}", month)
    if not date.min.year <= year <= date.max.year:
        raise InvalidPeriod(f"Year out of range: {year}", year)

    leading, days_in_month = calendar.monthrange(year, month)
    cells: list[date | None] = [None] * leading
    cells.extend(date(year, month, day) for day in range(1, days_in_month + 1))
    cells.extend([None] * (-len(cells) % 7))
    return [cells[i : i + 7] for i in range(0, len(cells), 7)]
