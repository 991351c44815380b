"""Utility helpers for building as-of candidate dates."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator


def parse_date(value: str | date) -> date:
    """Parse a date string in ISO format to :class:`date`.

    Timestamps are truncated to their calendar day, since rates are keyed by date.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def fallback_dates(day: str | date, lookback_days: int = 0) -> Iterator[date]:
    """Yield ``day`` followed by each of the ``lookback_days`` preceding days.

    Feeds publish business days only, so a query for a weekend or holiday is
    usually answered by one of the days right before it.
    """

    if lookback_days < 0:
        raise ValueError("lookback_days must not be negative")

    current = parse_date(day)
    for offset in range(lookback_days + 1):
        yield current - timedelta(days=offset)


def format_dates(days: Iterable[date]) -> str:
    """Return ``days`` as comma-joined ISO calendar dates."""

    return ",".join(day.isoformat() for day in days)
