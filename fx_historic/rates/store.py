"""Date-indexed cache of rate tables backed by swappable immutable snapshots."""

from __future__ import annotations

import threading
from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping

from fx_historic.errors import EmptyCache
from fx_historic.rates.models import DatedRateTable, ExchangeRate
from fx_historic.utils.logger import get_logger

LOGGER = get_logger(__name__)


class RateSnapshot:
    """Read-only view of every cached date at one instant.

    A snapshot is never mutated after construction; the store publishes a new
    one on every replace, so holding a reference gives a consistent view for
    as long as it is kept.
    """

    __slots__ = ("_tables", "_latest")

    def __init__(self, tables: Mapping[date, Mapping[str, ExchangeRate]] | None = None) -> None:
        frozen = {
            day: MappingProxyType(dict(table)) for day, table in (tables or {}).items()
        }
        self._tables: Mapping[date, DatedRateTable] = MappingProxyType(frozen)
        self._latest: date | None = max(frozen) if frozen else None

    def __len__(self) -> int:
        return len(self._tables)

    def __contains__(self, day: object) -> bool:
        return day in self._tables

    @property
    def is_empty(self) -> bool:
        return not self._tables

    def dates(self) -> list[date]:
        """Return cached dates in calendar order."""

        return sorted(self._tables)

    def most_recent_date(self) -> date:
        if self._latest is None:
            raise EmptyCache("There is no more recent exchange rate: the cache is empty")
        return self._latest

    def lookup(self, day: date) -> DatedRateTable | None:
        return self._tables.get(day)

    def lookup_first_available(
        self, dates: Iterable[date]
    ) -> tuple[date, DatedRateTable] | None:
        """Return the first of ``dates`` (in the given order) that is cached."""

        for day in dates:
            table = self._tables.get(day)
            if table is not None:
                return day, table
        return None


class DateRateStore:
    """Holds the current :class:`RateSnapshot` and replaces it atomically.

    Readers never lock: they read the snapshot reference, which is swapped in a
    single assignment. Writers serialise on ``_write_lock``.
    """

    def __init__(self) -> None:
        self._snapshot = RateSnapshot()
        self._write_lock = threading.Lock()

    def snapshot(self) -> RateSnapshot:
        return self._snapshot

    def replace(self, batch: Mapping[date, Mapping[str, ExchangeRate]]) -> int:
        """Install ``batch`` as the whole cache and return the number of dates.

        Dates cached before but missing from ``batch`` are evicted; dates in
        both are overwritten table by table.
        """

        new_snapshot = RateSnapshot(batch)
        with self._write_lock:
            old_dates = set(self._snapshot.dates())
            self._snapshot = new_snapshot
        evicted = old_dates.difference(new_snapshot.dates())
        if evicted:
            LOGGER.debug(
                "Evicted %s cached day(s): %s",
                len(evicted),
                ", ".join(day.isoformat() for day in sorted(evicted)),
            )
        return len(new_snapshot)

    def __len__(self) -> int:
        return len(self._snapshot)

    @property
    def is_empty(self) -> bool:
        return self._snapshot.is_empty

    def dates(self) -> list[date]:
        return self._snapshot.dates()

    def most_recent_date(self) -> date:
        """Return the latest cached date; raises :class:`EmptyCache` when empty."""

        return self._snapshot.most_recent_date()

    def lookup(self, day: date) -> DatedRateTable | None:
        """Exact-date lookup without fallback."""

        return self._snapshot.lookup(day)

    def lookup_first_available(
        self, dates: Iterable[date]
    ) -> tuple[date, DatedRateTable] | None:
        return self._snapshot.lookup_first_available(dates)


__all__ = ["DateRateStore", "RateSnapshot"]
