"""Exception hierarchy shared by the rate store, resolver and facade."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from fx_historic.utils.date_range import format_dates


class FxHistoricError(Exception):
    """Base class for every error raised by :mod:`fx_historic`."""


class DataUnavailable(FxHistoricError):
    """No usable rate data: nothing loaded within the wait budget."""

    def __init__(self, last_message: str | None = None) -> None:
        self.last_message = last_message
        super().__init__(f"Failed to load currency conversion data: {last_message}")


class EmptyCache(DataUnavailable):
    """The store is loaded but holds no dates."""

    def __init__(self, message: str = "No exchange rates are cached") -> None:
        FxHistoricError.__init__(self, message)
        self.last_message = message


class RateUnavailable(DataUnavailable):
    """A rate was required but none is cached for the currency pair."""

    def __init__(self, base: str, target: str, message: str | None = None) -> None:
        self.base = base
        self.target = target
        text = message or f"No exchange rate available for {base} -> {target}"
        FxHistoricError.__init__(self, text)
        self.last_message = text


class NoTriangulationPath(RateUnavailable):
    """One or both legs through the fixed base currency are missing."""

    def __init__(self, base: str, target: str, pivot: str | None = None) -> None:
        via = f" via {pivot}" if pivot else ""
        super().__init__(
            base,
            target,
            f"Cannot triangulate {base} -> {target}{via}: a leg rate is missing",
        )
        self.pivot = pivot


class NoRateForDate(FxHistoricError, LookupError):
    """None of the requested dates has a cached rate table."""

    def __init__(self, dates: Iterable[date], provider: str = "FRB") -> None:
        self.dates = tuple(dates)
        super().__init__(
            f"There is no exchange rate on day(s) {format_dates(self.dates)} "
            f"for provider {provider}"
        )


class InvalidInversion(FxHistoricError, ValueError):
    """Raised when asked to invert a rate that does not exist."""


__all__ = [
    "FxHistoricError",
    "DataUnavailable",
    "EmptyCache",
    "RateUnavailable",
    "NoTriangulationPath",
    "NoRateForDate",
    "InvalidInversion",
]
