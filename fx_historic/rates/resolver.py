"""Resolve conversion queries against the cached rate tables."""

from __future__ import annotations

from datetime import date

from fx_historic.errors import NoRateForDate, NoTriangulationPath
from fx_historic.rates.arithmetic import compose, identity, invert
from fx_historic.rates.models import DatedRateTable, ExchangeRate, ProviderContext, RateQuery
from fx_historic.rates.store import DateRateStore, RateSnapshot


class RateResolver:
    """Answers :class:`RateQuery` objects using the store's current snapshot.

    Every cached rate is quoted as ``fixed base -> currency``. Other pairs are
    derived by inverting a cached rate or by chaining two of them through the
    fixed base. One snapshot is pinned per call, so both legs of a chained
    rate always come from the same load.
    """

    def __init__(self, store: DateRateStore, context: ProviderContext | None = None) -> None:
        self.store = store
        self.context = context or ProviderContext()

    def resolve(
        self, query: RateQuery, snapshot: RateSnapshot | None = None
    ) -> ExchangeRate | None:
        """Return the rate for ``query`` or ``None`` when no rate is cached.

        ``snapshot`` lets a caller evaluate the query against a view it already
        pinned; by default the store's current snapshot is used. Raises
        :class:`NoRateForDate` when none of the query's dates is cached and
        :class:`NoTriangulationPath` when a cross rate lacks a leg.
        """

        if snapshot is None:
            snapshot = self.store.snapshot()
        if snapshot.is_empty:
            return None
        as_of, table = self.effective_table(snapshot, query)
        return self._resolve_in(table, as_of, query.base, query.target)

    def effective_table(
        self, snapshot: RateSnapshot, query: RateQuery
    ) -> tuple[date, DatedRateTable]:
        """Pick the table a query is evaluated against."""

        if not query.dates:
            latest = snapshot.most_recent_date()
            return latest, snapshot.lookup(latest) or {}
        found = snapshot.lookup_first_available(query.dates)
        if found is None:
            raise NoRateForDate(query.dates, provider=self.context.provider)
        return found

    def _resolve_in(
        self, table: DatedRateTable, as_of: date, base: str, target: str
    ) -> ExchangeRate | None:
        fixed = self.context.base_currency
        if base == fixed and target == fixed:
            return identity(fixed, as_of, self.context.provider)
        if target == fixed:
            direct = table.get(base)
            if direct is None:
                return None
            return invert(direct)
        if base == fixed:
            return table.get(target)
        if base == target and base in table:
            return identity(base, as_of, self.context.provider)

        to_fixed = self._resolve_in(table, as_of, base, fixed)
        from_fixed = self._resolve_in(table, as_of, fixed, target)
        if to_fixed is None or from_fixed is None:
            raise NoTriangulationPath(base, target, pivot=fixed)
        return compose(to_fixed, from_fixed, as_of)


__all__ = ["RateResolver"]
