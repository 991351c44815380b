"""Public interface for the fx_historic package."""

from __future__ import annotations

from datetime import date
from importlib import metadata as importlib_metadata
from typing import Any, Callable, Iterable, Mapping

from fx_historic.errors import (
    DataUnavailable,
    EmptyCache,
    FxHistoricError,
    InvalidInversion,
    NoRateForDate,
    NoTriangulationPath,
    RateUnavailable,
)
from fx_historic.ingestion.batch import build_batch
from fx_historic.ingestion.models import RateRecord
from fx_historic.rates.loader import LoadCoordinator, LoadState, LoadStatus
from fx_historic.rates.models import ExchangeRate, ProviderContext, RateProvenance, RateQuery
from fx_historic.rates.resolver import RateResolver
from fx_historic.rates.store import DateRateStore, RateSnapshot
from fx_historic.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = [
    "__version__",
    "ArchiveFeed",
    "DataUnavailable",
    "EmptyCache",
    "ExchangeRate",
    "FeedRefresher",
    "FxHistoric",
    "FxHistoricError",
    "InvalidInversion",
    "LoadState",
    "LoadStatus",
    "NoRateForDate",
    "NoTriangulationPath",
    "ProviderContext",
    "RateProvenance",
    "RateQuery",
    "RateRecord",
    "RateUnavailable",
    "SQLiteManager",
]

try:
    __version__ = importlib_metadata.version("fx-historic")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"

RateBatch = Mapping[date, Mapping[str, ExchangeRate]]


class FxHistoric:
    """Historic exchange rate provider backed by an in-memory, date-indexed cache.

    Feed collaborators push complete batches through :meth:`new_data_loaded`
    (or :meth:`load_records` for parsed rows); every batch replaces the cached
    window, dropping days the feed no longer publishes. Callers query through
    :meth:`get_rate`, which waits for the first successful load before
    answering.
    """

    __slots__ = ("context", "store", "coordinator", "resolver")

    # Provide direct access to the package version as a class attribute.
    __version__ = __version__

    def __init__(
        self,
        context: ProviderContext | None = None,
        *,
        store: DateRateStore | None = None,
        coordinator: LoadCoordinator | None = None,
    ) -> None:
        self.context = context or ProviderContext()
        self.store = store or DateRateStore()
        self.coordinator = coordinator or LoadCoordinator(
            default_timeout=self.context.load_timeout
        )
        self.resolver = RateResolver(self.store, self.context)

    @property
    def load_state(self) -> LoadState:
        """Return the outcome of the most recent load attempt."""

        return self.coordinator.state

    def new_data_loaded(self, resource_id: str, batch: RateBatch) -> LoadState:
        """Install ``batch`` as the cached rates.

        Failures are recorded in :attr:`load_state` instead of being raised so
        one bad refresh never disturbs readers of the previous data.
        """

        return self._run_load(resource_id, lambda: batch)

    def load_records(self, resource_id: str, records: Iterable[RateRecord]) -> LoadState:
        """Group parsed ``records`` into day tables and install them."""

        return self._run_load(
            resource_id,
            lambda: build_batch(
                records,
                base_currency=self.context.base_currency,
                provider=self.context.provider,
            ),
        )

    def load_failed(self, resource_id: str, error: BaseException | str) -> LoadState:
        """Record a refresh whose data never reached the provider."""

        self.coordinator.begin_load()
        message = f"Last error during data load: {error}"
        LOGGER.warning("%s (resource %s)", message, resource_id)
        return self.coordinator.complete_load(False, message)

    def _run_load(self, resource_id: str, build: Callable[[], RateBatch]) -> LoadState:
        self.coordinator.begin_load()
        try:
            days = self.store.replace(build())
        except Exception as exc:
            message = f"Last error during data load: {exc}"
            LOGGER.warning("%s (resource %s)", message, resource_id)
            LOGGER.debug("Error during data load.", exc_info=True)
            return self.coordinator.complete_load(False, message)
        message = f"Loaded {resource_id} exchange rates for {days} days"
        LOGGER.info(message)
        return self.coordinator.complete_load(True, message)

    def get_rate(
        self,
        query: RateQuery | str,
        target: str | None = None,
        rate_date: date | str | None = None,
        *,
        lookback_days: int = 0,
        timeout: float | None = None,
    ) -> ExchangeRate | None:
        """Return the rate for ``query`` or ``None`` when no rate is cached.

        ``query`` is either a :class:`RateQuery` or the base currency, in which
        case ``target`` (and optionally ``rate_date`` with ``lookback_days`` of
        fallback) complete it. Raises :class:`DataUnavailable` when no load has
        succeeded within ``timeout`` seconds.
        """

        resolved_query = self._build_query(query, target, rate_date, lookback_days)
        return self._resolve(resolved_query, timeout)[1]

    def require_rate(
        self,
        query: RateQuery | str,
        target: str | None = None,
        rate_date: date | str | None = None,
        *,
        lookback_days: int = 0,
        timeout: float | None = None,
    ) -> ExchangeRate:
        """Like :meth:`get_rate` but raise :class:`RateUnavailable` instead of ``None``."""

        resolved_query = self._build_query(query, target, rate_date, lookback_days)
        snapshot, rate = self._resolve(resolved_query, timeout)
        if rate is not None:
            return rate
        if snapshot.is_empty:
            raise EmptyCache()
        raise RateUnavailable(resolved_query.base, resolved_query.target)

    def _resolve(
        self, query: RateQuery, timeout: float | None
    ) -> tuple[RateSnapshot, ExchangeRate | None]:
        if not self.coordinator.await_ready(timeout):
            raise DataUnavailable(self.coordinator.state.last_message)
        # Pinned once so require_rate reports emptiness for the view that was searched.
        snapshot = self.store.snapshot()
        try:
            return snapshot, self.resolver.resolve(query, snapshot)
        except EmptyCache:
            return snapshot, None

    @staticmethod
    def _build_query(
        query: RateQuery | str,
        target: str | None,
        rate_date: date | str | None,
        lookback_days: int,
    ) -> RateQuery:
        if isinstance(query, RateQuery):
            if target is not None or rate_date is not None or lookback_days:
                raise ValueError(
                    "target, rate_date and lookback_days cannot be combined with a RateQuery"
                )
            return query
        if target is None:
            raise ValueError("target currency is required")
        return RateQuery.on(query, target, rate_date, lookback_days=lookback_days)


def __getattr__(name: str) -> Any:
    """Lazily import helpers that pull in SQLAlchemy or tenacity."""

    if name == "FeedRefresher":
        from fx_historic.ingestion.refresh import FeedRefresher as _refresher

        return _refresher
    if name == "SQLiteManager":
        from fx_historic.db.sqlite_manager import SQLiteManager as _manager

        return _manager
    if name == "ArchiveFeed":
        from fx_historic.db.archive_feed import ArchiveFeed as _feed

        return _feed
    raise AttributeError(f"module 'fx_historic' has no attribute {name}")
