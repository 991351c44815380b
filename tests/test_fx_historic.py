"""Tests for the public package facade."""

from __future__ import annotations

import threading
from datetime import date, datetime
from decimal import Decimal

import pytest

from fx_historic import (
    DataUnavailable,
    EmptyCache,
    FxHistoric,
    LoadStatus,
    NoRateForDate,
    NoTriangulationPath,
    ProviderContext,
    RateProvenance,
    RateQuery,
    RateRecord,
    RateUnavailable,
    __version__,
)
from fx_historic.ingestion.batch import build_batch
from fx_historic.rates.resolver import RateResolver

FRIDAY = date(2024, 3, 1)
MONDAY = date(2024, 3, 4)


def _records() -> list[RateRecord]:
    return [
        RateRecord(rate_date=FRIDAY, currency="EUR", rate=Decimal("0.90")),
        RateRecord(rate_date=FRIDAY, currency="JPY", rate=Decimal("150.0")),
        RateRecord(rate_date=MONDAY, currency="EUR", rate=Decimal("0.92")),
    ]


@pytest.fixture()
def fx() -> FxHistoric:
    provider = FxHistoric(ProviderContext(load_timeout=0))
    provider.load_records("H10", _records())
    return provider


def test_fx_historic_class_is_exposed() -> None:
    assert FxHistoric.__version__ == __version__


def test_get_rate_before_any_load_raises_data_unavailable() -> None:
    provider = FxHistoric()

    with pytest.raises(DataUnavailable, match="Failed to load currency conversion data"):
        provider.get_rate("USD", "EUR", timeout=0)


def test_failed_first_load_is_reported_to_readers() -> None:
    provider = FxHistoric(ProviderContext(load_timeout=0))

    state = provider.load_failed("H10", ValueError("bad XML"))

    assert state.status is LoadStatus.FAILED
    with pytest.raises(DataUnavailable) as excinfo:
        provider.get_rate("USD", "EUR")
    assert excinfo.value.last_message == "Last error during data load: bad XML"


def test_successful_load_message_counts_days(fx: FxHistoric) -> None:
    assert fx.load_state.status is LoadStatus.READY
    assert fx.load_state.last_message == "Loaded H10 exchange rates for 2 days"


def test_new_data_loaded_accepts_prebuilt_batch() -> None:
    provider = FxHistoric()

    state = provider.new_data_loaded("H10", build_batch(_records()))

    assert state.status is LoadStatus.READY
    assert provider.store.dates() == [FRIDAY, MONDAY]


def test_scenario_from_single_day_batch() -> None:
    provider = FxHistoric()
    provider.load_records("H10", _records()[:2])

    assert provider.get_rate("USD", "EUR", FRIDAY).factor == Decimal("0.90")
    assert abs(provider.get_rate("EUR", "USD").factor - Decimal("1.1111")) < Decimal("1e-4")
    assert abs(provider.get_rate("EUR", "JPY").factor - Decimal("166.67")) < Decimal("1e-2")
    assert provider.get_rate("USD", "USD").factor == Decimal(1)
    with pytest.raises(NoTriangulationPath):
        provider.get_rate("EUR", "GBP")


def test_get_rate_accepts_query_objects(fx: FxHistoric) -> None:
    query = RateQuery("USD", "EUR", (date(2024, 3, 2), date(2024, 3, 3), FRIDAY))

    rate = fx.get_rate(query)

    assert rate is not None
    assert rate.as_of == FRIDAY


def test_get_rate_rejects_query_plus_overrides(fx: FxHistoric) -> None:
    with pytest.raises(ValueError):
        fx.get_rate(RateQuery("USD", "EUR"), "JPY")
    with pytest.raises(ValueError):
        fx.get_rate("USD")


def test_lookback_reaches_previous_business_day(fx: FxHistoric) -> None:
    rate = fx.get_rate("EUR", "JPY", "2024-03-03", lookback_days=2)

    assert rate is not None
    assert rate.provenance is RateProvenance.CHAIN
    assert rate.as_of == FRIDAY


def test_missing_dates_propagate(fx: FxHistoric) -> None:
    with pytest.raises(NoRateForDate):
        fx.get_rate("USD", "EUR", date(2024, 3, 3))


def test_missing_direct_rate_is_none_or_rate_unavailable(fx: FxHistoric) -> None:
    assert fx.get_rate("USD", "JPY", MONDAY) is None

    with pytest.raises(RateUnavailable) as excinfo:
        fx.require_rate("USD", "JPY", MONDAY)
    assert (excinfo.value.base, excinfo.value.target) == ("USD", "JPY")


def test_empty_batch_clears_cache(fx: FxHistoric) -> None:
    state = fx.new_data_loaded("H10", {})

    assert state.status is LoadStatus.READY
    assert fx.get_rate("USD", "EUR") is None
    with pytest.raises(EmptyCache):
        fx.require_rate("USD", "EUR")


def test_bad_batch_is_recorded_and_previous_data_kept(fx: FxHistoric) -> None:
    state = fx.load_records(
        "H10",
        [
            RateRecord(rate_date=MONDAY, currency="EUR", rate=Decimal("0.92")),
            RateRecord(rate_date=MONDAY, currency="EUR", rate=Decimal("0.93")),
        ],
    )

    assert state.status is LoadStatus.READY
    assert state.last_message.startswith("Last error during data load: Duplicate rate")
    assert fx.store.dates() == [FRIDAY, MONDAY]
    assert fx.require_rate("USD", "EUR").factor == Decimal("0.92")


def test_batch_with_invalid_tables_fails_the_load() -> None:
    provider = FxHistoric(ProviderContext(load_timeout=0))

    state = provider.new_data_loaded("H10", {FRIDAY: None})  # type: ignore[dict-item]

    assert state.status is LoadStatus.FAILED
    with pytest.raises(DataUnavailable):
        provider.get_rate("USD", "EUR")


def test_reload_replaces_window(fx: FxHistoric) -> None:
    tuesday = date(2024, 3, 5)
    fx.load_records("H10", [RateRecord(rate_date=tuesday, currency="EUR", rate=Decimal("0.95"))])

    assert fx.store.dates() == [tuesday]
    with pytest.raises(NoRateForDate):
        fx.get_rate("USD", "EUR", FRIDAY)


def test_lazy_exports_resolve() -> None:
    import fx_historic

    assert fx_historic.FeedRefresher.__name__ == "FeedRefresher"
    assert fx_historic.SQLiteManager.__name__ == "SQLiteManager"
    assert fx_historic.ArchiveFeed.__name__ == "ArchiveFeed"
    with pytest.raises(AttributeError):
        getattr(fx_historic, "does_not_exist")


def test_get_rate_truncates_timestamps_to_the_calendar_day(fx: FxHistoric) -> None:
    rate = fx.get_rate("USD", "EUR", datetime(2024, 3, 1, 12, 0))

    assert rate is not None
    assert rate.as_of == FRIDAY
    assert rate.factor == Decimal("0.90")
    with pytest.raises(NoRateForDate, match=r"day\(s\) 2024-03-03,2024-03-02 for"):
        fx.get_rate("USD", "EUR", datetime(2024, 3, 3, 8, 15), lookback_days=1)


def test_get_rate_rejects_query_plus_lookback(fx: FxHistoric) -> None:
    query = RateQuery.on("USD", "EUR", date(2024, 3, 3))

    with pytest.raises(ValueError, match="lookback_days"):
        fx.get_rate(query, lookback_days=3)
    with pytest.raises(ValueError, match="lookback_days"):
        fx.require_rate(query, lookback_days=3)


def test_require_rate_judges_emptiness_on_the_searched_snapshot(fx: FxHistoric) -> None:
    class ClearingResolver(RateResolver):
        def resolve(self, query, snapshot=None):  # type: ignore[no-untyped-def]
            # A reload landing between the lookup and the emptiness check.
            self.store.replace({})
            return super().resolve(query, snapshot)

    fx.resolver = ClearingResolver(fx.store, fx.context)

    with pytest.raises(RateUnavailable) as excinfo:
        fx.require_rate("USD", "JPY", MONDAY)
    assert not isinstance(excinfo.value, EmptyCache)
    assert fx.store.is_empty


def test_chained_rates_never_mix_legs_from_different_loads() -> None:
    january = build_batch(
        RateRecord(rate_date=date(2024, 1, day), currency=currency, rate=Decimal(rate))
        for day in range(1, 6)
        for currency, rate in (("EUR", "0.80"), ("JPY", "120"))
    )
    february = build_batch(
        RateRecord(rate_date=date(2024, 2, day), currency=currency, rate=Decimal(rate))
        for day in range(1, 6)
        for currency, rate in (("EUR", "0.50"), ("JPY", "100"))
    )
    expected = {date(2024, 1, 5): Decimal(150), date(2024, 2, 5): Decimal(200)}
    provider = FxHistoric()
    provider.new_data_loaded("H10", january)
    stop = threading.Event()
    violations: list[object] = []

    def writer() -> None:
        for index in range(300):
            provider.new_data_loaded("H10", february if index % 2 == 0 else january)
        stop.set()

    def reader() -> None:
        while not stop.is_set():
            rate = provider.get_rate("EUR", "JPY", timeout=0)
            if rate is None:
                violations.append(rate)
                continue
            to_usd, from_usd = rate.chain
            if not (to_usd.as_of == from_usd.as_of == rate.as_of) or (
                expected.get(rate.as_of) != rate.factor
            ):
                violations.append(rate)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    for thread in readers:
        thread.start()
    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    writer_thread.join(timeout=30)
    for thread in readers:
        thread.join(timeout=30)

    assert stop.is_set()
    assert violations == []
