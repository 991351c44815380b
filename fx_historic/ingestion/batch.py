"""Group parsed rate rows into per-day rate tables."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from fx_historic.ingestion.models import RateRecord
from fx_historic.rates.models import FRB_BASE_CURRENCY, ExchangeRate


def build_batch(
    records: Iterable[RateRecord],
    *,
    base_currency: str = FRB_BASE_CURRENCY,
    provider: str = "FRB",
) -> dict[date, dict[str, ExchangeRate]]:
    """Return ``{rate_date: {currency: ExchangeRate}}`` for ``records``.

    Every rate is quoted as ``base_currency -> currency``. A currency listed
    twice for the same day is rejected rather than silently overwritten.
    """

    batch: dict[date, dict[str, ExchangeRate]] = {}
    for record in records:
        table = batch.setdefault(record.rate_date, {})
        if record.currency in table:
            raise ValueError(
                f"Duplicate rate for {record.currency} on {record.rate_date.isoformat()}"
            )
        table[record.currency] = ExchangeRate(
            base_currency=base_currency,
            target_currency=record.currency,
            factor=record.rate,
            as_of=record.rate_date,
            provider=provider,
        )
    return batch


__all__ = ["build_batch"]
