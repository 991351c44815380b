"""Value types shared by the rate store, resolver and facade."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Mapping

from fx_historic.utils.date_range import fallback_dates, parse_date

FRB_BASE_CURRENCY = "USD"


class RateProvenance(str, Enum):
    """How a resolved rate was obtained."""

    DIRECT = "direct"
    INVERTED = "inverted"
    CHAIN = "chain"


def _to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # ``str`` first so floats keep their printed value rather than binary noise.
    return Decimal(str(value))


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """Immutable rate: one unit of ``base_currency`` buys ``factor`` ``target_currency``."""

    base_currency: str
    target_currency: str
    factor: Decimal
    as_of: date
    provenance: RateProvenance = RateProvenance.DIRECT
    chain: tuple["ExchangeRate", ...] = ()
    provider: str = "FRB"

    def __post_init__(self) -> None:
        factor = _to_decimal(self.factor)
        if not factor.is_finite() or factor <= 0:
            raise ValueError(f"Exchange rate factor must be positive, got {self.factor}")
        object.__setattr__(self, "factor", factor)
        object.__setattr__(self, "chain", tuple(self.chain))
        if self.provenance is RateProvenance.CHAIN:
            if len(self.chain) != 2:
                raise ValueError("A chained rate must reference exactly two legs")
            first, second = self.chain
            if first.target_currency != second.base_currency:
                raise ValueError(
                    "Chained legs must share an intermediate currency, got "
                    f"{first.target_currency} and {second.base_currency}"
                )
        elif self.chain:
            raise ValueError("Only chained rates may reference legs")

    @property
    def pair(self) -> str:
        """Return the currency pair as ``BASE/TARGET``."""

        return f"{self.base_currency}/{self.target_currency}"

    def convert(self, amount: Decimal | int | str) -> Decimal:
        """Convert ``amount`` units of the base currency into the target currency."""

        return _to_decimal(amount) * self.factor


DatedRateTable = Mapping[str, ExchangeRate]


@dataclass(frozen=True, slots=True)
class RateQuery:
    """A conversion request, optionally pinned to an ordered list of as-of dates."""

    base: str
    target: str
    dates: tuple[date, ...] | None = None

    def __post_init__(self) -> None:
        if self.dates is not None:
            object.__setattr__(self, "dates", tuple(parse_date(day) for day in self.dates))

    @classmethod
    def on(
        cls,
        base: str,
        target: str,
        day: str | date | None = None,
        *,
        lookback_days: int = 0,
    ) -> "RateQuery":
        """Build a query for ``day`` that falls back over the preceding days."""

        if day is None:
            return cls(base, target)
        return cls(base, target, tuple(fallback_dates(day, lookback_days)))

    def with_currencies(self, base: str, target: str) -> "RateQuery":
        """Return a copy targeting another pair with the same candidate dates."""

        return RateQuery(base, target, self.dates)


@dataclass(frozen=True, slots=True)
class ProviderContext:
    """Static description of the rate provider and its tunables."""

    provider: str = "FRB"
    description: str = "Federal Reserve Bank of the United States"
    rate_type: str = "HISTORIC"
    base_currency: str = FRB_BASE_CURRENCY
    load_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.load_timeout < 0:
            raise ValueError("load_timeout must not be negative")


__all__ = [
    "DatedRateTable",
    "ExchangeRate",
    "FRB_BASE_CURRENCY",
    "ProviderContext",
    "RateProvenance",
    "RateQuery",
]
