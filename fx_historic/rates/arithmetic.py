"""Decimal arithmetic used to invert and compose exchange rates.

Every factor is a :class:`~decimal.Decimal`. Products are computed exactly;
the only rounding happens when a rate is inverted, which divides in
:data:`RATE_CONTEXT` (16 significant digits, banker's rounding, the IEEE 754
decimal64 format).
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_EVEN, Context, Decimal

from fx_historic.errors import InvalidInversion
from fx_historic.rates.models import ExchangeRate, RateProvenance

RATE_CONTEXT = Context(prec=16, rounding=ROUND_HALF_EVEN)

ONE = Decimal(1)


def _digits(value: Decimal) -> int:
    return len(value.as_tuple().digits)


def multiply(left: Decimal, right: Decimal) -> Decimal:
    """Return ``left * right`` without rounding."""

    context = Context(prec=max(RATE_CONTEXT.prec, _digits(left) + _digits(right)))
    return context.multiply(left, right)


def divide(dividend: Decimal, divisor: Decimal, context: Context = RATE_CONTEXT) -> Decimal:
    """Return ``dividend / divisor`` rounded in ``context``."""

    return context.divide(dividend, divisor)


def invert(rate: ExchangeRate | None) -> ExchangeRate:
    """Return the reverse of ``rate`` (target becomes base)."""

    if rate is None:
        raise InvalidInversion("Rate None is not reversible.")
    return ExchangeRate(
        base_currency=rate.target_currency,
        target_currency=rate.base_currency,
        factor=divide(ONE, rate.factor),
        as_of=rate.as_of,
        provenance=RateProvenance.INVERTED,
        provider=rate.provider,
    )


def compose(first: ExchangeRate, second: ExchangeRate, as_of: date | None = None) -> ExchangeRate:
    """Chain ``first`` (A -> X) and ``second`` (X -> B) into A -> B."""

    return ExchangeRate(
        base_currency=first.base_currency,
        target_currency=second.target_currency,
        factor=multiply(first.factor, second.factor),
        as_of=as_of or first.as_of,
        provenance=RateProvenance.CHAIN,
        chain=(first, second),
        provider=first.provider,
    )


def identity(currency: str, as_of: date, provider: str = "FRB") -> ExchangeRate:
    """Return the ``currency -> currency`` rate with factor exactly one."""

    return ExchangeRate(
        base_currency=currency,
        target_currency=currency,
        factor=ONE,
        as_of=as_of,
        provider=provider,
    )


__all__ = ["RATE_CONTEXT", "compose", "divide", "identity", "invert", "multiply"]
