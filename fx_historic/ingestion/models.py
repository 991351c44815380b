"""Data models shared across ingestion modules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(slots=True)
class RateRecord:
    """A single parsed feed row: one unit of the base currency buys ``rate`` ``currency``."""

    rate_date: date
    currency: str
    rate: Decimal
    source: str = "FRB"

    def __post_init__(self) -> None:
        if not isinstance(self.rate, Decimal):
            self.rate = Decimal(str(self.rate))
