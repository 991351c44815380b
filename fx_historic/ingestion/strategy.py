"""Abstractions for pluggable rate feeds."""

from __future__ import annotations

from typing import Iterable, Protocol

from fx_historic.ingestion.models import RateRecord


class RateFeed(Protocol):
    """Contract for collaborators that deliver parsed rate rows.

    ``fetch`` returns the full current window of the feed; every call is
    treated as a complete replacement of the cached data.
    """

    resource_id: str

    def fetch(self) -> Iterable[RateRecord]:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateFeed"]
