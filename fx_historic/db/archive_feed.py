"""Expose an archived date window as a :class:`~fx_historic.ingestion.strategy.RateFeed`."""

from __future__ import annotations

from datetime import date

from fx_historic.db.sqlite_manager import SQLiteManager
from fx_historic.ingestion.models import RateRecord


class ArchiveFeed:
    """Feed that replays rows stored by :class:`SQLiteManager`."""

    def __init__(
        self,
        manager: SQLiteManager,
        *,
        start: date | None = None,
        end: date | None = None,
        source: str | None = None,
    ) -> None:
        self.manager = manager
        self.start = start
        self.end = end
        self.source = source
        self.resource_id = f"archive:{manager.db_path.name}"

    def fetch(self) -> list[RateRecord]:
        return self.manager.fetch_range(self.start, self.end, source=self.source)


__all__ = ["ArchiveFeed"]
