"""Run feed refresh cycles against an :class:`~fx_historic.FxHistoric` provider."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from tenacity import Retrying, before_sleep_log, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from fx_historic.ingestion.models import RateRecord
from fx_historic.ingestion.strategy import RateFeed
from fx_historic.rates.loader import LoadState
from fx_historic.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from fx_historic import FxHistoric

LOGGER = get_logger(__name__)


class FeedRefresher:
    """Fetch a feed with retries and hand the result to the provider.

    The provider itself never retries; a refresh that still fails after
    ``attempts`` tries is recorded as a failed load and readers keep the data
    from the last successful one.
    """

    def __init__(
        self,
        provider: "FxHistoric",
        feed: RateFeed,
        *,
        attempts: int = 3,
        wait: wait_base | None = None,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.provider = provider
        self.feed = feed
        self.attempts = attempts
        self.wait = wait if wait is not None else wait_exponential(multiplier=1, min=2, max=30)

    def _fetch(self) -> list[RateRecord]:
        retrying = Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=self.wait,
            reraise=True,
            before_sleep=before_sleep_log(LOGGER, logging.WARNING),
        )
        return retrying(lambda: list(self.feed.fetch()))

    def refresh(self) -> LoadState:
        """Run one refresh cycle and return the resulting load state."""

        resource_id = self.feed.resource_id
        try:
            records = self._fetch()
        except Exception as exc:
            LOGGER.warning(
                "Fetching %s failed after %s attempt(s): %s", resource_id, self.attempts, exc
            )
            return self.provider.load_failed(resource_id, exc)
        return self.provider.load_records(resource_id, records)

    def refresh_async(self) -> threading.Thread:
        """Start :meth:`refresh` on a daemon thread and return the thread."""

        thread = threading.Thread(
            target=self.refresh,
            name=f"fx-historic-refresh-{self.feed.resource_id}",
            daemon=True,
        )
        thread.start()
        return thread


__all__ = ["FeedRefresher"]
