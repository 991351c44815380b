"""CLI for resolving a historic exchange rate from a SQLite rate archive."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from fx_historic import FxHistoric
from fx_historic.db import DEFAULT_SQLITE_DB_PATH
from fx_historic.db.archive_feed import ArchiveFeed
from fx_historic.db.sqlite_manager import SQLiteManager
from fx_historic.errors import FxHistoricError
from fx_historic.ingestion.refresh import FeedRefresher
from fx_historic.rates.loader import LoadStatus
from fx_historic.utils.date_range import parse_date
from fx_historic.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["parse_args", "main"]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base", required=True, help="Base currency code (e.g. EUR)")
    parser.add_argument("--target", required=True, help="Target currency code (e.g. JPY)")
    parser.add_argument("--date", dest="rate_date", help="As-of date (YYYY-MM-DD)")
    parser.add_argument(
        "--lookback",
        type=int,
        default=0,
        help="Number of preceding days to try when the as-of date has no rates",
    )
    parser.add_argument(
        "--db",
        dest="db_path",
        default=str(DEFAULT_SQLITE_DB_PATH),
        help="SQLite archive path",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    provider = FxHistoric()
    with SQLiteManager(args.db_path) as manager:
        state = FeedRefresher(provider, ArchiveFeed(manager), attempts=1).refresh()
    if state.status is not LoadStatus.READY:
        print(state.last_message, file=sys.stderr)
        return 1

    rate_date = parse_date(args.rate_date) if args.rate_date else None
    try:
        rate = provider.require_rate(
            args.base.upper(),
            args.target.upper(),
            rate_date,
            lookback_days=args.lookback,
            timeout=0,
        )
    except FxHistoricError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    LOGGER.debug("Resolved %s via %s", rate.pair, rate.provenance.value)
    print(f"{rate.as_of.isoformat()} {rate.pair} {rate.factor} ({rate.provenance.value})")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
