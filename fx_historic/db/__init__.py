"""Helpers for working with the local SQLite rate archive."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH", "default_archive_path"]

# Resolved so callers always receive an absolute path regardless of the
# working directory the package is used from.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path(__file__).resolve().with_name("rates.db")


def default_archive_path() -> Path:
    """Return the absolute path of the default ``rates.db`` archive."""

    return DEFAULT_SQLITE_DB_PATH
