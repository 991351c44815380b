"""SQLAlchemy-backed archive of parsed feed rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable, cast

from sqlalchemy import Column, Date, DateTime, String, create_engine, func, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from fx_historic.db import DEFAULT_SQLITE_DB_PATH
from fx_historic.ingestion.models import RateRecord
from fx_historic.utils.logger import get_logger

LOGGER = get_logger(__name__)

# Keeps each multi-row INSERT well under SQLite's bound-parameter limit.
_UPSERT_CHUNK = 500


class Base(DeclarativeBase):
    pass


class _ExchangeRateRow(Base):
    __tablename__ = "exchange_rates"

    rate_date = Column(Date, primary_key=True)
    currency = Column(String(3), primary_key=True)
    # Stored as text so Decimal factors survive SQLite without float rounding.
    rate = Column(String, nullable=False)
    source = Column(String, nullable=False, default="FRB")
    created_at = Column(DateTime, server_default=text("CURRENT_TIMESTAMP"))


@dataclass(slots=True)
class PersistenceResult:
    """Represents how many rows were inserted or updated in a batch."""

    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        """Return the total number of affected rows."""

        return self.inserted + self.updated


class SQLiteManager:
    """Stores :class:`RateRecord` rows in SQLite and reads them back by date."""

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(self.engine)
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False
        )

    def insert_rates(self, rows: Iterable[RateRecord]) -> PersistenceResult:
        """Upsert ``rows`` keyed by ``(rate_date, currency)``; later rows win."""

        # Collapse repeats first so the inserted/updated split counts each key once.
        latest = {(row.rate_date, row.currency): row for row in rows}
        if not latest:
            return PersistenceResult()

        with self._SessionFactory() as session:
            days = {rate_date for rate_date, _ in latest}
            stmt = select(_ExchangeRateRow.rate_date, _ExchangeRateRow.currency).where(
                _ExchangeRateRow.rate_date.in_(sorted(days))
            )
            archived = {(rate_date, currency) for rate_date, currency in session.execute(stmt)}
            values = [
                {
                    "rate_date": row.rate_date,
                    "currency": row.currency,
                    "rate": str(row.rate),
                    "source": row.source,
                }
                for row in latest.values()
            ]
            for start in range(0, len(values), _UPSERT_CHUNK):
                upsert = sqlite_insert(_ExchangeRateRow).values(
                    values[start : start + _UPSERT_CHUNK]
                )
                session.execute(
                    upsert.on_conflict_do_update(
                        index_elements=[_ExchangeRateRow.rate_date, _ExchangeRateRow.currency],
                        set_={"rate": upsert.excluded.rate, "source": upsert.excluded.source},
                    )
                )
            session.commit()

        updated = len(archived & latest.keys())
        result = PersistenceResult(inserted=len(latest) - updated, updated=updated)
        LOGGER.info(
            "Archived %s rates across %s days (%s new, %s replaced)",
            result.total,
            len(days),
            result.inserted,
            result.updated,
        )
        return result

    def fetch_all(self) -> list[RateRecord]:
        return self.fetch_range()

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
        *,
        source: str | None = None,
    ) -> list[RateRecord]:
        with self._SessionFactory() as session:
            stmt = select(_ExchangeRateRow).order_by(
                _ExchangeRateRow.rate_date, _ExchangeRateRow.currency
            )
            if start is not None:
                stmt = stmt.where(_ExchangeRateRow.rate_date >= start)
            if end is not None:
                stmt = stmt.where(_ExchangeRateRow.rate_date <= end)
            if source is not None:
                stmt = stmt.where(_ExchangeRateRow.source == source)
            return [
                RateRecord(
                    rate_date=cast(date, model.rate_date),
                    currency=cast(str, model.currency),
                    rate=Decimal(cast(str, model.rate)),
                    source=cast(str, model.source),
                )
                for model in session.execute(stmt).scalars()
            ]

    def latest_rate_date(self, source: str | None = None) -> date | None:
        """Return the most recent archived date, optionally for one source."""

        with self._SessionFactory() as session:
            stmt = select(func.max(_ExchangeRateRow.rate_date))
            if source is not None:
                stmt = stmt.where(_ExchangeRateRow.source == source)
            return session.execute(stmt).scalar_one_or_none()

    def close(self) -> None:  # pragma: no cover - trivial
        self.engine.dispose()

    def __enter__(self) -> "SQLiteManager":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["PersistenceResult", "SQLiteManager"]
