"""Exchange rate storage backed by the ``exchange_rates`` table.

The store is handed a session explicitly so the fetcher and resolver never
reach for a shared connection. Anything with the same methods (an in-memory
dict in tests, for instance) can stand in for it.
"""

from datetime import date
from typing import Iterable, List, Optional, Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.logging import get_logger
from backend.app.models.exchange_rate import ExchangeRate
from backend.app.schemas.exchange_rate import ExchangeRateRecord

logger = get_logger("rate_store")


class RateStore(Protocol):
    def get_rates_for_date(self, rate_date: date) -> List[ExchangeRateRecord]: ...

    def get_rate(self, currency_code: str, rate_date: date) -> Optional[ExchangeRateRecord]: ...

    def get_most_recent_rate(self, currency_code: str) -> Optional[ExchangeRateRecord]: ...

    def get_latest_rates(self) -> List[ExchangeRateRecord]: ...

    def get_history(self, currency_code: str, from_date: date, to_date: date) -> List[ExchangeRateRecord]: ...

    def upsert_rates(self, rates: Iterable[ExchangeRateRecord]) -> int: ...


def _to_record(row: ExchangeRate) -> ExchangeRateRecord:
    return ExchangeRateRecord.model_validate(row)


class ExchangeRateStore:
    def __init__(self, db: Session):
        self.db = db

    def get_rates_for_date(self, rate_date: date) -> List[ExchangeRateRecord]:
        rows = (
            self.db.query(ExchangeRate)
            .filter(ExchangeRate.rate_date == rate_date)
            .order_by(ExchangeRate.currency_code.asc())
            .all()
        )
        return [_to_record(row) for row in rows]

    def get_rate(self, currency_code: str, rate_date: date) -> Optional[ExchangeRateRecord]:
        row = (
            self.db.query(ExchangeRate)
            .filter(ExchangeRate.currency_code == currency_code, ExchangeRate.rate_date == rate_date)
            .first()
        )
        return _to_record(row) if row else None

    def get_most_recent_rate(self, currency_code: str) -> Optional[ExchangeRateRecord]:
        row = (
            self.db.query(ExchangeRate)
            .filter(ExchangeRate.currency_code == currency_code, ExchangeRate.middle_rate.isnot(None))
            .order_by(ExchangeRate.rate_date.desc())
            .first()
        )
        return _to_record(row) if row else None

    def get_latest_rates(self) -> List[ExchangeRateRecord]:
        latest_date = self.db.query(func.max(ExchangeRate.rate_date)).scalar()
        if latest_date is None:
            return []
        return self.get_rates_for_date(latest_date)

    def get_history(self, currency_code: str, from_date: date, to_date: date) -> List[ExchangeRateRecord]:
        rows = (
            self.db.query(ExchangeRate)
            .filter(
                ExchangeRate.currency_code == currency_code,
                ExchangeRate.rate_date >= from_date,
                ExchangeRate.rate_date <= to_date,
            )
            .order_by(ExchangeRate.rate_date.desc())
            .all()
        )
        return [_to_record(row) for row in rows]

    def upsert_rates(self, rates: Iterable[ExchangeRateRecord]) -> int:
        """Insert or replace rates by (currency_code, rate_date) in one transaction.

        Either every row of the batch is written or none is; write errors are
        rolled back and re-raised to the caller.
        """
        by_key = {(rate.currency_code, rate.rate_date): rate for rate in rates}
        if not by_key:
            return 0
        try:
            for (currency_code, rate_date), rate in by_key.items():
                row = (
                    self.db.query(ExchangeRate)
                    .filter(ExchangeRate.currency_code == currency_code, ExchangeRate.rate_date == rate_date)
                    .first()
                )
                if row is None:
                    row = ExchangeRate(currency_code=currency_code, rate_date=rate_date)
                    self.db.add(row)
                row.currency_name = rate.currency_name
                row.buy_rate = rate.buy_rate
                row.middle_rate = rate.middle_rate
                row.sell_rate = rate.sell_rate
                row.unit = rate.unit or 1
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to save %d exchange rates", len(by_key))
            raise
        logger.info("Saved %d exchange rates to database", len(by_key))
        return len(by_key)
