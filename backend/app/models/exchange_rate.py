"""Cached NBS exchange rate, one row per currency and rate date."""

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String, UniqueConstraint

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class ExchangeRate(Base):
    __tablename__ = "exchange_rates"
    __table_args__ = (UniqueConstraint("currency_code", "rate_date", name="uq_exchange_rates_currency_date"),)

    id = Column(Integer, primary_key=True, index=True)
    currency_code = Column(String(3), nullable=False, index=True)
    currency_name = Column(String, nullable=False)
    buy_rate = Column(Numeric(10, 4), nullable=True)
    middle_rate = Column(Numeric(10, 4), nullable=True)
    sell_rate = Column(Numeric(10, 4), nullable=True)
    rate_date = Column(Date, nullable=False, index=True)
    unit = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
