"""Exchange rate schemas shared by the rate store, fetcher, resolver and API."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RateSource(str, Enum):
    BASE = "base"
    CACHED = "cached"
    FETCHED = "fetched"
    FALLBACK = "fallback"
    DEFAULT = "default"


class ExchangeRateRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    currency_code: str
    currency_name: str
    buy_rate: Optional[Decimal] = None
    middle_rate: Optional[Decimal] = None
    sell_rate: Optional[Decimal] = None
    rate_date: date
    unit: int = 1


class FetchOutcome(BaseModel):
    """Rates returned by one fetch together with where they came from."""

    rates: list[ExchangeRateRecord]
    source: RateSource
    rate_date: date


class ResolvedRate(BaseModel):
    currency_code: str
    middle_rate: Decimal
    unit: int = 1
    rate_date: Optional[date] = None
    buy_rate: Optional[Decimal] = None
    sell_rate: Optional[Decimal] = None
    source: RateSource

    @property
    def per_unit_rate(self) -> Decimal:
        return Decimal(self.middle_rate) / Decimal(self.unit or 1)


class ResolvedRateRead(BaseModel):
    currency_code: str
    rate: Decimal
    unit: int
    rate_date: Optional[date] = None
    buy_rate: Optional[Decimal] = None
    sell_rate: Optional[Decimal] = None
    source: RateSource


class RatesUpdateResult(BaseModel):
    message: str
    count: int
    rates: list[ExchangeRateRecord]


class ConvertRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal
    from_currency: str = Field(min_length=3, max_length=3)
    to_currency: str = Field(min_length=3, max_length=3)
    rate_date: Optional[date] = Field(default=None, alias="date")

    @field_validator("from_currency", "to_currency")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class ConvertResult(BaseModel):
    original_amount: Decimal
    from_currency: str
    to_currency: str
    converted_amount: Decimal
    rate_date: date
