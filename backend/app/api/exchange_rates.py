"""Exchange rate endpoints backed by the NBS cache."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.app.core.time import local_today
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.rates import get_currency_converter, get_rate_fetcher, get_rate_resolver
from backend.app.schemas.exchange_rate import (
    ConvertRequest,
    ConvertResult,
    ExchangeRateRecord,
    RatesUpdateResult,
    ResolvedRateRead,
)
from backend.app.services.currency import CurrencyConverter
from backend.app.services.nbs_rates import NBSRateFetcher
from backend.app.services.rate_resolver import RateResolver

router = APIRouter(prefix="/exchange-rates", tags=["exchange-rates"])


@router.get("/latest", response_model=List[ExchangeRateRecord])
def get_latest_rates(
    fetcher: NBSRateFetcher = Depends(get_rate_fetcher), current_user: str = Depends(get_current_user)
):
    return fetcher.get_latest_rates()


@router.post("/update", response_model=RatesUpdateResult)
def update_rates(fetcher: NBSRateFetcher = Depends(get_rate_fetcher), current_user: str = Depends(get_current_user)):
    rates = fetcher.update_daily_rates()
    return {"message": "Exchange rates updated successfully", "count": len(rates), "rates": rates}


@router.post("/convert", response_model=ConvertResult)
def convert_amount(
    payload: ConvertRequest,
    converter: CurrencyConverter = Depends(get_currency_converter),
    current_user: str = Depends(get_current_user),
):
    converted = converter.convert(payload.amount, payload.from_currency, payload.to_currency, payload.rate_date)
    return {
        "original_amount": payload.amount,
        "from_currency": payload.from_currency,
        "to_currency": payload.to_currency,
        "converted_amount": converted,
        "rate_date": payload.rate_date or local_today(),
    }


@router.get("/{currency}", response_model=ResolvedRateRead)
def get_currency_rate(
    currency: str,
    rate_date: Optional[date] = Query(default=None, alias="date"),
    resolver: RateResolver = Depends(get_rate_resolver),
    current_user: str = Depends(get_current_user),
):
    resolved = resolver.resolve(currency.upper(), rate_date)
    return {
        "currency_code": resolved.currency_code,
        "rate": resolved.middle_rate,
        "unit": resolved.unit,
        "rate_date": resolved.rate_date,
        "buy_rate": resolved.buy_rate,
        "sell_rate": resolved.sell_rate,
        "source": resolved.source,
    }


@router.get("/{currency}/history", response_model=List[ExchangeRateRecord])
def get_rate_history(
    currency: str,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    fetcher: NBSRateFetcher = Depends(get_rate_fetcher),
    current_user: str = Depends(get_current_user),
):
    if from_date is None or to_date is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="from_date and to_date parameters are required")
    return fetcher.get_historical_rates(currency, from_date, to_date)
