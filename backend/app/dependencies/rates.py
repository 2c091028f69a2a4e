"""Request-scoped wiring of the rate store, NBS fetcher, resolver and converter."""

from typing import Iterator, Optional

import httpx
from fastapi import Depends
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.services.currency import CurrencyConverter
from backend.app.services.nbs_rates import NBSRateFetcher
from backend.app.services.rate_resolver import RateResolver
from backend.app.services.rate_store import ExchangeRateStore


def get_http_client() -> Iterator[Optional[httpx.Client]]:
    # None lets the fetcher open a short-lived client per request; tests override this
    yield None


def get_rate_store(db: Session = Depends(get_db)) -> ExchangeRateStore:
    return ExchangeRateStore(db)


def get_rate_fetcher(
    store: ExchangeRateStore = Depends(get_rate_store),
    client: Optional[httpx.Client] = Depends(get_http_client),
) -> NBSRateFetcher:
    return NBSRateFetcher(store, client=client)


def get_rate_resolver(
    store: ExchangeRateStore = Depends(get_rate_store),
    fetcher: NBSRateFetcher = Depends(get_rate_fetcher),
) -> RateResolver:
    return RateResolver(store, fetcher)


def get_currency_converter(resolver: RateResolver = Depends(get_rate_resolver)) -> CurrencyConverter:
    return CurrencyConverter(resolver)
