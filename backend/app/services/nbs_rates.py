"""Daily exchange rates from the National Bank of Serbia (NBS).

Rates are read from the local store when the requested day is already cached,
otherwise fetched from the NBS API and saved. Weekends and holidays have no
list of their own, so the fetcher steps back one day at a time up to a fixed
limit. When the API cannot be reached the static fallback table is returned
and nothing is written.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

import httpx

from backend.app.core.logging import get_logger
from backend.app.core.settings import get_settings
from backend.app.core.time import local_today
from backend.app.schemas.exchange_rate import ExchangeRateRecord, FetchOutcome, RateSource
from backend.app.services.rate_store import RateStore

logger = get_logger("nbs_rates")

# Approximate RSD rates used only when NBS is unavailable
FALLBACK_RATES = (
    ("EUR", "Euro", "116.8", "117.2", "117.6"),
    ("USD", "US Dollar", "108.1", "108.5", "108.9"),
    ("GBP", "British Pound", "136.5", "137.2", "137.9"),
    ("CHF", "Swiss Franc", "120.1", "120.8", "121.5"),
)


def fallback_rates(rate_date: Optional[date] = None) -> List[ExchangeRateRecord]:
    """Return the static fallback table dated ``rate_date`` (today by default)."""
    rate_date = rate_date or local_today()
    return [
        ExchangeRateRecord(
            currency_code=code,
            currency_name=name,
            buy_rate=Decimal(buy),
            middle_rate=Decimal(middle),
            sell_rate=Decimal(sell),
            rate_date=rate_date,
            unit=1,
        )
        for code, name, buy, middle, sell in FALLBACK_RATES
    ]


def parse_rate(value: Any) -> Optional[Decimal]:
    """Parse an NBS rate value, accepting a comma as the decimal separator."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def parse_unit(value: Any) -> int:
    try:
        unit = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return unit if unit > 0 else 1


def parse_nbs_response(
    payload: Dict[str, Any], rate_date: date, supported_currencies: Iterable[str]
) -> List[ExchangeRateRecord]:
    """Turn an NBS daily list into records, keeping only supported currencies."""
    supported = {code.upper() for code in supported_currencies}
    rates: List[ExchangeRateRecord] = []
    for item in payload.get("exchangeRateListModels") or []:
        if not isinstance(item, dict):
            continue
        code = str(item.get("currencyCode") or "").upper()
        if code not in supported:
            continue
        name = (
            item.get("currencyNameSerCyrillic")
            or item.get("currencyNameSerLatin")
            or item.get("currencyNameEng")
            or code
        )
        rates.append(
            ExchangeRateRecord(
                currency_code=code,
                currency_name=name,
                buy_rate=parse_rate(item.get("buyingRate")),
                middle_rate=parse_rate(item.get("middleRate")),
                sell_rate=parse_rate(item.get("sellingRate")),
                rate_date=rate_date,
                unit=parse_unit(item.get("unit")),
            )
        )
    return rates


class NBSRateFetcher:
    def __init__(
        self,
        store: RateStore,
        client: Optional[httpx.Client] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_lookback_days: Optional[int] = None,
        supported_currencies: Optional[Iterable[str]] = None,
    ):
        settings = get_settings()
        self.store = store
        self.client = client
        self.api_url = api_url or settings.nbs_api_url
        self.timeout = timeout if timeout is not None else settings.nbs_timeout_seconds
        self.max_lookback_days = max_lookback_days if max_lookback_days is not None else settings.rate_lookback_days
        self.supported_currencies = frozenset(
            supported_currencies if supported_currencies is not None else settings.supported_currencies
        )

    def fetch(self, rate_date: Optional[date] = None, use_cache: bool = True) -> FetchOutcome:
        """Return rates for ``rate_date`` with their provenance.

        With ``use_cache`` off the store is not consulted and NBS is always asked.

        Network and decoding errors never escape; a failed write to the store does.
        """
        target = rate_date or local_today()
        for _ in range(self.max_lookback_days + 1):
            cached = self.store.get_rates_for_date(target) if use_cache else []
            if cached:
                logger.debug("Using cached rates for %s", target)
                return FetchOutcome(rates=cached, source=RateSource.CACHED, rate_date=target)

            logger.info("Fetching NBS exchange rates for date: %s", target)
            try:
                payload = self._request(target)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Error fetching NBS rates for %s: %s", target, exc)
                return self._fallback()

            if payload.get("exchangeRateListModels"):
                rates = parse_nbs_response(payload, target, self.supported_currencies)
                self.store.upsert_rates(rates)
                return FetchOutcome(rates=rates, source=RateSource.FETCHED, rate_date=target)

            previous = target - timedelta(days=1)
            logger.info("No rates for %s (%s), trying %s", target, payload.get("message", "empty list"), previous)
            target = previous

        logger.warning("No NBS rates within %d days before %s", self.max_lookback_days, rate_date or local_today())
        return self._fallback()

    def fetch_rates(self, rate_date: Optional[date] = None) -> List[ExchangeRateRecord]:
        return self.fetch(rate_date).rates

    def get_latest_rates(self) -> List[ExchangeRateRecord]:
        """Rates of the newest cached day; fetches today's list when the cache is empty."""
        rates = self.store.get_latest_rates()
        if rates:
            return rates
        logger.info("No rates in database, fetching from NBS")
        return self.fetch_rates()

    def update_daily_rates(self) -> List[ExchangeRateRecord]:
        logger.info("Updating daily exchange rates from NBS")
        return self.fetch(use_cache=False).rates

    def get_historical_rates(self, currency_code: str, from_date: date, to_date: date) -> List[ExchangeRateRecord]:
        return self.store.get_history(currency_code.upper(), from_date, to_date)

    def _request(self, target: date) -> Dict[str, Any]:
        params = {"date": target.isoformat()}
        headers = {"Accept": "application/json"}
        if self.client is not None:
            response = self.client.get(self.api_url, params=params, headers=headers, timeout=self.timeout)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(self.api_url, params=params, headers=headers)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Unexpected NBS response shape")
        return payload

    def _fallback(self) -> FetchOutcome:
        today = local_today()
        logger.warning("Using fallback exchange rates")
        return FetchOutcome(rates=fallback_rates(today), source=RateSource.FALLBACK, rate_date=today)
