"""Pick the exchange rate to use for a currency on a given day.

Lookup order, first hit wins:

1. the cached row for the exact day (today when no day is given);
2. when a specific day was asked for, a fetch for that day;
3. the most recent cached row for the currency;
4. the static fallback table;
5. a neutral 1:1 rate.

RSD is the base currency and always resolves to 1 without touching the store.
Every result is tagged with its source so callers can tell a real rate from a
stale, fallback or defaulted one.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from backend.app.core.logging import get_logger
from backend.app.core.time import local_today
from backend.app.schemas.exchange_rate import ExchangeRateRecord, RateSource, ResolvedRate
from backend.app.services.nbs_rates import NBSRateFetcher, fallback_rates
from backend.app.services.rate_store import RateStore

logger = get_logger("rate_resolver")

BASE_CURRENCY = "RSD"


def _usable(rate: Optional[ExchangeRateRecord]) -> bool:
    return rate is not None and rate.middle_rate is not None and rate.middle_rate > 0


def _resolved(rate: ExchangeRateRecord, source: RateSource) -> ResolvedRate:
    return ResolvedRate(
        currency_code=rate.currency_code,
        middle_rate=rate.middle_rate,
        unit=rate.unit or 1,
        rate_date=rate.rate_date,
        buy_rate=rate.buy_rate,
        sell_rate=rate.sell_rate,
        source=source,
    )


class RateResolver:
    def __init__(self, store: RateStore, fetcher: NBSRateFetcher):
        self.store = store
        self.fetcher = fetcher

    def resolve(self, currency_code: str, rate_date: Optional[date] = None) -> ResolvedRate:
        code = currency_code.upper()
        target = rate_date or local_today()
        if code == BASE_CURRENCY:
            return ResolvedRate(
                currency_code=BASE_CURRENCY, middle_rate=Decimal("1"), unit=1, rate_date=target, source=RateSource.BASE
            )

        cached = self.store.get_rate(code, target)
        if _usable(cached):
            return _resolved(cached, RateSource.CACHED)

        if rate_date is not None:
            logger.info("Rate not cached for %s on %s, fetching from NBS", code, target)
            outcome = self.fetcher.fetch(target)
            match = next((r for r in outcome.rates if r.currency_code == code and _usable(r)), None)
            if match is not None:
                return _resolved(match, outcome.source)

        recent = self.store.get_most_recent_rate(code)
        if _usable(recent):
            logger.debug("Using most recent cached %s rate from %s", code, recent.rate_date)
            return _resolved(recent, RateSource.CACHED)

        fallback = next((r for r in fallback_rates() if r.currency_code == code), None)
        if fallback is not None:
            logger.warning("No stored rate for %s, using fallback table", code)
            return _resolved(fallback, RateSource.FALLBACK)

        logger.warning("Unknown currency %s, defaulting to 1:1", code)
        return ResolvedRate(currency_code=code, middle_rate=Decimal("1"), unit=1, rate_date=target, source=RateSource.DEFAULT)
