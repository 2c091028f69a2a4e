from datetime import date, timedelta
from decimal import Decimal

import httpx

from backend.app.core.time import local_today
from backend.app.schemas.exchange_rate import ExchangeRateRecord, RateSource
from backend.app.services.nbs_rates import NBSRateFetcher
from backend.app.services.rate_resolver import RateResolver


class InMemoryRateStore:
    def __init__(self, rates=()):
        self.rows = {}
        self.calls = 0
        self.upsert_rates(rates)

    def get_rates_for_date(self, rate_date):
        self.calls += 1
        return sorted((r for (_, d), r in self.rows.items() if d == rate_date), key=lambda r: r.currency_code)

    def get_rate(self, currency_code, rate_date):
        self.calls += 1
        return self.rows.get((currency_code, rate_date))

    def get_most_recent_rate(self, currency_code):
        self.calls += 1
        candidates = [r for (c, _), r in self.rows.items() if c == currency_code and r.middle_rate is not None]
        return max(candidates, key=lambda r: r.rate_date) if candidates else None

    def get_latest_rates(self):
        if not self.rows:
            return []
        return self.get_rates_for_date(max(d for (_, d) in self.rows))

    def get_history(self, currency_code, from_date, to_date):
        return sorted(
            (r for (c, d), r in self.rows.items() if c == currency_code and from_date <= d <= to_date),
            key=lambda r: r.rate_date,
            reverse=True,
        )

    def upsert_rates(self, rates):
        count = 0
        for rate in rates:
            self.rows[(rate.currency_code, rate.rate_date)] = rate
            count += 1
        return count


def _rate(code, rate_date, middle, unit=1):
    return ExchangeRateRecord(
        currency_code=code,
        currency_name=code,
        middle_rate=Decimal(middle) if middle is not None else None,
        rate_date=rate_date,
        unit=unit,
    )


def _unreachable(request):
    raise httpx.ConnectError("unreachable", request=request)


def _resolver(store, handler=_unreachable):
    fetcher = NBSRateFetcher(
        store,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        api_url="https://nbs.test/rates",
        max_lookback_days=10,
        supported_currencies=("EUR", "USD", "JPY"),
    )
    return RateResolver(store, fetcher)


def test_rsd_is_always_one_and_never_touches_store():
    store = InMemoryRateStore()
    resolver = _resolver(store)
    for requested in (None, date(2024, 1, 1), date(1999, 12, 31)):
        rate = resolver.resolve("RSD", requested)
        assert rate.middle_rate == Decimal("1")
        assert rate.unit == 1
        assert rate.source == RateSource.BASE
    assert resolver.resolve("rsd").currency_code == "RSD"
    assert store.calls == 0


def test_exact_date_cache_hit():
    store = InMemoryRateStore([_rate("EUR", date(2024, 1, 5), "117.1732")])
    rate = _resolver(store).resolve("eur", date(2024, 1, 5))
    assert rate.currency_code == "EUR"
    assert rate.middle_rate == Decimal("117.1732")
    assert rate.rate_date == date(2024, 1, 5)
    assert rate.source == RateSource.CACHED


def test_requested_date_miss_fetches_from_source():
    def handler(request):
        return httpx.Response(
            200,
            json={"exchangeRateListModels": [{"currencyCode": "USD", "middleRate": "108,2", "unit": 1}]},
        )

    store = InMemoryRateStore([_rate("USD", date(2023, 12, 1), "110.0")])
    rate = _resolver(store, handler).resolve("USD", date(2024, 1, 5))

    assert rate.middle_rate == Decimal("108.2")
    assert rate.rate_date == date(2024, 1, 5)
    assert rate.source == RateSource.FETCHED
    assert store.get_rate("USD", date(2024, 1, 5)) is not None


def test_without_date_uses_most_recent_cached_rate_and_skips_fetch():
    def handler(request):
        raise AssertionError("no fetch expected without an explicit date")

    older = local_today() - timedelta(days=30)
    store = InMemoryRateStore([_rate("EUR", older, "117.0")])
    rate = _resolver(store, handler).resolve("EUR")

    assert rate.middle_rate == Decimal("117.0")
    assert rate.rate_date == older
    assert rate.source == RateSource.CACHED


def test_unreachable_source_and_empty_store_uses_fallback_table():
    rate = _resolver(InMemoryRateStore()).resolve("EUR", date(2024, 1, 1))
    assert rate.middle_rate == Decimal("117.2")
    assert rate.unit == 1
    assert rate.source == RateSource.FALLBACK


def test_stale_cached_rate_preferred_over_fallback_when_fetch_has_no_match():
    def handler(request):
        return httpx.Response(
            200,
            json={"exchangeRateListModels": [{"currencyCode": "USD", "middleRate": "108,2", "unit": 1}]},
        )

    store = InMemoryRateStore([_rate("JPY", date(2023, 12, 1), "72.5", unit=100)])
    rate = _resolver(store, handler).resolve("JPY", date(2024, 1, 5))

    assert rate.source == RateSource.CACHED
    assert rate.rate_date == date(2023, 12, 1)
    assert rate.per_unit_rate == Decimal("0.725")


def test_unknown_currency_defaults_to_one():
    rate = _resolver(InMemoryRateStore()).resolve("XAU", date(2024, 1, 1))
    assert rate.middle_rate == Decimal("1")
    assert rate.unit == 1
    assert rate.source == RateSource.DEFAULT


def test_rows_without_middle_rate_are_skipped():
    store = InMemoryRateStore([_rate("EUR", date(2024, 1, 5), None), _rate("EUR", date(2024, 1, 4), "117.1")])
    rate = _resolver(store).resolve("EUR", date(2024, 1, 5))
    # Day is cached (unusable) so the fetcher serves it from cache, then the recent usable row wins
    assert rate.rate_date == date(2024, 1, 4)
    assert rate.middle_rate == Decimal("117.1")


def test_fallback_table_entry_is_dated_today():
    def handler(request):
        return httpx.Response(
            200,
            json={"exchangeRateListModels": [{"currencyCode": "USD", "middleRate": "108,2", "unit": 1}]},
        )

    rate = _resolver(InMemoryRateStore(), handler).resolve("EUR", date(2024, 1, 5))

    assert rate.source == RateSource.FALLBACK
    assert rate.middle_rate == Decimal("117.2")
    assert rate.rate_date == local_today()
