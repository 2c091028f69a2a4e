"""Currency conversion through RSD."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from backend.app.services.rate_resolver import BASE_CURRENCY, RateResolver

RESULT_QUANTUM = Decimal("0.0001")


class CurrencyConverter:
    def __init__(self, resolver: RateResolver):
        self.resolver = resolver

    def convert(
        self,
        amount: Decimal | float | int,
        from_currency: str,
        to_currency: str,
        rate_date: Optional[date] = None,
    ) -> Decimal:
        """Convert ``amount`` between currencies, pivoting through RSD.

        Cross rates are never used: a foreign-to-foreign conversion goes to RSD
        first and then out again. Same-currency conversion returns the amount untouched.
        """
        value = Decimal(str(amount))
        source = from_currency.upper()
        target = to_currency.upper()
        if source == target:
            return value

        if source != BASE_CURRENCY:
            value = value * self.resolver.resolve(source, rate_date).per_unit_rate
        if target != BASE_CURRENCY:
            value = value / self.resolver.resolve(target, rate_date).per_unit_rate
        return value.quantize(RESULT_QUANTUM, rounding=ROUND_HALF_UP)
