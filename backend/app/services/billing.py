"""Invoice totaling."""

from decimal import Decimal
from typing import Iterable

from backend.app.schemas.invoice import InvoiceTotals

HUNDRED = Decimal("100")


def _decimal(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def calculate_line_total(quantity, price, discount=None) -> Decimal:
    """quantity x price x (1 - discount / 100); no rounding, negatives pass through."""
    return _decimal(quantity) * _decimal(price) * (Decimal("1") - _decimal(discount) / HUNDRED)


def calculate_invoice_totals(items: Iterable, exchange_rate) -> InvoiceTotals:
    """Aggregate line items given as objects with ``quantity``, ``price`` and ``discount``.

    ``total_rsd`` uses the exchange rate snapshotted on the invoice, never a live rate.
    """
    subtotal = Decimal("0")
    total = Decimal("0")
    for item in items:
        subtotal += _decimal(item.quantity) * _decimal(item.price)
        total += calculate_line_total(item.quantity, item.price, getattr(item, "discount", None))
    rate = _decimal(exchange_rate) if exchange_rate is not None else Decimal("1")
    return InvoiceTotals(
        subtotal=subtotal,
        discount_total=subtotal - total,
        total=total,
        total_rsd=total * rate,
    )
