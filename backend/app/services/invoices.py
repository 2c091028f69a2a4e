"""Invoice persistence: creation, full-replacement updates and rate snapshots."""

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.core.logging import get_logger
from backend.app.core.time import local_today
from backend.app.models.bank_account import BankAccount
from backend.app.models.customer import Customer
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_item import DEFAULT_UNIT, InvoiceItem
from backend.app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from backend.app.schemas.invoice_item import InvoiceItemCreate
from backend.app.services.billing import calculate_invoice_totals
from backend.app.services.rate_resolver import BASE_CURRENCY, RateResolver

logger = get_logger("invoices")

RATE_QUANTUM = Decimal("0.0001")
MONEY_QUANTUM = Decimal("0.01")
INVOICE_NUMBER_PATTERN = re.compile(r"^(\d+)/(\d{4})$")


class InvoiceError(Exception):
    pass


class DuplicateInvoiceNumberError(InvoiceError):
    pass


class InvoiceReferenceError(InvoiceError):
    pass


def snapshot_exchange_rate(resolver: RateResolver, currency: str, rate_date: date) -> Decimal:
    """RSD value of one unit of ``currency`` on ``rate_date``, rounded to four places."""
    if currency.upper() == BASE_CURRENCY:
        return Decimal("1")
    resolved = resolver.resolve(currency, rate_date)
    logger.info("Snapshot %s rate %s for %s (source=%s)", currency, resolved.middle_rate, rate_date, resolved.source.value)
    return resolved.per_unit_rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def apply_invoice_totals(invoice: Invoice) -> None:
    totals = calculate_invoice_totals(invoice.items, invoice.exchange_rate)
    invoice.total_rsd = totals.total_rsd.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def next_invoice_number(db: Session, year: Optional[int] = None) -> str:
    """Next free ``NNN/YYYY`` number for the year."""
    year = year or local_today().year
    numbers = db.query(Invoice.invoice_number).filter(Invoice.invoice_number.like(f"%/{year}")).all()
    highest = 0
    for (number,) in numbers:
        match = INVOICE_NUMBER_PATTERN.match(number or "")
        if match and int(match.group(2)) == year:
            highest = max(highest, int(match.group(1)))
    return f"{highest + 1:03d}/{year}"


def _build_items(items: List[InvoiceItemCreate]) -> List[InvoiceItem]:
    return [
        InvoiceItem(
            description=item.description,
            unit=item.unit or DEFAULT_UNIT,
            quantity=item.quantity,
            price=item.price,
            discount=item.discount if item.discount is not None else Decimal("0"),
        )
        for item in items
    ]


def _check_references(db: Session, payload: InvoiceCreate) -> None:
    if not db.query(Customer).filter(Customer.id == payload.customer_id).first():
        raise InvoiceReferenceError("Customer not found")
    if payload.bank_account_id is not None:
        if not db.query(BankAccount).filter(BankAccount.id == payload.bank_account_id).first():
            raise InvoiceReferenceError("Bank account not found")


def _check_number_free(db: Session, invoice_number: str, invoice_id: Optional[int] = None) -> None:
    query = db.query(Invoice).filter(Invoice.invoice_number == invoice_number)
    if invoice_id is not None:
        query = query.filter(Invoice.id != invoice_id)
    if query.first():
        raise DuplicateInvoiceNumberError(f"Invoice number {invoice_number} already exists")


def _commit(db: Session, invoice_number: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateInvoiceNumberError(f"Invoice number {invoice_number} already exists") from exc


def create_invoice(db: Session, payload: InvoiceCreate, resolver: RateResolver) -> Invoice:
    _check_references(db, payload)
    _check_number_free(db, payload.invoice_number)

    exchange_rate = payload.exchange_rate
    if exchange_rate is None:
        exchange_rate = snapshot_exchange_rate(resolver, payload.currency, payload.trading_date)

    invoice = Invoice(
        invoice_number=payload.invoice_number,
        invoice_date=payload.invoice_date,
        trading_date=payload.trading_date,
        customer_id=payload.customer_id,
        bank_account_id=payload.bank_account_id,
        currency=payload.currency,
        exchange_rate=exchange_rate,
        payment_deadline=payload.payment_deadline,
        notes=payload.notes,
        status="draft",
    )
    invoice.items = _build_items(payload.items)
    apply_invoice_totals(invoice)
    db.add(invoice)
    _commit(db, payload.invoice_number)
    db.refresh(invoice)
    return invoice


def update_invoice(db: Session, invoice: Invoice, payload: InvoiceUpdate, resolver: RateResolver) -> Invoice:
    """Overwrite every field and replace all items.

    The rate snapshot survives unless the currency changes; an omitted status keeps the current one.
    """
    _check_references(db, payload)
    _check_number_free(db, payload.invoice_number, invoice.id)

    if payload.exchange_rate is not None:
        exchange_rate = payload.exchange_rate
    elif payload.currency != invoice.currency:
        exchange_rate = snapshot_exchange_rate(resolver, payload.currency, payload.trading_date)
    else:
        exchange_rate = invoice.exchange_rate

    invoice.invoice_number = payload.invoice_number
    invoice.invoice_date = payload.invoice_date
    invoice.trading_date = payload.trading_date
    invoice.customer_id = payload.customer_id
    invoice.bank_account_id = payload.bank_account_id
    invoice.currency = payload.currency
    invoice.exchange_rate = exchange_rate
    invoice.payment_deadline = payload.payment_deadline
    invoice.notes = payload.notes
    if payload.status is not None:
        invoice.status = payload.status
    invoice.items = _build_items(payload.items)
    apply_invoice_totals(invoice)
    _commit(db, payload.invoice_number)
    db.refresh(invoice)
    return invoice


def refresh_invoice_rate(db: Session, invoice: Invoice, resolver: RateResolver) -> Invoice:
    invoice.exchange_rate = snapshot_exchange_rate(resolver, invoice.currency, invoice.trading_date)
    apply_invoice_totals(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice
