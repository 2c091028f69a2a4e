"""KPO knjiga (income book) built from issued invoices."""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from backend.app.models.invoice import Invoice
from backend.app.schemas.report import KpoBook, KpoEntry


def build_kpo_book(
    db: Session,
    from_date: date,
    to_date: date,
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
) -> KpoBook:
    """Non-draft invoices dated within [from_date, to_date], oldest first."""
    query = (
        db.query(Invoice)
        .options(joinedload(Invoice.customer))
        .filter(
            Invoice.status != "draft",
            Invoice.invoice_date >= from_date,
            Invoice.invoice_date <= to_date,
        )
    )
    if status:
        query = query.filter(Invoice.status == status)
    if customer_id:
        query = query.filter(Invoice.customer_id == customer_id)
    invoices = query.order_by(Invoice.invoice_date.asc(), Invoice.id.asc()).all()

    entries = []
    total_income = Decimal("0.00")
    for ordinal, invoice in enumerate(invoices, start=1):
        amount = Decimal(str(invoice.total_rsd or 0)).quantize(Decimal("0.01"))
        total_income += amount
        entries.append(
            KpoEntry(
                ordinal=ordinal,
                invoice_id=invoice.id,
                invoice_number=invoice.invoice_number,
                invoice_date=invoice.invoice_date,
                customer_id=invoice.customer_id,
                customer_name=invoice.customer_name,
                currency=invoice.currency,
                total_rsd=amount,
                status=invoice.status,
            )
        )

    return KpoBook(
        from_date=from_date,
        to_date=to_date,
        entries=entries,
        count=len(entries),
        total_income=total_income,
    )
