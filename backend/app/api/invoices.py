"""Invoice routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session, joinedload

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.rates import get_rate_resolver
from backend.app.models.invoice import Invoice
from backend.app.schemas.invoice import (
    InvoiceCreate,
    InvoiceDetail,
    InvoiceNumberRead,
    InvoiceRead,
    InvoiceStatusUpdate,
    InvoiceTotals,
    InvoiceUpdate,
)
from backend.app.schemas.invoice_item import InvoiceItemRead
from backend.app.services.billing import calculate_invoice_totals
from backend.app.services.invoices import (
    DuplicateInvoiceNumberError,
    InvoiceReferenceError,
    create_invoice,
    next_invoice_number,
    refresh_invoice_rate,
    update_invoice,
)
from backend.app.services.rate_resolver import RateResolver

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _get_invoice(db: Session, invoice_id: int) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return invoice


@router.get("/", response_model=List[InvoiceRead])
async def list_invoices(
    status: str | None = None,
    customer_id: int | None = None,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    query = db.query(Invoice).options(joinedload(Invoice.customer))
    if status:
        query = query.filter(Invoice.status == status)
    if customer_id:
        query = query.filter(Invoice.customer_id == customer_id)
    return query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc()).all()


@router.get("/next-number", response_model=InvoiceNumberRead)
async def get_next_invoice_number(db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    return {"invoice_number": next_invoice_number(db)}


@router.get("/{invoice_id}", response_model=InvoiceDetail)
async def get_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    return _get_invoice(db, invoice_id)


@router.get("/{invoice_id}/items", response_model=List[InvoiceItemRead])
async def list_invoice_items(invoice_id: int, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    return _get_invoice(db, invoice_id).items


@router.get("/{invoice_id}/totals", response_model=InvoiceTotals)
async def get_invoice_totals(invoice_id: int, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    invoice = _get_invoice(db, invoice_id)
    return calculate_invoice_totals(invoice.items, invoice.exchange_rate)


@router.post("/", response_model=InvoiceDetail, status_code=status.HTTP_201_CREATED)
def create_invoice_route(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    resolver: RateResolver = Depends(get_rate_resolver),
    current_user: str = Depends(get_current_user),
):
    try:
        return create_invoice(db, payload, resolver)
    except InvoiceReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except DuplicateInvoiceNumberError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.put("/{invoice_id}", response_model=InvoiceDetail)
def update_invoice_route(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    resolver: RateResolver = Depends(get_rate_resolver),
    current_user: str = Depends(get_current_user),
):
    invoice = _get_invoice(db, invoice_id)
    try:
        return update_invoice(db, invoice, payload, resolver)
    except InvoiceReferenceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except DuplicateInvoiceNumberError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.patch("/{invoice_id}/status", response_model=InvoiceRead)
async def update_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    invoice = _get_invoice(db, invoice_id)
    invoice.status = payload.status
    db.commit()
    db.refresh(invoice)
    return invoice


@router.post("/{invoice_id}/refresh-rate", response_model=InvoiceDetail)
def refresh_rate(
    invoice_id: int,
    db: Session = Depends(get_db),
    resolver: RateResolver = Depends(get_rate_resolver),
    current_user: str = Depends(get_current_user),
):
    invoice = _get_invoice(db, invoice_id)
    return refresh_invoice_rate(db, invoice, resolver)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    invoice = _get_invoice(db, invoice_id)
    db.delete(invoice)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
