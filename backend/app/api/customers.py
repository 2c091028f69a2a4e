"""Customer routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.models.customer import Customer
from backend.app.models.invoice import Invoice
from backend.app.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["customers"])

DEFAULT_COUNTRY = "Serbia"


def _get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer


@router.get("/", response_model=List[CustomerRead])
async def list_customers(db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    return db.query(Customer).order_by(Customer.name.asc()).all()


@router.get("/{customer_id}", response_model=CustomerRead)
async def get_customer(customer_id: int, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    return _get_customer(db, customer_id)


@router.post("/", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: CustomerCreate, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)
):
    data = payload.model_dump()
    data["country"] = data.get("country") or DEFAULT_COUNTRY
    customer = Customer(**data)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@router.put("/{customer_id}", response_model=CustomerRead)
async def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    customer = _get_customer(db, customer_id)
    data = payload.model_dump()
    data["country"] = data.get("country") or DEFAULT_COUNTRY
    for field, value in data.items():
        setattr(customer, field, value)
    db.commit()
    db.refresh(customer)
    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: int, db: Session = Depends(get_db), current_user: str = Depends(get_current_user)):
    customer = _get_customer(db, customer_id)
    invoice_count = db.query(func.count(Invoice.id)).filter(Invoice.customer_id == customer_id).scalar() or 0
    if invoice_count > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete customer with existing invoices ({invoice_count})",
        )
    db.delete(customer)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
