"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.schemas.invoice_item import InvoiceItemCreate, InvoiceItemRead

InvoiceStatus = Literal["draft", "sent", "paid", "overdue"]


class InvoiceBase(BaseModel):
    invoice_number: str = Field(min_length=1)
    invoice_date: date
    trading_date: date
    customer_id: int
    bank_account_id: Optional[int] = None
    currency: str = Field(default="RSD", min_length=3, max_length=3)
    exchange_rate: Optional[Decimal] = Field(default=None, gt=0)
    payment_deadline: int = 30
    notes: Optional[str] = None
    items: List[InvoiceItemCreate] = []

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()


class InvoiceCreate(InvoiceBase):
    pass


class InvoiceUpdate(InvoiceBase):
    status: Optional[InvoiceStatus] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    invoice_date: date
    trading_date: date
    customer_id: int
    customer_name: Optional[str] = None
    customer_company: Optional[str] = None
    bank_account_id: Optional[int] = None
    currency: str
    exchange_rate: Decimal
    payment_deadline: int
    notes: Optional[str] = None
    total_rsd: Decimal
    status: str
    created_at: datetime
    updated_at: datetime


class InvoiceDetail(InvoiceRead):
    items: List[InvoiceItemRead] = []


class InvoiceTotals(BaseModel):
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal
    total_rsd: Decimal


class InvoiceNumberRead(BaseModel):
    invoice_number: str
