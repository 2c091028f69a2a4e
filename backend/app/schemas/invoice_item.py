"""Invoice item schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InvoiceItemBase(BaseModel):
    description: str
    unit: str = "kom"
    quantity: Decimal = Field(ge=0)
    price: Decimal
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class InvoiceItemCreate(InvoiceItemBase):
    pass


class InvoiceItemRead(InvoiceItemBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_id: int
    total: Optional[Decimal] = None
    created_at: datetime
