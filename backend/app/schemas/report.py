"""KPO income book report schemas."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class KpoEntry(BaseModel):
    ordinal: int
    invoice_id: int
    invoice_number: str
    invoice_date: date
    customer_id: int
    customer_name: Optional[str] = None
    currency: str
    total_rsd: Decimal
    status: str


class KpoBook(BaseModel):
    from_date: date
    to_date: date
    entries: List[KpoEntry]
    count: int
    total_income: Decimal
