from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BankAccountCreate(BaseModel):
    account_name: str
    iban: str
    swift: Optional[str] = None
    bank_name: Optional[str] = None
    is_default: bool = False


class BankAccountRead(BankAccountCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
