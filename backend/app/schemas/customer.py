"""Customer schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


class CustomerBase(BaseModel):
    name: str
    company: Optional[str] = None
    address: str
    city: str
    country: Optional[str] = None
    pib: Optional[str] = None
    mb: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name", "address", "city")
    @classmethod
    def _required_text(cls, value: str, info) -> str:
        if not value or not value.strip():
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return value.strip()

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(CustomerBase):
    pass


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    company: Optional[str] = None
    address: str
    city: str
    country: str
    pib: Optional[str] = None
    mb: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime
