from typing import Optional

from pydantic import BaseModel, ConfigDict


class CompanySettingsBase(BaseModel):
    company_name: str
    address: str
    city: str
    pib: str
    mb: str
    iban: Optional[str] = None
    swift: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None


class CompanySettingsUpdate(CompanySettingsBase):
    pass


class CompanySettingsRead(CompanySettingsBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
