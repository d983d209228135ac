from datetime import datetime
from typing import Optional

from pydantic import Field

from invoiceai.schemas.base import CamelModel


class CompanyBase(CamelModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    tax_number: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None


class CompanyCreate(CompanyBase):
    name: str = Field(..., min_length=1, title="Company Name")


class CompanyUpdate(CompanyBase):
    name: Optional[str] = Field(None, min_length=1, title="Company Name")


class CompanyResponse(CompanyBase):
    id: str
    tenant_id: str
    name: str
    created_at: datetime
    updated_at: datetime
