from datetime import datetime
from typing import Optional

from pydantic import Field

from invoiceai.models.invoice import InvoiceStatus
from invoiceai.schemas.base import CamelModel, Money


class GenerateInvoiceRequest(CamelModel):
    description: str = Field(..., title="Description", description="Free-text description of the work to invoice.")
    client_name: Optional[str] = Field(None, title="Client Name", description="Hint for the client's name.")
    client_email: Optional[str] = Field(None, title="Client Email", description="Hint for the client's email.")

    model_config = {
        "json_schema_extra": {
            "example": {
                "description": "Built a website for £500 and provided 2 hours training at £50/hr",
                "clientName": "Acme Ltd",
                "clientEmail": "accounts@acme.test",
            }
        }
    }


class InvoiceStatusUpdate(CamelModel):
    status: InvoiceStatus = Field(..., title="Status", description="Target status of the invoice.")


class InvoiceItemResponse(CamelModel):
    id: str
    invoice_id: str
    description: str
    quantity: Money
    unit_price: Money
    total: Money
    created_at: datetime


class InvoiceResponse(CamelModel):
    id: str = Field(..., title="Invoice ID")
    tenant_id: str
    user_id: str
    invoice_number: str = Field(..., title="Invoice Number", description="Sequential number within the tenant.")
    client_name: str
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    status: InvoiceStatus
    currency: str
    subtotal: Money
    tax: Money
    total: Money
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    issued_date: datetime
    sent_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class InvoiceDetailResponse(InvoiceResponse):
    items: list[InvoiceItemResponse] = []


class GenerateInvoiceResponse(CamelModel):
    invoice: InvoiceResponse
    items: list[InvoiceItemResponse]


class SendInvoiceResponse(CamelModel):
    success: bool
    invoice: InvoiceResponse
