"""Invoice routes: listing, detail, AI generation, status changes and sending."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.auth import get_tenant_scope
from invoiceai.database import get_db
from invoiceai.principal import TenantScope
from invoiceai.schemas.invoice import (
    GenerateInvoiceRequest,
    GenerateInvoiceResponse,
    InvoiceDetailResponse,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceStatusUpdate,
    SendInvoiceResponse,
)
from invoiceai.services import invoice_store
from invoiceai.services.generation_service import InvoiceGenerationService
from invoiceai.services.lifecycle_service import InvoiceLifecycleService

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_generation_service(db: AsyncSession = Depends(get_db)) -> InvoiceGenerationService:
    return InvoiceGenerationService(db)


def get_lifecycle_service(db: AsyncSession = Depends(get_db)) -> InvoiceLifecycleService:
    return InvoiceLifecycleService(db)


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    status: Optional[str] = Query(None, description='Exact status, or "all"'),
    search: Optional[str] = Query(None, description="Substring of the client name"),
    scope: TenantScope = Depends(get_tenant_scope),
    db: AsyncSession = Depends(get_db),
):
    invoices = await invoice_store.list_invoices(scope.tenant_id, db, status=status, search=search)
    return [InvoiceResponse.model_validate(invoice) for invoice in invoices]


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
async def get_invoice(
    invoice_id: str,
    scope: TenantScope = Depends(get_tenant_scope),
    service: InvoiceLifecycleService = Depends(get_lifecycle_service),
    db: AsyncSession = Depends(get_db),
):
    invoice = await service.get_owned_invoice(scope, invoice_id)
    items = await invoice_store.list_invoice_items(invoice.id, db)
    return InvoiceDetailResponse(
        **InvoiceResponse.model_validate(invoice).model_dump(),
        items=[InvoiceItemResponse.model_validate(item) for item in items],
    )


@router.post("/generate", response_model=GenerateInvoiceResponse)
async def generate_invoice(
    request: GenerateInvoiceRequest,
    scope: TenantScope = Depends(get_tenant_scope),
    service: InvoiceGenerationService = Depends(get_generation_service),
):
    invoice, items = await service.generate(
        scope,
        request.description,
        client_name=request.client_name,
        client_email=request.client_email,
    )
    return GenerateInvoiceResponse(
        invoice=InvoiceResponse.model_validate(invoice),
        items=[InvoiceItemResponse.model_validate(item) for item in items],
    )


@router.patch("/{invoice_id}/status", response_model=InvoiceResponse)
async def update_invoice_status(
    invoice_id: str,
    update: InvoiceStatusUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
    service: InvoiceLifecycleService = Depends(get_lifecycle_service),
):
    invoice = await service.set_status(scope, invoice_id, update.status)
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/send", response_model=SendInvoiceResponse)
async def send_invoice(
    invoice_id: str,
    scope: TenantScope = Depends(get_tenant_scope),
    service: InvoiceLifecycleService = Depends(get_lifecycle_service),
):
    invoice = await service.send(scope, invoice_id)
    return SendInvoiceResponse(success=True, invoice=InvoiceResponse.model_validate(invoice))
