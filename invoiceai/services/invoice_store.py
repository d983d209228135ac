"""
Invoice Store

Async persistence for invoices and their line items. All functions accept an
injected AsyncSession and flush rather than commit, so that callers decide
the transaction boundary.

Lookups by bare id are tenant-agnostic. Every entry point that accepts an
invoice id from a client must compare ``invoice.tenant_id`` with the caller's
tenant before exposing or mutating the record.
"""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.models.invoice import Invoice, InvoiceItem
from invoiceai.models.types import utcnow

logger = logging.getLogger(__name__)

INVOICE_NUMBER_FORMAT = "INV-{:04d}"

UPDATABLE_FIELDS = {
    "client_name",
    "client_email",
    "client_address",
    "status",
    "currency",
    "subtotal",
    "tax",
    "total",
    "notes",
    "due_date",
    "issued_date",
    "sent_at",
    "paid_at",
}


async def list_invoices(
    tenant_id: str,
    db: AsyncSession,
    status: str | None = None,
    search: str | None = None,
) -> list[Invoice]:
    """
    Return a tenant's invoices, newest first.

    ``status`` filters to an exact match unless it is empty or "all";
    ``search`` is a substring match against the client name.
    """
    query = select(Invoice).where(Invoice.tenant_id == tenant_id)
    if status and status != "all":
        query = query.where(Invoice.status == status)
    if search:
        query = query.where(Invoice.client_name.contains(search, autoescape=True))
    query = query.order_by(Invoice.created_at.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def count_invoices(tenant_id: str, db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Invoice.id)).where(Invoice.tenant_id == tenant_id))
    return result.scalar_one()


async def get_invoice(invoice_id: str, db: AsyncSession) -> Invoice | None:
    """Return an Invoice by primary key, or None if not found."""
    result = await db.execute(select(Invoice).where(Invoice.id == invoice_id))
    return result.scalars().first()


async def create_invoice(db: AsyncSession, **fields: Any) -> Invoice:
    """Insert an invoice and flush so the server-assigned id is available."""
    invoice = Invoice(**fields)
    db.add(invoice)
    await db.flush()
    logger.info("Invoice created: id=%s number=%s tenant=%s", invoice.id, invoice.invoice_number, invoice.tenant_id)
    return invoice


async def update_invoice(invoice_id: str, updates: dict[str, Any], db: AsyncSession) -> Invoice | None:
    """
    Merge a partial update into an invoice and stamp ``updated_at``.

    Only keys in UPDATABLE_FIELDS are applied. Returns None if the invoice
    does not exist.
    """
    invoice = await get_invoice(invoice_id, db)
    if invoice is None:
        return None
    for field, value in updates.items():
        if field in UPDATABLE_FIELDS:
            setattr(invoice, field, value)
    invoice.updated_at = utcnow()
    await db.flush()
    return invoice


async def list_invoice_items(invoice_id: str, db: AsyncSession) -> list[InvoiceItem]:
    result = await db.execute(
        select(InvoiceItem).where(InvoiceItem.invoice_id == invoice_id).order_by(InvoiceItem.position)
    )
    return list(result.scalars().all())


async def create_invoice_items(
    invoice_id: str,
    items: list[dict[str, Any]],
    db: AsyncSession,
) -> list[InvoiceItem]:
    """Insert a batch of line items for one invoice, preserving their order."""
    rows = [InvoiceItem(invoice_id=invoice_id, position=position, **item) for position, item in enumerate(items)]
    db.add_all(rows)
    await db.flush()
    return rows


async def next_invoice_number(tenant_id: str, db: AsyncSession) -> str:
    """
    Format the next invoice number from the tenant's current invoice count.

    This is a read-then-format with no lock: two concurrent generations for
    the same tenant can compute the same number. The unique constraint on
    (tenant_id, invoice_number) rejects the second insert.
    """
    count = await count_invoices(tenant_id, db)
    return INVOICE_NUMBER_FORMAT.format(count + 1)
