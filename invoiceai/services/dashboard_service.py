"""Dashboard service for per-tenant invoice KPIs."""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.models.invoice import Invoice, InvoiceStatus
from invoiceai.utils.money import currency_symbol, format_money, round_money, to_decimal

REVENUE_CURRENCY = "GBP"


def empty_stats() -> dict:
    """Stats shown to callers without a tenant."""
    return {
        "total_invoices": 0,
        "sent_invoices": 0,
        "paid_invoices": 0,
        "total_revenue": f"{currency_symbol(REVENUE_CURRENCY)}0",
    }


async def get_invoice_stats(tenant_id: str, db: AsyncSession) -> dict:
    """
    Invoice counts and paid revenue for one tenant.

    Paid invoices also count as sent. Revenue is the sum of paid totals,
    formatted with a pound sign regardless of invoice currency.
    """
    paid = Invoice.status == InvoiceStatus.paid.value
    sent_or_paid = Invoice.status.in_([InvoiceStatus.sent.value, InvoiceStatus.paid.value])

    # Single query with conditional aggregation
    result = await db.execute(
        select(
            func.count(Invoice.id).label("total"),
            func.count(Invoice.id).filter(sent_or_paid).label("sent"),
            func.count(Invoice.id).filter(paid).label("paid"),
            func.sum(Invoice.total).filter(paid).label("revenue"),
        ).where(Invoice.tenant_id == tenant_id)
    )
    row = result.one()

    revenue = round_money(to_decimal(row.revenue) if row.revenue is not None else Decimal("0"))
    return {
        "total_invoices": row.total or 0,
        "sent_invoices": row.sent or 0,
        "paid_invoices": row.paid or 0,
        "total_revenue": f"{currency_symbol(REVENUE_CURRENCY)}{format_money(revenue)}",
    }
