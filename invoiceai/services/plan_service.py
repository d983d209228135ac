"""Plan reference data and tenant subscriptions (read-only for the invoice pipeline)."""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.models.plan import Plan, PlanTier

logger = logging.getLogger(__name__)

DEFAULT_INVOICE_LIMIT = 5

DEFAULT_PLANS = [
    {
        "name": "Free",
        "tier": PlanTier.free.value,
        "invoice_limit": 5,
        "price": Decimal("0"),
        "features": ["5 invoices/month", "AI invoice generation", "PDF downloads", "Email sending"],
    },
    {
        "name": "Starter",
        "tier": PlanTier.starter.value,
        "invoice_limit": 50,
        "price": Decimal("9"),
        "features": ["50 invoices/month", "Everything in Free", "Custom branding", "Priority support"],
    },
    {
        "name": "Professional",
        "tier": PlanTier.professional.value,
        "invoice_limit": 100,
        "price": Decimal("29"),
        "features": ["100 invoices/month", "Everything in Starter", "Advanced analytics", "Multi-user"],
    },
    {
        "name": "Enterprise",
        "tier": PlanTier.enterprise.value,
        "invoice_limit": 999999,
        "price": Decimal("99"),
        "features": ["Unlimited invoices", "Everything in Pro", "API access", "Dedicated support"],
    },
]


async def get_plans(db: AsyncSession) -> list[Plan]:
    result = await db.execute(select(Plan))
    return list(result.scalars().all())


async def get_plan_by_name(name: str, db: AsyncSession) -> Plan | None:
    result = await db.execute(select(Plan).where(Plan.name == name))
    return result.scalars().first()


async def seed_plans(db: AsyncSession) -> int:
    """Insert the default plans when the table is empty. Returns the number inserted."""
    if await get_plans(db):
        logger.info("Plans already seeded")
        return 0

    db.add_all(Plan(**plan) for plan in DEFAULT_PLANS)
    await db.commit()
    logger.info("Seeded %d plans", len(DEFAULT_PLANS))
    return len(DEFAULT_PLANS)
