"""Company (billing identity) CRUD, one company per tenant."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.exceptions import CompanyNotFoundError, ValidationError
from invoiceai.models.company import Company
from invoiceai.models.types import utcnow
from invoiceai.principal import TenantScope
from invoiceai.utils.activity_log import log_activity

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "name",
    "address",
    "city",
    "state",
    "postal_code",
    "country",
    "tax_number",
    "email",
    "phone",
    "logo_url",
}


async def get_company(tenant_id: str, db: AsyncSession) -> Company | None:
    """Return the tenant's company, or None if it has none."""
    result = await db.execute(select(Company).where(Company.tenant_id == tenant_id))
    return result.scalars().first()


async def create_company(scope: TenantScope, fields: dict[str, Any], db: AsyncSession) -> Company:
    """Create the tenant's company; a tenant may only have one."""
    if await get_company(scope.tenant_id, db) is not None:
        raise ValidationError("Company already exists")

    company = Company(tenant_id=scope.tenant_id, **{k: v for k, v in fields.items() if k in UPDATABLE_FIELDS})
    db.add(company)
    await db.commit()
    logger.info("Company created: id=%s tenant=%s", company.id, scope.tenant_id)
    return company


async def update_company(scope: TenantScope, company_id: str, updates: dict[str, Any], db: AsyncSession) -> Company:
    """
    Apply a partial update to the caller's company.

    A company id that is not the caller tenant's company is reported as not
    found rather than forbidden.
    """
    company = await get_company(scope.tenant_id, db)
    if company is None or company.id != company_id:
        raise CompanyNotFoundError(company_id)

    for field, value in updates.items():
        if field in UPDATABLE_FIELDS:
            setattr(company, field, value)
    company.updated_at = utcnow()

    await log_activity(
        db,
        tenant_id=scope.tenant_id,
        user_id=scope.user_id,
        action="company_updated",
        entity_type="company",
        entity_id=company.id,
    )
    await db.commit()
    return company
