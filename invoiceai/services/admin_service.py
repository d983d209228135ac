"""Cross-tenant views for administrators."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from invoiceai.models.activity_log import ActivityLog
from invoiceai.models.invoice import Invoice
from invoiceai.models.user import User
from invoiceai.principal import TenantScope
from invoiceai.services import tenant_service
from invoiceai.services.plan_service import DEFAULT_INVOICE_LIMIT
from invoiceai.utils.activity_log import ACTIVITY_LOG_LIMIT, decode_metadata, log_activity

logger = logging.getLogger(__name__)


async def get_tenant_metrics(db: AsyncSession) -> list[dict]:
    """
    One row per tenant with user and invoice counts and the current plan.

    Tenants without a subscription are reported on the Free plan limits.
    """
    tenants = await tenant_service.list_tenants(db)

    user_counts_result = await db.execute(
        select(User.tenant_id, func.count(User.id)).where(User.tenant_id.is_not(None)).group_by(User.tenant_id)
    )
    user_counts = {row[0]: row[1] for row in user_counts_result.fetchall()}

    invoice_counts_result = await db.execute(
        select(Invoice.tenant_id, func.count(Invoice.id)).group_by(Invoice.tenant_id)
    )
    invoice_counts = {row[0]: row[1] for row in invoice_counts_result.fetchall()}

    metrics = []
    for tenant in tenants:
        plan = tenant.subscription.plan if tenant.subscription else None
        metrics.append(
            {
                "tenant_id": tenant.id,
                "tenant_name": tenant.name,
                "user_count": user_counts.get(tenant.id, 0),
                "plan_name": plan.name if plan else tenant_service.STARTING_PLAN_NAME,
                "invoice_count": invoice_counts.get(tenant.id, 0),
                "invoice_limit": plan.invoice_limit if plan else DEFAULT_INVOICE_LIMIT,
                "last_active": tenant.updated_at,
            }
        )
    return metrics


async def get_recent_activity(
    db: AsyncSession,
    action: str | None = None,
    limit: int = ACTIVITY_LOG_LIMIT,
) -> list[dict]:
    """Most recent activity across all tenants, with the acting user's email and the tenant name."""
    query = select(ActivityLog).options(selectinload(ActivityLog.tenant))
    if action and action != "all":
        query = query.where(ActivityLog.action == action)
    query = query.order_by(ActivityLog.created_at.desc()).limit(limit)
    result = await db.execute(query)

    return [
        {
            "id": entry.id,
            "tenant_id": entry.tenant_id,
            "user_id": entry.user_id,
            "action": entry.action,
            "entity_type": entry.entity_type,
            "entity_id": entry.entity_id,
            "metadata": decode_metadata(entry),
            "created_at": entry.created_at,
            "user": {"email": entry.user.email} if entry.user else None,
            "tenant": {"name": entry.tenant.name} if entry.tenant else None,
        }
        for entry in result.scalars().all()
    ]


async def reassign_user_tenant(scope: TenantScope, user_id: str, tenant_id: str, db: AsyncSession) -> User:
    """Move a user to another tenant and record it in the target tenant's activity log."""
    user = await tenant_service.get_user(user_id, db)
    previous_tenant_id = user.tenant_id if user else None

    user = await tenant_service.assign_user_tenant(user_id, tenant_id, db)
    await log_activity(
        db,
        tenant_id=tenant_id,
        user_id=scope.user_id,
        action="user_tenant_assigned",
        entity_type="user",
        entity_id=user.id,
        metadata={"previousTenantId": previous_tenant_id, "tenantId": tenant_id},
    )
    await db.commit()
    logger.info("Admin %s assigned user %s to tenant %s", scope.user_id, user.id, tenant_id)
    return user
