"""Administrator routes spanning all tenants."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.auth import require_admin
from invoiceai.database import get_db
from invoiceai.principal import TenantScope
from invoiceai.schemas.auth import UserResponse
from invoiceai.schemas.dashboard import ActivityLogResponse, TenantAssignment, TenantMetricsResponse
from invoiceai.services import admin_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/tenants", response_model=list[TenantMetricsResponse])
async def list_tenant_metrics(
    scope: TenantScope = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    metrics = await admin_service.get_tenant_metrics(db)
    return [TenantMetricsResponse(**row) for row in metrics]


@router.get("/activity", response_model=list[ActivityLogResponse])
async def list_activity(
    action: Optional[str] = Query(None, description='Exact action, or "all"'),
    scope: TenantScope = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    entries = await admin_service.get_recent_activity(db, action=action)
    return [ActivityLogResponse(**entry) for entry in entries]


@router.patch("/users/{user_id}/tenant", response_model=UserResponse)
async def assign_user_tenant(
    user_id: str,
    payload: TenantAssignment,
    scope: TenantScope = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await admin_service.reassign_user_tenant(scope, user_id, payload.tenant_id, db)
    return UserResponse.model_validate(user)
