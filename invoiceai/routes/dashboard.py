"""Dashboard routes."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.auth import get_optional_tenant_scope
from invoiceai.database import get_db
from invoiceai.principal import TenantScope
from invoiceai.schemas.dashboard import DashboardStatsResponse
from invoiceai.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_stats(
    scope: Optional[TenantScope] = Depends(get_optional_tenant_scope),
    db: AsyncSession = Depends(get_db),
):
    """Invoice KPIs for the caller's tenant; zeros for anonymous callers."""
    if scope is None:
        return DashboardStatsResponse(**dashboard_service.empty_stats())
    stats = await dashboard_service.get_invoice_stats(scope.tenant_id, db)
    return DashboardStatsResponse(**stats)
