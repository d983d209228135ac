from datetime import datetime
from typing import Any, Optional

from invoiceai.schemas.base import CamelModel


class DashboardStatsResponse(CamelModel):
    total_invoices: int
    sent_invoices: int
    paid_invoices: int
    total_revenue: str


class TenantMetricsResponse(CamelModel):
    tenant_id: str
    tenant_name: str
    user_count: int
    plan_name: str
    invoice_count: int
    invoice_limit: int
    last_active: datetime


class ActivityUser(CamelModel):
    email: Optional[str] = None


class ActivityTenant(CamelModel):
    name: str


class ActivityLogResponse(CamelModel):
    id: str
    tenant_id: str
    user_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: datetime
    user: Optional[ActivityUser] = None
    tenant: Optional[ActivityTenant] = None


class TenantAssignment(CamelModel):
    tenant_id: str
