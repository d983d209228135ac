from .activity_log import ActivityLog
from .company import Company
from .invoice import Invoice, InvoiceItem, InvoiceStatus
from .plan import Plan, PlanTier, Subscription, SubscriptionStatus
from .tenant import Tenant
from .user import User, UserRole

__all__ = [
    "ActivityLog",
    "Company",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "Plan",
    "PlanTier",
    "Subscription",
    "SubscriptionStatus",
    "Tenant",
    "User",
    "UserRole",
]
