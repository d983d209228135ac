import enum
from decimal import Decimal

from sqlalchemy import JSON, Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from invoiceai.database import Base
from invoiceai.models.types import UTCDateTime, UUIDString, generate_uuid, utcnow


class PlanTier(str, enum.Enum):
    free = "free"
    starter = "starter"
    professional = "professional"
    enterprise = "enterprise"


class SubscriptionStatus(str, enum.Enum):
    active = "active"
    cancelled = "cancelled"
    past_due = "past_due"
    trialing = "trialing"


class Plan(Base):
    """Reference data describing tier limits. Read-only for the invoice pipeline."""

    __tablename__ = "plans"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False, unique=True)
    tier = Column(String(20), nullable=False)
    invoice_limit = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    stripe_price_id = Column(String, nullable=True)
    features = Column(JSON, nullable=True, default=list)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    tenant_id = Column(UUIDString, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, unique=True)
    plan_id = Column(UUIDString, ForeignKey("plans.id"), nullable=False)
    status = Column(String(20), nullable=False, default=SubscriptionStatus.trialing.value)
    stripe_subscription_id = Column(String, nullable=True)
    current_period_start = Column(UTCDateTime, nullable=True)
    current_period_end = Column(UTCDateTime, nullable=True)
    cancel_at_period_end = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    tenant = relationship("Tenant", back_populates="subscription")
    plan = relationship("Plan", lazy="joined")
