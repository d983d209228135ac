"""
Tenant model.

Each Tenant is the isolation boundary for one customer account. Company,
Invoice, ActivityLog, Subscription and User rows hold a tenant_id FK and are
removed together with their tenant.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from invoiceai.database import Base
from invoiceai.models.types import UTCDateTime, UUIDString, generate_uuid, utcnow


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    name = Column(String, nullable=False)
    # Shard hint; always the default, multi-shard routing is not implemented
    shard = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    users = relationship("User", back_populates="tenant", passive_deletes=True)
    company = relationship("Company", back_populates="tenant", uselist=False, cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="tenant", cascade="all, delete-orphan")
    activity_logs = relationship("ActivityLog", back_populates="tenant", cascade="all, delete-orphan")
    subscription = relationship("Subscription", back_populates="tenant", uselist=False, cascade="all, delete-orphan")
