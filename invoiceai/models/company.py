from sqlalchemy import Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from invoiceai.database import Base
from invoiceai.models.types import UTCDateTime, UUIDString, generate_uuid, utcnow


class Company(Base):
    """Billing identity shown on a tenant's invoices. At most one per tenant."""

    __tablename__ = "companies"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    tenant_id = Column(UUIDString, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = Column(String, nullable=False)
    address = Column(Text, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    country = Column(String, nullable=True)
    tax_number = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    tenant = relationship("Tenant", back_populates="company")
