import enum
from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from invoiceai.database import Base
from invoiceai.models.types import UTCDateTime, UUIDString, generate_uuid, utcnow


class InvoiceStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"
    paid = "paid"
    cancelled = "cancelled"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    tenant_id = Column(UUIDString, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUIDString, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    invoice_number = Column(String, nullable=False)
    client_name = Column(String, nullable=False)
    client_email = Column(String, nullable=True)
    client_address = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=InvoiceStatus.draft.value)
    currency = Column(String(3), nullable=False, default="GBP")
    subtotal = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    tax = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    notes = Column(Text, nullable=True)
    due_date = Column(UTCDateTime, nullable=True)
    issued_date = Column(UTCDateTime, nullable=False, default=utcnow)
    sent_at = Column(UTCDateTime, nullable=True)
    paid_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    tenant = relationship("Tenant", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position",
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "invoice_number", name="uq_invoice_tenant_number"),
        Index("idx_invoice_tenant_created", "tenant_id", "created_at"),
        Index("idx_invoice_tenant_status", "tenant_id", "status"),
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    invoice_id = Column(UUIDString, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    # Preserves the order in which the model listed the line items
    position = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False, default=Decimal("1.00"))
    unit_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    invoice = relationship("Invoice", back_populates="items")
