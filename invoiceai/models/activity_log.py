from sqlalchemy import Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from invoiceai.database import Base
from invoiceai.models.types import UTCDateTime, UUIDString, generate_uuid, utcnow


class ActivityLog(Base):
    """Append-only audit record. Rows are never updated or deleted by the application."""

    __tablename__ = "activity_logs"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    tenant_id = Column(UUIDString, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUIDString, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String(255), nullable=True)
    # Use metadata_ as Python attr to avoid shadowing SQLAlchemy Base.metadata
    metadata_ = Column("metadata", Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    tenant = relationship("Tenant", back_populates="activity_logs")
    user = relationship("User", lazy="selectin")

    __table_args__ = (
        Index("idx_activity_tenant_created", "tenant_id", "created_at"),
        Index("idx_activity_tenant_action", "tenant_id", "action"),
    )
