import enum

from sqlalchemy import Column, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from invoiceai.database import Base
from invoiceai.models.types import UTCDateTime, UUIDString, generate_uuid, utcnow


class UserRole(str, enum.Enum):
    member = "member"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(UUIDString, primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    # Null until the user is provisioned into a tenant
    tenant_id = Column(UUIDString, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.member.value)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    tenant = relationship("Tenant", back_populates="users")

    __table_args__ = (Index("idx_user_tenant", "tenant_id"),)
