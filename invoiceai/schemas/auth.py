from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from invoiceai.schemas.base import CamelModel


class EmailLoginRequest(CamelModel):
    email: EmailStr = Field(..., title="Email", description="Address to sign in with.")


class HostedLoginRequest(CamelModel):
    token: str = Field(..., min_length=1, title="Token", description="Identity-provider token (HS256 JWT).")


class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    tenant_id: Optional[str] = None
    role: str
    created_at: datetime


class UserEnvelope(CamelModel):
    user: UserResponse


class MessageResponse(CamelModel):
    message: str
