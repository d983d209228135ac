"""
Authenticated principals and the tenant scope they resolve to.

A principal comes from one of two sign-in modes: a hosted identity-provider
session or a direct email session. Both are normalized into a TenantScope
before any invoice operation runs; core services only ever see the scope.
"""

from dataclasses import dataclass
from typing import Any, Union

from invoiceai.models.user import UserRole

PRINCIPAL_SESSION_KEY = "principal"


@dataclass(frozen=True)
class HostedSession:
    """Principal signed in through the hosted identity provider (user id is the IdP subject)."""

    user_id: str
    email: str | None = None

    kind = "hosted"


@dataclass(frozen=True)
class EmailSession:
    """Principal signed in with the direct email login."""

    user_id: str
    email: str

    kind = "email"


Principal = Union[HostedSession, EmailSession]


@dataclass(frozen=True)
class TenantScope:
    """Resolved ``{tenant_id, user_id, role}`` passed explicitly to every tenant-scoped operation."""

    tenant_id: str
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin.value


def principal_to_session(principal: Principal) -> dict[str, Any]:
    return {"kind": principal.kind, "user_id": principal.user_id, "email": principal.email}


def principal_from_session(data: dict[str, Any] | None) -> Principal | None:
    """Rebuild a principal from session data; unknown or incomplete payloads yield None."""
    if not data or not data.get("user_id"):
        return None
    kind = data.get("kind")
    if kind == EmailSession.kind and data.get("email"):
        return EmailSession(user_id=data["user_id"], email=data["email"])
    if kind == HostedSession.kind:
        return HostedSession(user_id=data["user_id"], email=data.get("email"))
    return None
