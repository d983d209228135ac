"""
Authentication dependencies.

Principals live in the signed session cookie. ``get_tenant_scope`` re-reads
the user row on every request, so a tenant re-assignment or role change
takes effect on the next call.
"""

import logging
from typing import Any, Optional

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.config import settings
from invoiceai.database import get_db
from invoiceai.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError, NoTenantError
from invoiceai.principal import (
    PRINCIPAL_SESSION_KEY,
    Principal,
    TenantScope,
    principal_from_session,
    principal_to_session,
)
from invoiceai.services.tenant_service import resolve_scope

logger = logging.getLogger(__name__)

HOSTED_TOKEN_ALGORITHM = "HS256"


def verify_hosted_token(token: str) -> dict[str, Any]:
    """
    Verify an identity-provider token and return its claims.

    Tokens are HS256 JWTs signed with IDENTITY_PROVIDER_SECRET. The audience
    is checked only when IDENTITY_PROVIDER_AUDIENCE is set.
    """
    if not settings.identity_provider_secret:
        logger.warning("Hosted sign-in attempted but IDENTITY_PROVIDER_SECRET is not set")
        raise AuthenticationError("Hosted sign-in is not configured")

    options = {"verify_aud": bool(settings.identity_provider_audience)}
    try:
        claims = jwt.decode(
            token,
            settings.identity_provider_secret,
            algorithms=[HOSTED_TOKEN_ALGORITHM],
            audience=settings.identity_provider_audience,
            options=options,
        )
    except ExpiredSignatureError:
        logger.warning("Hosted token expired")
        raise InvalidTokenError("Token has expired")
    except JWTError as e:
        logger.warning(f"Hosted token verification failed: {str(e)}")
        raise InvalidTokenError()

    if not claims.get("sub"):
        logger.warning("Hosted token is missing 'sub' claim")
        raise InvalidTokenError("Token does not contain 'sub' field")
    return claims


def start_session(request: Request, principal: Principal) -> None:
    request.session[PRINCIPAL_SESSION_KEY] = principal_to_session(principal)


def end_session(request: Request) -> None:
    request.session.clear()


def get_principal(request: Request) -> Optional[Principal]:
    """Principal from the session cookie, or None for anonymous callers."""
    return principal_from_session(request.session.get(PRINCIPAL_SESSION_KEY))


def require_principal(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    if principal is None:
        raise AuthenticationError()
    return principal


async def get_tenant_scope(
    principal: Optional[Principal] = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> TenantScope:
    return await resolve_scope(principal, db)


async def get_optional_tenant_scope(
    principal: Optional[Principal] = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> Optional[TenantScope]:
    """Scope for the caller, or None when anonymous or not yet in a tenant."""
    if principal is None:
        return None
    try:
        return await resolve_scope(principal, db)
    except (AuthenticationError, NoTenantError):
        return None


async def require_admin(scope: TenantScope = Depends(get_tenant_scope)) -> TenantScope:
    if not scope.is_admin:
        logger.warning("User %s denied admin access", scope.user_id)
        raise AuthorizationError("Forbidden: Admin access required")
    return scope
