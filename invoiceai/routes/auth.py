"""Sign-in routes for the email session and the hosted identity provider."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.auth import end_session, get_principal, require_principal, start_session, verify_hosted_token
from invoiceai.database import get_db
from invoiceai.exceptions import AuthenticationError
from invoiceai.principal import EmailSession, HostedSession, Principal
from invoiceai.schemas.auth import (
    EmailLoginRequest,
    HostedLoginRequest,
    MessageResponse,
    UserEnvelope,
    UserResponse,
)
from invoiceai.services import tenant_service
from invoiceai.utils.activity_log import log_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


async def _record_login(user, method: str, db: AsyncSession) -> None:
    await log_activity(
        db,
        tenant_id=user.tenant_id,
        user_id=user.id,
        action="user_login",
        entity_type="user",
        entity_id=user.id,
        metadata={"method": method},
    )
    await db.commit()


@router.post("/login", response_model=UserEnvelope)
async def login(payload: EmailLoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    """Direct email sign-in. Creates the user and their tenant on first login."""
    user = await tenant_service.login_with_email(payload.email, db)
    start_session(request, EmailSession(user_id=user.id, email=user.email))
    await _record_login(user, "email", db)
    logger.info("User %s signed in with email", user.id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/hosted", response_model=UserEnvelope)
async def hosted_login(payload: HostedLoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    """Exchange an identity-provider token for a session."""
    claims = verify_hosted_token(payload.token)
    user = await tenant_service.upsert_hosted_user(claims, db)
    start_session(request, HostedSession(user_id=user.id, email=user.email))
    await _record_login(user, "hosted", db)
    logger.info("User %s signed in through the identity provider", user.id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, principal: Optional[Principal] = Depends(get_principal)):
    end_session(request)
    if principal is not None:
        logger.info("User %s signed out", principal.user_id)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserEnvelope)
async def me(principal: Principal = Depends(require_principal), db: AsyncSession = Depends(get_db)):
    user = await tenant_service.get_user(principal.user_id, db)
    if user is None:
        raise AuthenticationError("Not authenticated")
    return UserEnvelope(user=UserResponse.model_validate(user))
