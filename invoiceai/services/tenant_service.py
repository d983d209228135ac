"""
Tenant Service

Tenant directory and provisioning. Resolves an authenticated principal to the
single tenant it may act in, and creates the tenant, company and starting
subscription the first time a principal without a tenant signs in.
All functions accept an injected AsyncSession.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.exceptions import (
    AuthenticationError,
    DuplicateResourceError,
    NoTenantError,
    TenantNotFoundError,
    UserNotFoundError,
)
from invoiceai.models.company import Company
from invoiceai.models.plan import Subscription, SubscriptionStatus
from invoiceai.models.tenant import Tenant
from invoiceai.models.user import User, UserRole
from invoiceai.principal import Principal, TenantScope
from invoiceai.services.plan_service import get_plan_by_name

logger = logging.getLogger(__name__)

STARTING_PLAN_NAME = "Free"


async def create_tenant(name: str, db: AsyncSession) -> Tenant:
    """Create a new tenant. Flushes only; the caller commits."""
    tenant = Tenant(name=name)
    db.add(tenant)
    await db.flush()
    logger.info("Tenant created: id=%s name=%s", tenant.id, tenant.name)
    return tenant


async def get_tenant_by_id(tenant_id: str, db: AsyncSession) -> Tenant | None:
    """Return a Tenant by primary key, or None if not found."""
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    return result.scalars().first()


async def list_tenants(db: AsyncSession) -> list[Tenant]:
    """Return all tenants, newest first, with their subscription and plan loaded."""
    result = await db.execute(
        select(Tenant)
        .options(selectinload(Tenant.subscription).joinedload(Subscription.plan))
        .order_by(Tenant.created_at.desc())
    )
    return list(result.scalars().all())


async def get_user(user_id: str, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalars().first()


async def get_user_by_email(email: str, db: AsyncSession) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


def _default_tenant_name(user: User) -> str:
    owner = user.first_name or (user.email.split("@")[0] if user.email else None) or "User"
    return f"{owner}'s Company"


async def provision_tenant(user: User, db: AsyncSession) -> Tenant:
    """
    Give a tenant-less user their own tenant.

    Creates the tenant, assigns it to the user, creates the tenant's company
    with the same name, and starts a trialing subscription on the Free plan
    when that plan exists. Commits once at the end.
    """
    tenant = await create_tenant(_default_tenant_name(user), db)
    user.tenant_id = tenant.id

    db.add(Company(tenant_id=tenant.id, name=tenant.name))

    free_plan = await get_plan_by_name(STARTING_PLAN_NAME, db)
    if free_plan is not None:
        db.add(
            Subscription(
                tenant_id=tenant.id,
                plan_id=free_plan.id,
                status=SubscriptionStatus.trialing.value,
            )
        )
    else:
        logger.warning("Plan %r not seeded; tenant %s provisioned without a subscription", STARTING_PLAN_NAME, tenant.id)

    await db.commit()
    logger.info("Tenant provisioned: tenant=%s user=%s", tenant.id, user.id)
    return tenant


async def login_with_email(email: str, db: AsyncSession) -> User:
    """
    Find or create the user for a direct email login.

    New users get role ``admin`` when the address contains "admin", otherwise
    ``member``, and are provisioned into a fresh tenant.
    """
    user = await get_user_by_email(email, db)
    if user is None:
        role = UserRole.admin if "admin" in email else UserRole.member
        user = User(email=email, role=role.value)
        db.add(user)
        await db.flush()
        logger.info("User created via email login: id=%s", user.id)

    if user.tenant_id is None:
        await provision_tenant(user, db)
    else:
        await db.commit()
    return user


async def upsert_hosted_user(claims: dict[str, Any], db: AsyncSession) -> User:
    """
    Create or refresh the user behind a hosted identity-provider token.

    The IdP subject is the user id. Profile fields are overwritten from the
    claims; role and tenant assignment are never taken from the token. An
    email already owned by a different user raises DuplicateResourceError.
    """
    user = await get_user(claims["sub"], db)
    if user is None:
        user = User(id=claims["sub"], role=UserRole.member.value)
        db.add(user)

    user.email = claims.get("email") or user.email
    user.first_name = claims.get("first_name")
    user.last_name = claims.get("last_name")
    user.profile_image_url = claims.get("profile_image_url")
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Hosted subject %s presented an email owned by another user", claims["sub"])
        raise DuplicateResourceError("Email address is already registered to another account") from e

    if user.tenant_id is None:
        await provision_tenant(user, db)
    else:
        await db.commit()
    return user


async def assign_user_tenant(user_id: str, tenant_id: str, db: AsyncSession) -> User:
    """
    Administrative re-assignment of a user's tenant.

    This is the only path that changes a tenant assignment after first
    provisioning.
    """
    user = await get_user(user_id, db)
    if user is None:
        raise UserNotFoundError(user_id)
    tenant = await get_tenant_by_id(tenant_id, db)
    if tenant is None:
        raise TenantNotFoundError(tenant_id)

    previous = user.tenant_id
    user.tenant_id = tenant.id
    await db.flush()
    logger.info("User %s reassigned from tenant %s to %s", user.id, previous, tenant.id)
    return user


async def resolve_scope(principal: Principal | None, db: AsyncSession) -> TenantScope:
    """
    Resolve a principal to ``{tenant_id, user_id, role}``.

    Raises AuthenticationError when there is no principal (or its user no
    longer exists) and NoTenantError when the user has not been assigned a
    tenant. NoTenant is a denial, not a retryable condition.
    """
    if principal is None:
        raise AuthenticationError()

    user = await get_user(principal.user_id, db)
    if user is None:
        logger.warning("Session principal %s has no matching user", principal.user_id)
        raise AuthenticationError()

    if user.tenant_id is None:
        raise NoTenantError()

    return TenantScope(tenant_id=user.tenant_id, user_id=user.id, role=user.role)
