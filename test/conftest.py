"""
Pytest configuration and fixtures for InvoiceAI tests
"""

import os
from collections.abc import AsyncGenerator

# Settings are read at import time, so the environment must be in place first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["OPENAI_API_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["IDENTITY_PROVIDER_SECRET"] = "test-identity-secret"
os.environ["LOG_JSON"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

import invoiceai.models  # noqa: E402, F401
from invoiceai.database import AsyncSessionLocal, Base, engine  # noqa: E402
from invoiceai.models.company import Company  # noqa: E402
from invoiceai.models.tenant import Tenant  # noqa: E402
from invoiceai.models.user import User, UserRole  # noqa: E402
from invoiceai.principal import TenantScope  # noqa: E402
from invoiceai.services.plan_service import seed_plans  # noqa: E402


@pytest.fixture(scope="function")
async def setup_test_database():
    """Fresh schema for every test that touches the database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="function")
async def test_db(setup_test_database) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def seeded_plans(test_db: AsyncSession) -> int:
    return await seed_plans(test_db)


async def create_tenant_member(
    db: AsyncSession,
    tenant_name: str,
    email: str,
    role: UserRole = UserRole.member,
    company_name: str | None = None,
) -> TenantScope:
    """Create a tenant with one user (and a company) and return the user's scope."""
    tenant = Tenant(name=tenant_name)
    db.add(tenant)
    await db.flush()

    user = User(email=email, first_name=email.split("@")[0].title(), tenant_id=tenant.id, role=role.value)
    db.add(user)
    db.add(Company(tenant_id=tenant.id, name=company_name or tenant_name))
    await db.commit()

    return TenantScope(tenant_id=tenant.id, user_id=user.id, role=user.role)


@pytest.fixture
async def scope_a(test_db: AsyncSession) -> TenantScope:
    """Member of tenant A."""
    return await create_tenant_member(test_db, "Acme Design", "alice@acme.test", company_name="Acme Design Ltd")


@pytest.fixture
async def scope_b(test_db: AsyncSession) -> TenantScope:
    """Member of tenant B."""
    return await create_tenant_member(test_db, "Bolt Studio", "bob@bolt.test")


@pytest.fixture
def app(setup_test_database):
    from invoiceai.main import create_app

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Test client without startup hooks; the schema comes from setup_test_database."""
    return TestClient(app)
