"""Company (billing identity) routes for the caller's tenant."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from invoiceai.auth import get_tenant_scope
from invoiceai.database import get_db
from invoiceai.exceptions import CompanyNotFoundError
from invoiceai.principal import TenantScope
from invoiceai.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from invoiceai.services import company_service

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/current", response_model=CompanyResponse)
async def get_current_company(scope: TenantScope = Depends(get_tenant_scope), db: AsyncSession = Depends(get_db)):
    company = await company_service.get_company(scope.tenant_id, db)
    if company is None:
        raise CompanyNotFoundError()
    return CompanyResponse.model_validate(company)


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    payload: CompanyCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: AsyncSession = Depends(get_db),
):
    company = await company_service.create_company(scope, payload.model_dump(exclude_unset=True), db)
    return CompanyResponse.model_validate(company)


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    payload: CompanyUpdate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: AsyncSession = Depends(get_db),
):
    company = await company_service.update_company(scope, company_id, payload.model_dump(exclude_unset=True), db)
    return CompanyResponse.model_validate(company)
