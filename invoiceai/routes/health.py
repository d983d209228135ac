from fastapi import APIRouter

from invoiceai import __version__
from invoiceai.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health():
    return {"status": "healthy", "app": settings.app_name, "version": __version__}
