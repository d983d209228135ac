import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from invoiceai import __version__
from invoiceai.config import settings
import invoiceai.models  # noqa: F401  registers tables on Base.metadata
from invoiceai.database import AsyncSessionLocal, Base, engine
from invoiceai.exception_handlers import register_exception_handlers
from invoiceai.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from invoiceai.routes import admin, auth, companies, dashboard, health, invoices
from invoiceai.services.plan_service import seed_plans

setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant invoicing backend with AI invoice generation",
        debug=settings.debug,
        version=__version__,
    )

    # Added last runs first: CORS, then logging, then the session cookie
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        max_age=settings.session_max_age_seconds,
        https_only=settings.environment == "production",
    )
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router, prefix="/api")
    app.include_router(invoices.router, prefix="/api")
    app.include_router(companies.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting %s %s (%s)", settings.app_name, __version__, settings.environment)
        if settings.debug:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created (if not existing).")
        async with AsyncSessionLocal() as db:
            await seed_plans(db)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down the application...")
        await engine.dispose()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("invoiceai.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
