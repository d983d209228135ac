from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from invoiceai.config import settings
import logging

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    # SQLite (tests, local dev) has no server-side pool to size
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
        return options

    if settings.environment == "production":
        return {
            "pool_size": 20,
            "max_overflow": 50,
            "pool_timeout": 60,
            "pool_recycle": 1800,
            "pool_pre_ping": True,
        }

    return {
        "echo": settings.debug,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
    }


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db():
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await db.rollback()
            raise
