"""Database engine and sessions for the SQLAlchemy catalog backend.

The default URL points at a local SQLite file (aiosqlite driver); set
DATABASE_URL to a ``postgresql+asyncpg://`` URL for PostgreSQL.
"""

from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from storefront.infrastructure.config import settings


def _engine_options(database_url: str) -> dict[str, Any]:
    """Get engine keyword arguments for a database URL."""
    options: dict[str, Any] = {"echo": settings.debug}
    if make_url(database_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Declarative base shared by catalog models and Alembic
Base = declarative_base()


async def init_models(bind: AsyncEngine | None = None) -> None:
    """Create catalog tables that don't exist yet.

    Production databases are migrated with Alembic; this is for local
    runs, the seed script and tests.

    Args:
        bind: Engine to use (defaults to the application engine).
    """
    import storefront.catalog.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

