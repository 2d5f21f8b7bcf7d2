"""Shared API dependencies."""

from collections.abc import AsyncGenerator

from storefront.catalog.service import CatalogService
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import async_session_factory


async def get_catalog_service() -> AsyncGenerator[CatalogService, None]:
    """Get a catalog service for the configured backend.

    With the database backend, the session is committed after the request
    and rolled back on error.

    Yields:
        CatalogService for the request.
    """
    if settings.catalog_backend != "database":
        yield CatalogService.in_memory()
        return

    async with async_session_factory() as session:
        try:
            yield CatalogService.for_session(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
