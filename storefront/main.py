"""Storefront API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.facets import router as facets_router
from storefront.api.health import router as health_router
from storefront.api.middleware import setup_middleware
from storefront.api.variants import router as variants_router
from storefront.catalog.service import seed_database_catalog, seed_memory_catalog
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import async_session_factory, init_models
from storefront.infrastructure.logging import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting Storefront API",
        version=settings.api_version,
        debug=settings.debug,
        backend=settings.catalog_backend,
    )

    if settings.catalog_backend == "database":
        await init_models()
        if settings.seed_demo_catalog:
            async with async_session_factory() as session:
                await seed_database_catalog(session)
                await session.commit()
    elif settings.seed_demo_catalog:
        seed_memory_catalog()

    yield

    logger.info("Shutting down Storefront API")


app = FastAPI(
    title="Storefront API",
    description="Faceted catalog filtering and product variant generation",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(facets_router)
app.include_router(variants_router)
