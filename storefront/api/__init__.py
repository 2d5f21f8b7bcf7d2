"""API layer module.

Contains FastAPI routers, request/response schemas and middleware.
"""

from storefront.api.facets import router as facets_router
from storefront.api.health import router as health_router
from storefront.api.variants import router as variants_router

__all__ = [
    "facets_router",
    "health_router",
    "variants_router",
]
