"""Facet API endpoints.

Provides:
- POST /catalog/{category_slug}/facets - facets with counts under applied filters
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends

from storefront.api.dependencies import get_catalog_service
from storefront.api.schemas import (
    ErrorResponse,
    FacetSchema,
    FacetsResponse,
    FacetValueSchema,
    FilterSetSchema,
    PriceRangeSchema,
)
from storefront.catalog.facets import FacetResult
from storefront.catalog.service import CatalogService

router = APIRouter(prefix="/catalog", tags=["Catalog"])


def facet_to_schema(facet: FacetResult) -> FacetSchema:
    """Convert FacetResult to FacetSchema."""
    return FacetSchema(
        dimension=facet.dimension,
        label=facet.label,
        kind=facet.kind.value,
        attribute_slug=facet.attribute_slug,
        values=[
            FacetValueSchema(
                name=v.name,
                count=v.count,
                selected=v.selected,
                color_hex=v.color_hex,
            )
            for v in facet.values
        ],
        price_range=PriceRangeSchema(min=facet.price_range.min, max=facet.price_range.max),
        total_matching=facet.total_matching,
    )


@router.post(
    "/{category_slug}/facets",
    response_model=FacetsResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Compute facets",
    description=(
        "Compute filter facets for a category and its subcategories. Each "
        "facet is counted with its own constraint lifted. Use 'all' for the "
        "whole catalog. Unknown categories yield empty facets."
    ),
)
async def compute_facets(
    category_slug: str,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    filters: Annotated[FilterSetSchema | None, Body()] = None,
) -> FacetsResponse:
    """Compute facets for a category.

    Args:
        category_slug: Category slug or "all".
        service: Catalog service.
        filters: Applied filters.

    Returns:
        Facets with counts.
    """
    filters = filters or FilterSetSchema()
    facets = await service.compute_facets(category_slug, filters.to_domain())
    total = facets[0].total_matching if facets else 0

    return FacetsResponse(
        category_slug=category_slug,
        total_matching=total,
        filters=filters,
        facets=[facet_to_schema(f) for f in facets],
    )
