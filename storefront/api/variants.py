"""Variant API endpoints.

Provides:
- GET /products/{id}/variants - variants and variant attributes
- POST /products/{id}/variants/preview - combinations without persisting
- POST /products/{id}/variants/generate - create missing variants
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_catalog_service
from storefront.api.schemas import (
    CombinationSchema,
    ErrorResponse,
    GenerateVariantsRequest,
    GenerateVariantsResponse,
    OptionSchema,
    PreviewResponse,
    SkippedSchema,
    VariantSchema,
    VariantSelectionRequest,
    VariantsListResponse,
)
from storefront.catalog.service import CatalogService
from storefront.domain.variants import (
    OptionPair,
    SkippedCombination,
    Variant,
    VariantCombination,
)

router = APIRouter(prefix="/products", tags=["Variants"])


# ============================================================================
# Converters
# ============================================================================


def option_to_schema(option: OptionPair) -> OptionSchema:
    """Convert OptionPair to OptionSchema."""
    return OptionSchema(
        attribute_slug=option.attribute_slug,
        attribute_name=option.attribute_name,
        value_id=option.value_id,
        value=option.value,
        metadata=option.metadata,
    )


def combination_to_schema(combination: VariantCombination) -> CombinationSchema:
    """Convert VariantCombination to CombinationSchema."""
    return CombinationSchema(
        name=combination.name,
        sku=combination.sku,
        options=[option_to_schema(o) for o in combination.options],
    )


def variant_to_schema(variant: Variant) -> VariantSchema:
    """Convert Variant to VariantSchema."""
    return VariantSchema(
        id=variant.id,
        product_id=variant.product_id,
        name=variant.name,
        sku=variant.sku,
        price=variant.price,
        sale_price=variant.sale_price,
        cost_price=variant.cost_price,
        stock=variant.stock,
        is_default=variant.is_default,
        options=[option_to_schema(o) for o in variant.options],
    )


def skipped_to_schema(skipped: SkippedCombination) -> SkippedSchema:
    """Convert SkippedCombination to SkippedSchema."""
    return SkippedSchema(
        combination=combination_to_schema(skipped.combination),
        reason=skipped.reason.value,
        detail=skipped.detail,
        existing_variant_id=skipped.existing_variant_id,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/{product_id}/variants",
    response_model=VariantsListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List variants",
    description="Get a product's variants and the attributes they are built from.",
)
async def list_variants(
    product_id: str,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> VariantsListResponse:
    """List a product's variants.

    Args:
        product_id: Product identifier.
        service: Catalog service.

    Returns:
        Variants and variant attributes.
    """
    variants = await service.list_variants(product_id)
    attributes = await service.get_product_attributes(product_id)

    return VariantsListResponse(
        product_id=product_id,
        attributes=[
            {
                "id": a.id,
                "name": a.name,
                "slug": a.slug,
                "priority_class": int(a.priority_class),
                "value_kind": a.value_kind.value,
                "values": [
                    {"id": v.id, "value": v.value, "metadata": v.metadata} for v in a.values
                ],
            }
            for a in attributes
        ],
        variants=[variant_to_schema(v) for v in variants],
    )


@router.post(
    "/{product_id}/variants/preview",
    response_model=PreviewResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Preview variants",
    description="Preview the combinations a selection would generate. Nothing is persisted.",
)
async def preview_variants(
    product_id: str,
    request: VariantSelectionRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> PreviewResponse:
    """Preview combinations for a selection.

    Args:
        product_id: Product identifier.
        request: Selected attribute values.
        service: Catalog service.

    Returns:
        Combinations in canonical order.
    """
    combinations = await service.preview_variants(product_id, request.selections)

    return PreviewResponse(
        product_id=product_id,
        total=len(combinations),
        combinations=[combination_to_schema(c) for c in combinations],
    )


@router.post(
    "/{product_id}/variants/generate",
    response_model=GenerateVariantsResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Generate variants",
    description=(
        "Create the variants a selection implies that the product does not "
        "have yet. Existing combinations are skipped and SKU collisions are "
        "reported per combination."
    ),
)
async def generate_variants(
    product_id: str,
    request: GenerateVariantsRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> GenerateVariantsResponse:
    """Generate a product's missing variants.

    Args:
        product_id: Product identifier.
        request: Selected attribute values and optional pricing.
        service: Catalog service.

    Returns:
        Created, skipped and failed combinations.
    """
    pricing = request.pricing.to_domain() if request.pricing else None
    result = await service.generate_variants(product_id, request.selections, pricing=pricing)

    return GenerateVariantsResponse(
        product_id=product_id,
        summary=result.summary(),
        created=[variant_to_schema(v) for v in result.created],
        skipped=[skipped_to_schema(s) for s in result.skipped],
        failed=[skipped_to_schema(s) for s in result.failed],
    )
