"""API schemas for the storefront API.

Pydantic models for request/response validation and serialization.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from storefront.domain.filters import FilterSet
from storefront.domain.variants import BasePricing


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Facet Schemas
# ============================================================================


class PriceRangeSchema(BaseModel):
    """Inclusive price range in cents."""

    min: int = Field(..., ge=0, description="Lower bound in cents")
    max: int = Field(..., ge=0, description="Upper bound in cents")

    @model_validator(mode="after")
    def check_order(self) -> "PriceRangeSchema":
        """Reject ranges with min above max."""
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        return self


class FilterSetSchema(BaseModel):
    """Applied catalog filters. Omitted fields mean no constraint."""

    brands: list[str] = Field(default_factory=list, description="Brands (OR)")
    sizes: list[str] = Field(default_factory=list, description="Sizes (OR)")
    colors: list[str] = Field(default_factory=list, description="Colors (OR)")
    price_range: PriceRangeSchema | None = Field(default=None, description="Effective price range")
    in_stock: bool = Field(default=False, description="Only products with stock")
    on_sale: bool = Field(default=False, description="Only discounted products")
    attributes: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Attribute slug -> selected values (OR within, AND across)",
    )

    def to_domain(self) -> FilterSet:
        """Convert to domain FilterSet."""
        return FilterSet(
            brands=frozenset(self.brands),
            sizes=frozenset(self.sizes),
            colors=frozenset(self.colors),
            price_range=(
                (self.price_range.min, self.price_range.max) if self.price_range else None
            ),
            in_stock=self.in_stock,
            on_sale=self.on_sale,
            attributes={slug: frozenset(values) for slug, values in self.attributes.items()},
        )


class FacetValueSchema(BaseModel):
    """A selectable facet value."""

    name: str
    count: int = Field(..., ge=0)
    selected: bool = False
    color_hex: str | None = None


class FacetSchema(BaseModel):
    """Facet values of one dimension."""

    dimension: str
    label: str
    kind: str
    attribute_slug: str | None = None
    values: list[FacetValueSchema]
    price_range: PriceRangeSchema
    total_matching: int


class FacetsResponse(BaseModel):
    """Facets of a category under applied filters."""

    category_slug: str
    total_matching: int
    filters: FilterSetSchema
    facets: list[FacetSchema]


# ============================================================================
# Variant Schemas
# ============================================================================


class OptionSchema(BaseModel):
    """One attribute value of a combination or variant."""

    attribute_slug: str
    attribute_name: str = ""
    value_id: str | None = None
    value: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class CombinationSchema(BaseModel):
    """A previewed combination."""

    name: str
    sku: str
    options: list[OptionSchema]


class VariantSchema(BaseModel):
    """A persisted variant."""

    id: str
    product_id: str
    name: str
    sku: str | None
    price: int
    sale_price: int | None = None
    cost_price: int | None = None
    stock: int
    is_default: bool
    options: list[OptionSchema]


class PricingSchema(BaseModel):
    """Pricing and stock inherited by generated variants (cents)."""

    price: int = Field(..., ge=0)
    sale_price: int | None = Field(default=None, ge=0)
    cost_price: int | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)

    def to_domain(self) -> BasePricing:
        """Convert to domain pricing."""
        return BasePricing(
            price=self.price,
            sale_price=self.sale_price,
            cost_price=self.cost_price,
            stock=self.stock,
        )


class VariantSelectionRequest(BaseModel):
    """Attribute slug -> selected value ids (or values)."""

    selections: dict[str, list[str]] = Field(
        ...,
        description="Attribute slug -> selected value ids or values",
        examples=[{"size": ["S", "M"], "color": ["Red"]}],
    )


class GenerateVariantsRequest(VariantSelectionRequest):
    """Request to generate a product's missing variants."""

    pricing: PricingSchema | None = Field(
        default=None,
        description="Pricing for new variants (defaults to the product's)",
    )


class PreviewResponse(BaseModel):
    """Previewed combinations."""

    product_id: str
    total: int
    combinations: list[CombinationSchema]


class SkippedSchema(BaseModel):
    """A combination that was not created."""

    combination: CombinationSchema
    reason: str
    detail: str = ""
    existing_variant_id: str | None = None


class GenerateVariantsResponse(BaseModel):
    """Outcome of a variant generation."""

    product_id: str
    summary: dict[str, int]
    created: list[VariantSchema]
    skipped: list[SkippedSchema]
    failed: list[SkippedSchema]


class VariantsListResponse(BaseModel):
    """A product's variants and variant attributes."""

    product_id: str
    attributes: list[dict[str, Any]]
    variants: list[VariantSchema]
