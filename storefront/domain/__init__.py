"""Domain layer - Attribute model, filters, variants, state machines.

This module exports the core domain building blocks:

- **Attribute Model**: Attributes, values and priority classification
- **Filters**: FilterSet (draft/applied), ItemCriteria and CatalogItem
- **Variants**: Combinations, variants, pricing and generation results
- **State Machines**: Draft/applied filter lifecycle (FilterStatus)
- **Exceptions**: Domain-specific errors

Example usage:
    from storefront.domain import Attribute, AttributeValue, FilterSet

    size = Attribute(
        id="attr-size",
        name="Size",
        slug="size",
        values=(AttributeValue(id="s", value="S"), AttributeValue(id="m", value="M")),
    )
    size.priority_class  # PriorityClass.SIZE

    filters = FilterSet(sizes={"S"}, price_range=(1000, 5000))
    filters.cleared("sizes")  # FilterSet(price_range=(1000, 5000))
"""

# Base classes
from storefront.domain.base import Entity, ValueObject

# Attribute model
from storefront.domain.attributes import (
    Attribute,
    AttributeValue,
    PriorityClass,
    ValueKind,
    classify,
    is_color_attribute,
    order_attributes,
)

# Exceptions
from storefront.domain.exceptions import (
    DomainError,
    EmptySelectionError,
    InvalidPriceRangeError,
    InvalidScopeError,
    InvalidStateTransitionError,
    ProductNotFoundError,
    SkuCollisionError,
    UnknownDimensionError,
    UnknownOptionError,
)

# Filters
from storefront.domain.filters import (
    CatalogItem,
    Dimension,
    FilterSet,
    ItemCriteria,
    PriceBounds,
    attribute_dimension,
)

# State machines
from storefront.domain.state_machines import FilterStatus, validate_filter_transition

# Variants
from storefront.domain.variants import (
    BasePricing,
    GenerationResult,
    OptionPair,
    ProductRecord,
    SkippedCombination,
    SkipReason,
    Variant,
    VariantCombination,
    VariantDraft,
)

__all__ = [
    # Base
    "Entity",
    "ValueObject",
    # Attribute model
    "Attribute",
    "AttributeValue",
    "PriorityClass",
    "ValueKind",
    "classify",
    "is_color_attribute",
    "order_attributes",
    # Exceptions
    "DomainError",
    "EmptySelectionError",
    "InvalidPriceRangeError",
    "InvalidScopeError",
    "InvalidStateTransitionError",
    "ProductNotFoundError",
    "SkuCollisionError",
    "UnknownDimensionError",
    "UnknownOptionError",
    # Filters
    "CatalogItem",
    "Dimension",
    "FilterSet",
    "ItemCriteria",
    "PriceBounds",
    "attribute_dimension",
    # State machines
    "FilterStatus",
    "validate_filter_transition",
    # Variants
    "BasePricing",
    "GenerationResult",
    "OptionPair",
    "ProductRecord",
    "SkippedCombination",
    "SkipReason",
    "Variant",
    "VariantCombination",
    "VariantDraft",
]
