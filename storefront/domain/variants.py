"""Variant domain types.

Combinations are the pure output of the Cartesian product over selected
attribute values. Variants are persisted combinations with SKU, pricing and
stock. Reconciliation between the two is keyed on the order-independent set
of (attribute slug, value) pairs.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from storefront.domain.base import Entity, ValueObject

OptionKey = frozenset[tuple[str, str]]


def option_key(pairs: Iterable[tuple[str, str]]) -> OptionKey:
    """Build an order-independent key from (attribute slug, value) pairs."""
    return frozenset(pairs)


@dataclass(frozen=True)
class OptionPair(ValueObject):
    """One attribute value inside a combination or variant.

    Attributes:
        attribute_slug: Owning attribute slug.
        value: Display value.
        attribute_name: Owning attribute display name.
        value_id: Attribute value ID.
        color_hex: Swatch color for color attributes.
    """

    attribute_slug: str
    value: str
    attribute_name: str = ""
    value_id: str | None = None
    color_hex: str | None = None

    @property
    def metadata(self) -> dict[str, Any]:
        """Get value metadata."""
        if self.color_hex is None:
            return {}
        return {"color_hex": self.color_hex}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "attribute_slug": self.attribute_slug,
            "attribute_name": self.attribute_name,
            "value_id": self.value_id,
            "value": self.value,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class VariantCombination(ValueObject):
    """An ordered tuple of option pairs with synthesized name and SKU.

    Attributes:
        options: One pair per attribute, in canonical attribute order.
        name: Human-readable name (e.g., "M / Red").
        sku: Deterministic SKU (e.g., "TSHIRT-M-RED").
    """

    options: tuple[OptionPair, ...]
    name: str
    sku: str

    @property
    def key(self) -> OptionKey:
        """Get the order-independent reconciliation key."""
        return option_key((o.attribute_slug, o.value) for o in self.options)

    @property
    def values(self) -> tuple[str, ...]:
        """Get values in canonical order."""
        return tuple(o.value for o in self.options)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "sku": self.sku,
            "options": [o.to_dict() for o in self.options],
        }


@dataclass(frozen=True)
class BasePricing(ValueObject):
    """Pricing and stock defaults inherited by generated variants.

    All amounts are in cents.
    """

    price: int = 0
    sale_price: int | None = None
    cost_price: int | None = None
    stock: int = 0

    def __post_init__(self) -> None:
        """Validate pricing."""
        for name in ("price", "sale_price", "cost_price", "stock"):
            amount = getattr(self, name)
            if amount is not None and amount < 0:
                raise ValueError(f"{name} cannot be negative: {amount}")


@dataclass(frozen=True)
class ProductRecord:
    """The parts of a product variant generation needs.

    Attributes:
        id: Product ID.
        name: Product name.
        sku: Product SKU, used as the variant SKU root.
        pricing: Product-level base pricing.
    """

    id: str
    name: str
    sku: str | None = None
    pricing: BasePricing = field(default_factory=BasePricing)


@dataclass(frozen=True)
class VariantDraft:
    """Everything needed to persist one variant."""

    name: str
    sku: str
    pricing: BasePricing
    options: tuple[OptionPair, ...]
    is_default: bool = False

    @property
    def key(self) -> OptionKey:
        """Get the order-independent reconciliation key."""
        return option_key((o.attribute_slug, o.value) for o in self.options)


@dataclass(eq=False)
class Variant(Entity):
    """A persisted product variant.

    Attributes:
        id: Variant ID.
        product_id: Owning product.
        name: Variant name.
        sku: Variant SKU.
        price: Price in cents.
        sale_price: Sale price in cents.
        cost_price: Cost price in cents.
        stock: Available quantity.
        is_default: Whether this is the product's default variant.
        options: Option pairs referencing attribute values.
    """

    product_id: str = ""
    name: str = ""
    sku: str | None = None
    price: int = 0
    sale_price: int | None = None
    cost_price: int | None = None
    stock: int = 0
    is_default: bool = False
    options: tuple[OptionPair, ...] = ()

    @property
    def key(self) -> OptionKey:
        """Get the order-independent reconciliation key."""
        return option_key((o.attribute_slug, o.value) for o in self.options)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "product_id": self.product_id,
            "name": self.name,
            "sku": self.sku,
            "price": self.price,
            "sale_price": self.sale_price,
            "cost_price": self.cost_price,
            "stock": self.stock,
            "is_default": self.is_default,
            "options": [o.to_dict() for o in self.options],
        }


# ============================================================================
# Generation Results
# ============================================================================


class SkipReason(str, Enum):
    """Why a combination was not created."""

    EXISTING = "existing"
    SKU_COLLISION = "sku_collision"


@dataclass(frozen=True)
class SkippedCombination:
    """A combination that was not created, with the reason."""

    combination: VariantCombination
    reason: SkipReason
    detail: str = ""
    existing_variant_id: str | None = None


@dataclass
class GenerationResult:
    """Outcome of a batch generation.

    Attributes:
        created: Newly created variants, in canonical order.
        skipped: Combinations already present on the product.
        failed: Combinations rejected individually (SKU collisions).
    """

    created: list[Variant] = field(default_factory=list)
    skipped: list[SkippedCombination] = field(default_factory=list)
    failed: list[SkippedCombination] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Get number of combinations considered."""
        return len(self.created) + len(self.skipped) + len(self.failed)

    def summary(self) -> dict[str, int]:
        """Get counts per outcome."""
        return {
            "created": len(self.created),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }
