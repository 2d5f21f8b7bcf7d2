"""Filter sets, catalog items and item matching.

A FilterSet is what the storefront applies (brands, sizes, colors, price,
stock/sale flags and dynamic attributes). Before querying, it is resolved
against a category's attribute layout into ItemCriteria, which speak only in
attribute slugs and can be evaluated against a CatalogItem.

Matching semantics:
    - OR within one dimension (any selected value matches)
    - AND across dimensions
    - price compared on the effective price (sale price when present)
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Self

from storefront.domain.base import ValueObject
from storefront.domain.exceptions import InvalidPriceRangeError

ATTRIBUTE_PREFIX = "attributes."


class Dimension(str, Enum):
    """Built-in filter dimensions.

    Dynamic attribute dimensions are named ``attributes.<slug>``.
    """

    BRANDS = "brands"
    SIZES = "sizes"
    COLORS = "colors"
    PRICE = "price"
    IN_STOCK = "in_stock"
    ON_SALE = "on_sale"


def attribute_dimension(slug: str) -> str:
    """Get the dimension name for a dynamic attribute."""
    return f"{ATTRIBUTE_PREFIX}{slug}"


def parse_attribute_dimension(dimension: str) -> str | None:
    """Get the attribute slug of a dynamic dimension, None for built-ins."""
    if dimension.startswith(ATTRIBUTE_PREFIX):
        return dimension[len(ATTRIBUTE_PREFIX):]
    return None


# ============================================================================
# Catalog Items
# ============================================================================


@dataclass(frozen=True)
class CatalogItem:
    """A product as seen by the facet aggregator.

    Attributes:
        id: Product ID.
        category_id: Category the product is assigned to.
        brand: Brand name (None for unbranded products).
        price: Base price in cents.
        sale_price: Sale price in cents, if any.
        stock: Available quantity.
        attributes: Attribute slug -> values the product offers.
    """

    id: str
    category_id: str
    price: int
    brand: str | None = None
    sale_price: int | None = None
    stock: int = 0
    attributes: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def effective_price(self) -> int:
        """Get the price a customer pays."""
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def is_on_sale(self) -> bool:
        """Check if the product is discounted."""
        return self.sale_price is not None and self.sale_price < self.price

    @property
    def is_in_stock(self) -> bool:
        """Check if the product is available."""
        return self.stock > 0

    def values_for(self, slug: str) -> tuple[str, ...]:
        """Get the product's values for an attribute."""
        return tuple(self.attributes.get(slug, ()))


@dataclass(frozen=True)
class PriceBounds(ValueObject):
    """Inclusive [min, max] effective price bounds in cents."""

    min: int = 0
    max: int = 0

    @classmethod
    def of(cls, items: Iterable[CatalogItem]) -> Self:
        """Compute bounds over items.

        Args:
            items: Items to scan.

        Returns:
            Bounds of effective prices, (0, 0) when there are no items.
        """
        prices = [item.effective_price for item in items]
        if not prices:
            return cls()
        return cls(min=min(prices), max=max(prices))


# ============================================================================
# Filter Set
# ============================================================================


def _frozen(values: Iterable[str] | None) -> frozenset[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        return frozenset({values})
    return frozenset(v for v in values if v)


@dataclass(frozen=True, eq=True)
class FilterSet:
    """Filters applied to a catalog listing.

    Empty sets, ``price_range=None`` and ``False`` flags mean "no constraint"
    on that dimension. Inputs are normalized: any iterable becomes a
    frozenset and attribute keys with no values are dropped.

    Attributes:
        brands: Selected brands.
        sizes: Selected sizes.
        colors: Selected colors.
        price_range: Inclusive (min, max) effective price in cents.
        in_stock: Only products with stock.
        on_sale: Only discounted products.
        attributes: Attribute slug -> selected values.
    """

    brands: frozenset[str] = frozenset()
    sizes: frozenset[str] = frozenset()
    colors: frozenset[str] = frozenset()
    price_range: tuple[int, int] | None = None
    in_stock: bool = False
    on_sale: bool = False
    attributes: Mapping[str, frozenset[str]] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        """Normalize collections and validate price range."""
        object.__setattr__(self, "brands", _frozen(self.brands))
        object.__setattr__(self, "sizes", _frozen(self.sizes))
        object.__setattr__(self, "colors", _frozen(self.colors))

        attributes = {
            slug: _frozen(values)
            for slug, values in (self.attributes or {}).items()
        }
        object.__setattr__(
            self,
            "attributes",
            {slug: values for slug, values in attributes.items() if values},
        )

        if self.price_range is not None:
            minimum, maximum = self.price_range
            if minimum > maximum:
                raise InvalidPriceRangeError(minimum, maximum)
            object.__setattr__(self, "price_range", (int(minimum), int(maximum)))

    @property
    def is_empty(self) -> bool:
        """Check if no dimension is constrained."""
        return self == FilterSet()

    def selected(self, dimension: str) -> frozenset[str]:
        """Get selected values of a multi-select dimension.

        Args:
            dimension: Dimension name.

        Returns:
            Selected values (empty for price and flag dimensions).
        """
        if dimension == Dimension.BRANDS:
            return self.brands
        if dimension == Dimension.SIZES:
            return self.sizes
        if dimension == Dimension.COLORS:
            return self.colors
        slug = parse_attribute_dimension(dimension)
        if slug is not None:
            return self.attributes.get(slug, frozenset())
        return frozenset()

    def cleared(self, dimension: str) -> "FilterSet":
        """Get a copy with one dimension's constraint removed.

        Args:
            dimension: Dimension name.

        Returns:
            New FilterSet.
        """
        if dimension == Dimension.PRICE:
            return replace(self, price_range=None)
        if dimension == Dimension.IN_STOCK:
            return replace(self, in_stock=False)
        if dimension == Dimension.ON_SALE:
            return replace(self, on_sale=False)
        return self.with_selected(dimension, frozenset())

    def with_selected(self, dimension: str, values: Iterable[str]) -> "FilterSet":
        """Get a copy with a multi-select dimension set to values.

        Args:
            dimension: Dimension name (brands, sizes, colors or attributes.<slug>).
            values: New selection.

        Returns:
            New FilterSet.

        Raises:
            ValueError: If dimension is not multi-select.
        """
        values = _frozen(values)
        if dimension == Dimension.BRANDS:
            return replace(self, brands=values)
        if dimension == Dimension.SIZES:
            return replace(self, sizes=values)
        if dimension == Dimension.COLORS:
            return replace(self, colors=values)
        slug = parse_attribute_dimension(dimension)
        if slug is None:
            raise ValueError(f"Dimension '{dimension}' is not multi-select")
        attributes = dict(self.attributes)
        attributes[slug] = values
        return replace(self, attributes=attributes)

    def toggled(self, dimension: str, value: str) -> "FilterSet":
        """Get a copy with a value added to or removed from a dimension."""
        current = self.selected(dimension)
        if value in current:
            return self.with_selected(dimension, current - {value})
        return self.with_selected(dimension, current | {value})

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation with sorted lists.
        """
        return {
            "brands": sorted(self.brands),
            "sizes": sorted(self.sizes),
            "colors": sorted(self.colors),
            "price_range": list(self.price_range) if self.price_range else None,
            "in_stock": self.in_stock,
            "on_sale": self.on_sale,
            "attributes": {
                slug: sorted(values) for slug, values in sorted(self.attributes.items())
            },
        }


# ============================================================================
# Item Criteria
# ============================================================================


@dataclass(frozen=True)
class ItemCriteria:
    """A FilterSet resolved against a scope's attribute layout.

    Sizes and colors are expressed through the slugs of the attributes that
    back them, so criteria only know brands, price, flags and attribute slugs.
    """

    brands: frozenset[str] = frozenset()
    price_range: tuple[int, int] | None = None
    in_stock: bool = False
    on_sale: bool = False
    attributes: Mapping[str, frozenset[str]] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    def cleared(self, *keys: str) -> "ItemCriteria":
        """Get a copy with constraints removed.

        Args:
            keys: "brands", "price", "in_stock", "on_sale" or "attributes.<slug>".

        Returns:
            New ItemCriteria.
        """
        changes: dict[str, Any] = {}
        dropped: set[str] = set()
        for key in keys:
            if key == Dimension.BRANDS:
                changes["brands"] = frozenset()
            elif key == Dimension.PRICE:
                changes["price_range"] = None
            elif key == Dimension.IN_STOCK:
                changes["in_stock"] = False
            elif key == Dimension.ON_SALE:
                changes["on_sale"] = False
            else:
                slug = parse_attribute_dimension(key)
                if slug is not None:
                    dropped.add(slug)
        if dropped & self.attributes.keys():
            changes["attributes"] = {
                s: v for s, v in self.attributes.items() if s not in dropped
            }
        return replace(self, **changes) if changes else self

    def matches(self, item: CatalogItem) -> bool:
        """Check if an item satisfies every constraint.

        Args:
            item: Item to check.

        Returns:
            True if the item matches.
        """
        if self.brands and item.brand not in self.brands:
            return False

        if self.price_range is not None:
            minimum, maximum = self.price_range
            if not minimum <= item.effective_price <= maximum:
                return False

        if self.in_stock and not item.is_in_stock:
            return False

        if self.on_sale and not item.is_on_sale:
            return False

        for slug, values in self.attributes.items():
            if values and values.isdisjoint(item.values_for(slug)):
                return False

        return True
