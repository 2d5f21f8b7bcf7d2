"""Faceted filter aggregation.

Computes, for a category scope and an applied FilterSet, the selectable
values of every filter dimension together with result counts.

Each dimension is counted against the applied filters with its own
constraint lifted (self-exclusion), so selecting a value never makes the
other values of the same dimension disappear. By default the attribute
dimensions (sizes, colors, attributes.*) are lifted as one group; brands,
price and the stock/sale flags narrow every other dimension.

Dimension layout for a scope:
    brands                  always
    sizes                   first size-class attribute of the scope, if any
    colors                  first color-class attribute of the scope, if any
    attributes.<slug>       every other attribute of the scope
    price, in_stock, on_sale  always
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from storefront.catalog.ports import CatalogQuery
from storefront.catalog.taxonomy import CategoryScope
from storefront.domain.attributes import Attribute, PriorityClass, is_color_attribute
from storefront.domain.exceptions import InvalidScopeError, UnknownDimensionError
from storefront.domain.filters import (
    CatalogItem,
    Dimension,
    FilterSet,
    ItemCriteria,
    PriceBounds,
    attribute_dimension,
)

logger = structlog.get_logger()


class FacetExclusion(str, Enum):
    """Which constraints are lifted when counting a dimension.

    GROUP lifts every attribute dimension (sizes, colors, attributes.*) together
    when counting any of them, so attribute facets only narrow by brand, price
    and flags. DIMENSION lifts only the counted dimension itself.
    """

    GROUP = "group"
    DIMENSION = "dimension"


class FacetKind(str, Enum):
    """How a facet is rendered."""

    LIST = "list"
    COLOR = "color"
    RANGE = "range"
    TOGGLE = "toggle"


@dataclass(frozen=True)
class FacetValue:
    """A selectable facet value.

    Attributes:
        name: Value as used in the FilterSet.
        count: Items matching the other dimensions' filters that have this value.
        selected: Whether the value is currently applied.
        color_hex: Swatch color for color facets.
    """

    name: str
    count: int
    selected: bool = False
    color_hex: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "name": self.name,
            "count": self.count,
            "selected": self.selected,
        }
        if self.color_hex is not None:
            data["color_hex"] = self.color_hex
        return data


@dataclass
class FacetResult:
    """Facet values of one dimension.

    Attributes:
        dimension: Dimension name (e.g., "sizes", "attributes.material").
        label: Display label.
        kind: Rendering kind.
        values: Values with counts. Empty when nothing matches.
        price_range: Effective price bounds of this dimension's candidates.
        total_matching: Items matching the full applied FilterSet.
        attribute_slug: Backing attribute, if any.
    """

    dimension: str
    label: str
    kind: FacetKind
    values: list[FacetValue] = field(default_factory=list)
    price_range: PriceBounds = field(default_factory=PriceBounds)
    total_matching: int = 0
    attribute_slug: str | None = None

    @property
    def is_empty(self) -> bool:
        """Check if the section should be hidden."""
        if self.kind == FacetKind.RANGE:
            return self.price_range == PriceBounds() and self.total_matching == 0
        return not self.values

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "dimension": self.dimension,
            "label": self.label,
            "kind": self.kind.value,
            "attribute_slug": self.attribute_slug,
            "values": [v.to_dict() for v in self.values],
            "price_range": {"min": self.price_range.min, "max": self.price_range.max},
            "total_matching": self.total_matching,
        }


# ============================================================================
# Dimension Layout
# ============================================================================


@dataclass(frozen=True)
class DimensionSpec:
    """One facet dimension of a scope.

    Attributes:
        dimension: Dimension name.
        label: Display label.
        kind: Rendering kind.
        exclusion_keys: Keys cleared in ItemCriteria when counting this dimension.
        attribute: Backing attribute for attribute dimensions.
    """

    dimension: str
    label: str
    kind: FacetKind
    exclusion_keys: tuple[str, ...]
    attribute: Attribute | None = None


_BRANDS = DimensionSpec(
    Dimension.BRANDS.value, "Brand", FacetKind.LIST, (Dimension.BRANDS.value,)
)
_PRICE = DimensionSpec(
    Dimension.PRICE.value, "Price", FacetKind.RANGE, (Dimension.PRICE.value,)
)
_IN_STOCK = DimensionSpec(
    Dimension.IN_STOCK.value, "In stock", FacetKind.TOGGLE, (Dimension.IN_STOCK.value,)
)
_ON_SALE = DimensionSpec(
    Dimension.ON_SALE.value, "On sale", FacetKind.TOGGLE, (Dimension.ON_SALE.value,)
)


class FacetLayout:
    """Maps a scope's attributes onto facet dimensions."""

    def __init__(self, attributes: Sequence[Attribute]) -> None:
        """Lay out dimensions for attributes.

        Args:
            attributes: Filterable attributes of the scope, in display order.
        """
        self.size_attribute: Attribute | None = None
        self.color_attribute: Attribute | None = None
        self.dynamic: list[Attribute] = []
        self._by_slug: dict[str, Attribute] = {}

        for attribute in attributes:
            if attribute.slug in self._by_slug or not attribute.values:
                continue
            self._by_slug[attribute.slug] = attribute
            if self.size_attribute is None and attribute.priority_class == PriorityClass.SIZE:
                self.size_attribute = attribute
            elif self.color_attribute is None and is_color_attribute(attribute):
                self.color_attribute = attribute
            else:
                self.dynamic.append(attribute)

    def dimensions(
        self,
        exclusion: FacetExclusion = FacetExclusion.GROUP,
    ) -> list[DimensionSpec]:
        """Get dimensions in display order.

        Args:
            exclusion: Which constraints attribute dimensions lift.

        Returns:
            Dimension specs.
        """
        group = tuple(attribute_dimension(slug) for slug in self._by_slug)

        def attribute_spec(dimension: str, attribute: Attribute) -> DimensionSpec:
            own = (attribute_dimension(attribute.slug),)
            keys = group if exclusion == FacetExclusion.GROUP else own
            return self._attribute_spec(dimension, attribute, keys)

        specs = [_BRANDS]
        if self.size_attribute is not None:
            specs.append(attribute_spec(Dimension.SIZES.value, self.size_attribute))
        if self.color_attribute is not None:
            specs.append(attribute_spec(Dimension.COLORS.value, self.color_attribute))
        for attribute in self.dynamic:
            specs.append(attribute_spec(attribute_dimension(attribute.slug), attribute))
        specs.extend([_PRICE, _IN_STOCK, _ON_SALE])
        return specs

    @staticmethod
    def _attribute_spec(
        dimension: str,
        attribute: Attribute,
        exclusion_keys: tuple[str, ...],
    ) -> DimensionSpec:
        kind = FacetKind.COLOR if is_color_attribute(attribute) else FacetKind.LIST
        return DimensionSpec(
            dimension=dimension,
            label=attribute.name,
            kind=kind,
            exclusion_keys=exclusion_keys,
            attribute=attribute,
        )

    def knows(self, slug: str) -> bool:
        """Check if an attribute slug is filterable in this layout."""
        return slug in self._by_slug

    def resolve(self, applied: FilterSet, category_slug: str) -> ItemCriteria:
        """Resolve a FilterSet into slug-keyed criteria.

        Unknown attribute slugs are ignored and logged. Filter keys naming the
        size or color attribute merge into that dimension.

        Args:
            applied: Applied filters.
            category_slug: Scope slug, for log context.

        Returns:
            Criteria for item matching.
        """
        selections: dict[str, set[str]] = {}

        if self.size_attribute is not None and applied.sizes:
            selections.setdefault(self.size_attribute.slug, set()).update(applied.sizes)
        if self.color_attribute is not None and applied.colors:
            selections.setdefault(self.color_attribute.slug, set()).update(applied.colors)

        for slug, values in applied.attributes.items():
            if not self.knows(slug):
                error = UnknownDimensionError(slug, category_slug)
                logger.warning("Ignoring filter on unknown attribute", **error.details)
                continue
            selections.setdefault(slug, set()).update(values)

        return ItemCriteria(
            brands=applied.brands,
            price_range=applied.price_range,
            in_stock=applied.in_stock,
            on_sale=applied.on_sale,
            attributes={slug: frozenset(values) for slug, values in selections.items()},
        )


# ============================================================================
# Facet Aggregator
# ============================================================================


class FacetAggregator:
    """Computes self-excluding facets over a catalog scope.

    Example usage:
        aggregator = FacetAggregator(catalog)
        facets = await aggregator.compute_facets(
            "clothing",
            FilterSet(sizes={"M"}, brands={"Acme"}),
        )
        for facet in facets:
            print(facet.dimension, [(v.name, v.count) for v in facet.values])
    """

    def __init__(
        self,
        catalog: CatalogQuery,
        exclusion: FacetExclusion = FacetExclusion.GROUP,
    ) -> None:
        """Initialize aggregator.

        Args:
            catalog: Catalog read access.
            exclusion: Self-exclusion mode for attribute dimensions.
        """
        self.catalog = catalog
        self.exclusion = FacetExclusion(exclusion)

    async def compute_facets(
        self,
        category_slug: str,
        applied: FilterSet | None = None,
    ) -> list[FacetResult]:
        """Compute facets for a category scope.

        Never raises for data-shape reasons: an unknown category yields empty
        facets and unknown attribute filters are ignored.

        Args:
            category_slug: Category slug ("all" for the whole catalog).
            applied: Applied filters (None = no filters).

        Returns:
            One FacetResult per dimension available in the scope.
        """
        applied = applied or FilterSet()

        scope = await self.catalog.resolve_scope(category_slug)
        if scope is None:
            error = InvalidScopeError(category_slug)
            logger.warning("Facets requested for unknown category", **error.details)
            return [
                FacetResult(dimension=spec.dimension, label=spec.label, kind=spec.kind)
                for spec in FacetLayout(()).dimensions(self.exclusion)
            ]

        layout = FacetLayout(await self.catalog.get_attributes(scope))
        criteria = layout.resolve(applied, category_slug)
        specs = layout.dimensions(self.exclusion)

        reduced = [criteria.cleared(*spec.exclusion_keys) for spec in specs]
        matching, candidate_sets = await self._fetch(scope, criteria, reduced)
        total_matching = len(matching)

        facets = [
            self._build_facet(spec, candidates, criteria, total_matching)
            for spec, candidates in zip(specs, candidate_sets)
        ]

        logger.debug(
            "Facets computed",
            category_slug=category_slug,
            dimensions=len(facets),
            total_matching=total_matching,
        )
        return facets

    async def count_matching(self, category_slug: str, applied: FilterSet | None = None) -> int:
        """Count items matching the full applied filters.

        Args:
            category_slug: Category slug.
            applied: Applied filters.

        Returns:
            Number of matching items (0 for unknown categories).
        """
        scope = await self.catalog.resolve_scope(category_slug)
        if scope is None:
            return 0
        layout = FacetLayout(await self.catalog.get_attributes(scope))
        criteria = layout.resolve(applied or FilterSet(), category_slug)
        return len(await self.catalog.find_items(scope, criteria))

    async def _fetch(
        self,
        scope: CategoryScope,
        criteria: ItemCriteria,
        reduced: list[ItemCriteria],
    ) -> tuple[list[CatalogItem], list[list[CatalogItem]]]:
        """Fetch the full match set and every reduced candidate set.

        Queries run one at a time since a database session does not allow
        concurrent statements. Reduced criteria equal to the full criteria or
        to an earlier reduced set reuse that result instead of querying again.
        """
        matching = list(await self.catalog.find_items(scope, criteria))
        fetched: list[tuple[ItemCriteria, list[CatalogItem]]] = [(criteria, matching)]

        candidate_sets: list[list[CatalogItem]] = []
        for current in reduced:
            items = next((found for c, found in fetched if c == current), None)
            if items is None:
                items = list(await self.catalog.find_items(scope, current))
                fetched.append((current, items))
            candidate_sets.append(items)
        return matching, candidate_sets

    def _build_facet(
        self,
        spec: DimensionSpec,
        candidates: list[CatalogItem],
        criteria: ItemCriteria,
        total_matching: int,
    ) -> FacetResult:
        result = FacetResult(
            dimension=spec.dimension,
            label=spec.label,
            kind=spec.kind,
            price_range=PriceBounds.of(candidates),
            total_matching=total_matching,
            attribute_slug=spec.attribute.slug if spec.attribute else None,
        )
        if spec.kind == FacetKind.RANGE:
            return result

        if spec.kind == FacetKind.TOGGLE:
            result.values = self._toggle_values(spec, candidates, criteria)
            return result

        if spec.attribute is None:
            counts = Counter(item.brand for item in candidates if item.brand)
            selected = criteria.brands
            names = sorted(counts.keys() | selected, key=str.casefold)
        else:
            slug = spec.attribute.slug
            counts = Counter(
                value for item in candidates for value in set(item.values_for(slug))
            )
            selected = criteria.attributes.get(slug, frozenset())
            names = _declared_order(spec.attribute, counts.keys() | selected)

        result.values = [
            FacetValue(
                name=name,
                count=counts.get(name, 0),
                selected=name in selected,
                color_hex=_color_hex(spec, name),
            )
            for name in names
            if counts.get(name, 0) > 0 or name in selected
        ]
        return result

    @staticmethod
    def _toggle_values(
        spec: DimensionSpec,
        candidates: list[CatalogItem],
        criteria: ItemCriteria,
    ) -> list[FacetValue]:
        if spec.dimension == Dimension.IN_STOCK:
            count = sum(1 for item in candidates if item.is_in_stock)
            selected = criteria.in_stock
        else:
            count = sum(1 for item in candidates if item.is_on_sale)
            selected = criteria.on_sale
        if count == 0 and not selected:
            return []
        return [FacetValue(name=spec.dimension, count=count, selected=selected)]


def _declared_order(attribute: Attribute, names: Iterable[str]) -> list[str]:
    """Order values by declared position, undeclared values last alphabetically."""
    declared_count = len(attribute.values)

    def sort_key(name: str) -> tuple[int, str]:
        position = attribute.position(name)
        return (declared_count if position is None else position, name.casefold())

    return sorted(names, key=sort_key)


def _color_hex(spec: DimensionSpec, name: str) -> str | None:
    if spec.kind != FacetKind.COLOR or spec.attribute is None:
        return None
    value = spec.attribute.resolve(name)
    return value.color_hex if value else None
