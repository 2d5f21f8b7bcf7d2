"""Tests for faceted filter aggregation."""

import pytest

from storefront.catalog.facets import (
    FacetAggregator,
    FacetExclusion,
    FacetKind,
    FacetLayout,
    FacetResult,
)
from storefront.catalog.memory import InMemoryCatalog
from storefront.domain import FilterSet, PriceBounds

from .conftest import COLOR, MATERIAL, SIZE


def by_dimension(facets: list[FacetResult]) -> dict[str, FacetResult]:
    """Index facets by dimension name."""
    return {facet.dimension: facet for facet in facets}


def counts(facet: FacetResult) -> list[tuple[str, int]]:
    """Get (name, count) pairs of a facet."""
    return [(v.name, v.count) for v in facet.values]


class TestFacetLayout:
    """Tests for FacetLayout."""

    def test_dimensions_in_display_order(self) -> None:
        """Brands, sizes, colors, dynamic attributes, then price and flags."""
        layout = FacetLayout([MATERIAL, COLOR, SIZE])
        assert [spec.dimension for spec in layout.dimensions()] == [
            "brands",
            "sizes",
            "colors",
            "attributes.material",
            "price",
            "in_stock",
            "on_sale",
        ]

    def test_group_exclusion_lifts_all_attributes(self) -> None:
        """In group mode every attribute dimension lifts every attribute."""
        specs = {s.dimension: s for s in FacetLayout([SIZE, COLOR]).dimensions()}
        assert set(specs["sizes"].exclusion_keys) == {"attributes.size", "attributes.color"}
        assert specs["brands"].exclusion_keys == ("brands",)

    def test_dimension_exclusion_lifts_only_itself(self) -> None:
        """In dimension mode a facet lifts only its own attribute."""
        specs = {
            s.dimension: s
            for s in FacetLayout([SIZE, COLOR]).dimensions(FacetExclusion.DIMENSION)
        }
        assert specs["colors"].exclusion_keys == ("attributes.color",)

    def test_sizes_and_colors_merge_into_attributes(self) -> None:
        """Size and color filters resolve onto their backing attribute slugs."""
        layout = FacetLayout([SIZE, COLOR])
        criteria = layout.resolve(
            FilterSet(sizes={"S"}, attributes={"size": {"M"}}, colors={"Red"}),
            "clothing",
        )
        assert criteria.attributes == {
            "size": frozenset({"S", "M"}),
            "color": frozenset({"Red"}),
        }

    def test_unknown_attribute_is_ignored(self) -> None:
        """Filters on attributes outside the layout are dropped."""
        criteria = FacetLayout([SIZE]).resolve(
            FilterSet(attributes={"fabric": {"Silk"}}),
            "clothing",
        )
        assert criteria.attributes == {}


class TestFacetAggregator:
    """Tests for FacetAggregator."""

    @pytest.mark.asyncio
    async def test_unfiltered_counts(self, aggregator: FacetAggregator) -> None:
        """Every value is counted over the whole scope."""
        facets = by_dimension(await aggregator.compute_facets("clothing"))

        assert counts(facets["brands"]) == [("Acme", 2), ("Globex", 2)]
        assert counts(facets["sizes"]) == [("S", 2), ("M", 1), ("L", 1)]
        assert counts(facets["colors"]) == [("Red", 2), ("Blue", 2)]
        assert counts(facets["attributes.material"]) == [("Cotton", 3), ("Linen", 1)]
        assert facets["price"].price_range == PriceBounds(min=1000, max=3500)
        assert counts(facets["in_stock"]) == [("in_stock", 3)]
        assert counts(facets["on_sale"]) == [("on_sale", 2)]
        assert all(f.total_matching == 4 for f in facets.values())

    @pytest.mark.asyncio
    async def test_selected_dimension_keeps_siblings(self, aggregator: FacetAggregator) -> None:
        """Selecting a size leaves the other sizes and all colors countable."""
        facets = by_dimension(
            await aggregator.compute_facets("clothing", FilterSet(sizes={"S"}))
        )

        assert counts(facets["sizes"]) == [("S", 2), ("M", 1), ("L", 1)]
        assert [v.name for v in facets["sizes"].values if v.selected] == ["S"]
        assert counts(facets["colors"]) == [("Red", 2), ("Blue", 2)]
        assert facets["sizes"].total_matching == 2

    @pytest.mark.asyncio
    async def test_non_attribute_dimensions_narrow_others(
        self, aggregator: FacetAggregator
    ) -> None:
        """Brands, price and flags are counted under the attribute filters."""
        facets = by_dimension(
            await aggregator.compute_facets("clothing", FilterSet(sizes={"S"}))
        )

        assert counts(facets["brands"]) == [("Acme", 1), ("Globex", 1)]
        assert facets["price"].price_range == PriceBounds(min=1000, max=1500)
        assert counts(facets["in_stock"]) == [("in_stock", 1)]
        assert counts(facets["on_sale"]) == [("on_sale", 1)]

    @pytest.mark.asyncio
    async def test_dimension_exclusion_narrows_other_attributes(
        self, catalog: InMemoryCatalog
    ) -> None:
        """In dimension mode colors are counted under the size filter."""
        aggregator = FacetAggregator(catalog, FacetExclusion.DIMENSION)
        facets = by_dimension(
            await aggregator.compute_facets("clothing", FilterSet(sizes={"S"}))
        )

        assert counts(facets["sizes"]) == [("S", 2), ("M", 1), ("L", 1)]
        assert counts(facets["colors"]) == [("Red", 1), ("Blue", 1)]
        assert counts(facets["attributes.material"]) == [("Cotton", 1), ("Linen", 1)]

    @pytest.mark.asyncio
    async def test_selected_value_listed_with_zero_count(
        self, aggregator: FacetAggregator
    ) -> None:
        """A selected value stays visible even when nothing matches it."""
        facets = by_dimension(
            await aggregator.compute_facets(
                "clothing",
                FilterSet(brands={"Acme"}, colors={"Blue"}),
            )
        )

        colors = facets["colors"]
        assert counts(colors) == [("Red", 2), ("Blue", 0)]
        assert colors.values[1].selected
        assert counts(facets["brands"]) == [("Acme", 0), ("Globex", 2)]
        assert colors.total_matching == 0

    @pytest.mark.asyncio
    async def test_zero_count_values_omitted(self, aggregator: FacetAggregator) -> None:
        """Unselected values without matches are hidden."""
        facets = by_dimension(
            await aggregator.compute_facets("clothing", FilterSet(price_range=(1000, 1500)))
        )

        assert counts(facets["sizes"]) == [("S", 2)]
        assert facets["price"].price_range == PriceBounds(min=1000, max=3500)
        assert facets["sizes"].total_matching == 2

    @pytest.mark.asyncio
    async def test_flag_filter(self, aggregator: FacetAggregator) -> None:
        """The in-stock flag counts itself lifted and narrows the others."""
        facets = by_dimension(
            await aggregator.compute_facets("clothing", FilterSet(in_stock=True))
        )

        in_stock = facets["in_stock"].values[0]
        assert (in_stock.count, in_stock.selected) == (3, True)
        assert counts(facets["on_sale"]) == [("on_sale", 1)]
        assert facets["in_stock"].total_matching == 3

    @pytest.mark.asyncio
    async def test_dynamic_attribute_filter(self, aggregator: FacetAggregator) -> None:
        """Dynamic attribute filters apply through attributes.<slug>."""
        facets = by_dimension(
            await aggregator.compute_facets(
                "clothing",
                FilterSet(attributes={"material": {"Linen"}}),
            )
        )

        assert facets["brands"].total_matching == 1
        assert counts(facets["brands"]) == [("Globex", 1)]
        assert counts(facets["attributes.material"]) == [("Cotton", 3), ("Linen", 1)]

    @pytest.mark.asyncio
    async def test_color_values_carry_swatches(self, aggregator: FacetAggregator) -> None:
        """Color facet values include their hex color."""
        facets = by_dimension(await aggregator.compute_facets("clothing"))

        colors = facets["colors"]
        assert colors.kind == FacetKind.COLOR
        assert [v.color_hex for v in colors.values] == ["#FF0000", "#0000FF"]
        assert facets["sizes"].values[0].color_hex is None
        assert colors.to_dict()["values"][0] == {
            "name": "Red",
            "count": 2,
            "selected": False,
            "color_hex": "#FF0000",
        }

    @pytest.mark.asyncio
    async def test_unknown_attribute_filter_is_ignored(
        self, aggregator: FacetAggregator
    ) -> None:
        """Filters on attributes outside the scope do not narrow results."""
        facets = await aggregator.compute_facets(
            "clothing",
            FilterSet(attributes={"fabric": {"Silk"}}),
        )
        assert facets[0].total_matching == 4

    @pytest.mark.asyncio
    async def test_unknown_category_yields_empty_facets(
        self, aggregator: FacetAggregator
    ) -> None:
        """An unknown category returns empty facets instead of raising."""
        facets = await aggregator.compute_facets("does-not-exist", FilterSet(sizes={"S"}))

        assert [f.dimension for f in facets] == ["brands", "price", "in_stock", "on_sale"]
        assert all(f.is_empty for f in facets)

    @pytest.mark.asyncio
    async def test_category_without_products(self, aggregator: FacetAggregator) -> None:
        """A known but empty category has no values."""
        facets = await aggregator.compute_facets("electronics")

        assert [f.dimension for f in facets] == ["brands", "price", "in_stock", "on_sale"]
        assert all(f.total_matching == 0 for f in facets)
        assert all(not f.values for f in facets)

    @pytest.mark.asyncio
    async def test_scope_includes_descendants(self, aggregator: FacetAggregator) -> None:
        """Parent and "all" scopes see products of subcategories."""
        parent = await aggregator.compute_facets("clothing")
        everything = await aggregator.compute_facets("all")
        leaf = await aggregator.compute_facets("shirts")

        assert parent[0].total_matching == 4
        assert everything[0].total_matching == 4
        assert counts(by_dimension(leaf)["brands"]) == [("Acme", 2), ("Globex", 2)]

    @pytest.mark.asyncio
    async def test_adding_constraints_never_increases_total(
        self, aggregator: FacetAggregator
    ) -> None:
        """Each added constraint narrows or keeps the result count."""
        steps = [
            FilterSet(),
            FilterSet(sizes={"S", "M"}),
            FilterSet(sizes={"S", "M"}, brands={"Acme"}),
            FilterSet(sizes={"S", "M"}, brands={"Acme"}, in_stock=True),
            FilterSet(sizes={"S", "M"}, brands={"Acme"}, in_stock=True, price_range=(0, 1000)),
        ]
        totals = [await aggregator.count_matching("clothing", f) for f in steps]
        assert totals == sorted(totals, reverse=True)
        assert totals[0] == 4
        assert totals[-1] == 1

    @pytest.mark.asyncio
    async def test_count_matching(self, aggregator: FacetAggregator) -> None:
        """count_matching agrees with facet totals."""
        assert await aggregator.count_matching("clothing", FilterSet(sizes={"S"})) == 2
        assert await aggregator.count_matching("does-not-exist") == 0

    @pytest.mark.asyncio
    async def test_deterministic(self, aggregator: FacetAggregator) -> None:
        """The same inputs produce the same facets."""
        filters = FilterSet(colors={"Red"}, on_sale=False)
        first = await aggregator.compute_facets("clothing", filters)
        second = await aggregator.compute_facets("clothing", filters)
        assert [f.to_dict() for f in first] == [f.to_dict() for f in second]
