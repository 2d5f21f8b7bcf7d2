"""Tests for filter sets and item matching."""

import pytest

from storefront.domain import (
    CatalogItem,
    Dimension,
    FilterSet,
    InvalidPriceRangeError,
    ItemCriteria,
    PriceBounds,
    attribute_dimension,
)
from storefront.domain.filters import parse_attribute_dimension


def make_item(**overrides) -> CatalogItem:
    """Create a catalog item with defaults."""
    data = {
        "id": "p1",
        "category_id": "shirts",
        "brand": "Acme",
        "price": 2000,
        "stock": 5,
        "attributes": {"size": ("S", "M"), "color": ("Red",)},
    }
    data.update(overrides)
    return CatalogItem(**data)


class TestCatalogItem:
    """Tests for CatalogItem."""

    def test_effective_price_uses_sale_price(self) -> None:
        """Sale price wins when present."""
        assert make_item().effective_price == 2000
        assert make_item(sale_price=1500).effective_price == 1500

    def test_is_on_sale(self) -> None:
        """Only a sale price below the base price counts as a sale."""
        assert make_item(sale_price=1500).is_on_sale
        assert not make_item().is_on_sale
        assert not make_item(sale_price=2000).is_on_sale

    def test_is_in_stock(self) -> None:
        """Items with zero stock are unavailable."""
        assert make_item().is_in_stock
        assert not make_item(stock=0).is_in_stock

    def test_values_for_unknown_attribute(self) -> None:
        """Unknown attributes have no values."""
        assert make_item().values_for("material") == ()


class TestPriceBounds:
    """Tests for PriceBounds."""

    def test_bounds_of_items(self) -> None:
        """Bounds span effective prices."""
        items = [make_item(price=1000), make_item(price=5000, sale_price=3000)]
        assert PriceBounds.of(items) == PriceBounds(min=1000, max=3000)

    def test_bounds_of_nothing(self) -> None:
        """No items yields (0, 0)."""
        assert PriceBounds.of([]) == PriceBounds(min=0, max=0)


class TestDimensions:
    """Tests for dimension naming."""

    def test_attribute_dimension_round_trip(self) -> None:
        """Dynamic dimensions are prefixed with 'attributes.'."""
        assert attribute_dimension("material") == "attributes.material"
        assert parse_attribute_dimension("attributes.material") == "material"
        assert parse_attribute_dimension("sizes") is None


class TestFilterSet:
    """Tests for FilterSet."""

    def test_default_is_empty(self) -> None:
        """A default FilterSet constrains nothing."""
        assert FilterSet().is_empty
        assert not FilterSet(in_stock=True).is_empty

    def test_normalizes_collections(self) -> None:
        """Lists become frozensets and empty attribute keys are dropped."""
        filters = FilterSet(
            brands=["Acme", "Acme"],
            sizes=("S",),
            attributes={"material": ["Cotton"], "fit": []},
        )
        assert filters.brands == frozenset({"Acme"})
        assert filters.sizes == frozenset({"S"})
        assert filters.attributes == {"material": frozenset({"Cotton"})}

    def test_equality_ignores_input_types(self) -> None:
        """Equal selections compare equal regardless of input collection."""
        assert FilterSet(sizes=["S", "M"]) == FilterSet(sizes={"M", "S"})

    def test_invalid_price_range(self) -> None:
        """A lower bound above the upper bound is rejected."""
        with pytest.raises(InvalidPriceRangeError) as exc_info:
            FilterSet(price_range=(5000, 1000))
        assert exc_info.value.details == {"min": 5000, "max": 1000}

    def test_selected(self) -> None:
        """Selected values are read per dimension."""
        filters = FilterSet(colors={"Red"}, attributes={"material": {"Wool"}})
        assert filters.selected(Dimension.COLORS) == frozenset({"Red"})
        assert filters.selected("attributes.material") == frozenset({"Wool"})
        assert filters.selected(Dimension.PRICE) == frozenset()

    def test_cleared_removes_one_dimension(self) -> None:
        """Clearing drops only the named dimension."""
        filters = FilterSet(sizes={"S"}, price_range=(1000, 5000), on_sale=True)
        assert filters.cleared(Dimension.SIZES) == FilterSet(
            price_range=(1000, 5000), on_sale=True
        )
        assert filters.cleared(Dimension.PRICE).price_range is None
        assert not filters.cleared(Dimension.ON_SALE).on_sale

    def test_cleared_attribute_dimension(self) -> None:
        """Clearing an attribute dimension removes its key."""
        filters = FilterSet(attributes={"material": {"Wool"}})
        assert filters.cleared("attributes.material").attributes == {}

    def test_toggled(self) -> None:
        """Toggling adds a missing value and removes a present one."""
        filters = FilterSet().toggled(Dimension.SIZES, "M")
        assert filters.sizes == frozenset({"M"})
        assert filters.toggled(Dimension.SIZES, "M").sizes == frozenset()

    def test_with_selected_rejects_single_value_dimension(self) -> None:
        """Price and flags are not multi-select."""
        with pytest.raises(ValueError):
            FilterSet().with_selected(Dimension.PRICE, ["1"])

    def test_to_dict(self) -> None:
        """Dictionary form uses sorted lists."""
        data = FilterSet(sizes={"M", "L"}, price_range=(100, 200)).to_dict()
        assert data["sizes"] == ["L", "M"]
        assert data["price_range"] == [100, 200]
        assert data["attributes"] == {}


class TestItemCriteria:
    """Tests for ItemCriteria matching."""

    def test_empty_criteria_match_everything(self) -> None:
        """No constraints accepts any item."""
        assert ItemCriteria().matches(make_item(stock=0))

    def test_or_within_dimension(self) -> None:
        """Any selected value of a dimension matches."""
        criteria = ItemCriteria(attributes={"size": frozenset({"M", "XL"})})
        assert criteria.matches(make_item())

    def test_and_across_dimensions(self) -> None:
        """Every constrained dimension must match."""
        criteria = ItemCriteria(
            brands=frozenset({"Acme"}),
            attributes={
                "size": frozenset({"S"}),
                "color": frozenset({"Blue"}),
            },
        )
        assert not criteria.matches(make_item())

    def test_price_on_effective_price(self) -> None:
        """Price bounds are inclusive and compare the sale price."""
        criteria = ItemCriteria(price_range=(1000, 1500))
        assert criteria.matches(make_item(sale_price=1500))
        assert not criteria.matches(make_item())

    def test_flags(self) -> None:
        """Stock and sale flags filter when set."""
        assert not ItemCriteria(in_stock=True).matches(make_item(stock=0))
        assert not ItemCriteria(on_sale=True).matches(make_item())
        assert ItemCriteria(on_sale=True).matches(make_item(sale_price=100))

    def test_missing_brand_never_matches_brand_filter(self) -> None:
        """Unbranded items fail a brand constraint."""
        assert not ItemCriteria(brands=frozenset({"Acme"})).matches(make_item(brand=None))

    def test_cleared(self) -> None:
        """Clearing keys drops the matching constraints."""
        criteria = ItemCriteria(
            brands=frozenset({"Acme"}),
            price_range=(1, 2),
            attributes={"size": frozenset({"S"}), "color": frozenset({"Red"})},
        )
        cleared = criteria.cleared("brands", "attributes.size")
        assert cleared.brands == frozenset()
        assert cleared.price_range == (1, 2)
        assert cleared.attributes == {"color": frozenset({"Red"})}

    def test_cleared_without_changes_returns_same(self) -> None:
        """Clearing absent constraints keeps the criteria."""
        criteria = ItemCriteria(brands=frozenset({"Acme"}))
        assert criteria.cleared("attributes.size") is criteria
