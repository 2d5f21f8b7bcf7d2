"""Shared fixtures for catalog tests.

The apparel fixture is a four-shirt catalog:

    id   size  color  material  brand   price  sale   stock
    p1   S     Red    Cotton    Acme    1000   -      5
    p2   S     Blue   Linen     Globex  2000   1500   0
    p3   M     Red    Cotton    Acme    3000   -      3
    p4   L     Blue   Cotton    Globex  4000   3500   2
"""

import pytest

from storefront.catalog.facets import FacetAggregator, FacetExclusion
from storefront.catalog.memory import InMemoryCatalog, InMemoryVariantStore
from storefront.catalog.taxonomy import Category, CategoryTree
from storefront.domain import Attribute, AttributeValue, BasePricing, CatalogItem, ProductRecord

SIZE = Attribute(
    id="attr-size",
    name="Size",
    slug="size",
    values=(
        AttributeValue(id="size-s", value="S", sort_order=0),
        AttributeValue(id="size-m", value="M", sort_order=1),
        AttributeValue(id="size-l", value="L", sort_order=2),
    ),
)

COLOR = Attribute(
    id="attr-color",
    name="Color",
    slug="color",
    values=(
        AttributeValue(id="color-red", value="Red", color_hex="#FF0000", sort_order=0),
        AttributeValue(id="color-blue", value="Blue", color_hex="#0000FF", sort_order=1),
    ),
)

MATERIAL = Attribute(
    id="attr-material",
    name="Material",
    slug="material",
    values=(
        AttributeValue(id="material-cotton", value="Cotton", sort_order=0),
        AttributeValue(id="material-linen", value="Linen", sort_order=1),
    ),
)


def shirt(
    product_id: str,
    size: str,
    color: str,
    material: str,
    brand: str,
    price: int,
    sale_price: int | None,
    stock: int,
) -> CatalogItem:
    """Create a shirt catalog item."""
    return CatalogItem(
        id=product_id,
        category_id="shirts",
        brand=brand,
        price=price,
        sale_price=sale_price,
        stock=stock,
        attributes={"size": (size,), "color": (color,), "material": (material,)},
    )


@pytest.fixture
def tree() -> CategoryTree:
    """Create a small category tree."""
    return CategoryTree(
        [
            Category(id="clothing", name="Clothing", slug="clothing"),
            Category(id="shirts", name="Shirts", slug="shirts", parent_id="clothing"),
            Category(id="electronics", name="Electronics", slug="electronics"),
        ]
    )


@pytest.fixture
def catalog(tree: CategoryTree) -> InMemoryCatalog:
    """Create the four-shirt apparel catalog."""
    catalog = InMemoryCatalog(tree)
    catalog.set_attributes("clothing", [SIZE, COLOR, MATERIAL])
    catalog.add_items(
        [
            shirt("p1", "S", "Red", "Cotton", "Acme", 1000, None, 5),
            shirt("p2", "S", "Blue", "Linen", "Globex", 2000, 1500, 0),
            shirt("p3", "M", "Red", "Cotton", "Acme", 3000, None, 3),
            shirt("p4", "L", "Blue", "Cotton", "Globex", 4000, 3500, 2),
        ]
    )
    return catalog


@pytest.fixture
def aggregator(catalog: InMemoryCatalog) -> FacetAggregator:
    """Create an aggregator lifting attribute dimensions as a group."""
    return FacetAggregator(catalog, FacetExclusion.GROUP)


@pytest.fixture
def store() -> InMemoryVariantStore:
    """Create a variant store with two T-shirts and two SKU-less products.

    The second T-shirt's SKU reduces to the same root as the first.
    """
    store = InMemoryVariantStore()
    store.add_product(
        ProductRecord(
            id="tshirt",
            name="Classic T-Shirt",
            sku="TSHIRT",
            pricing=BasePricing(price=2000, stock=10),
        ),
        [SIZE, COLOR],
    )
    store.add_product(
        ProductRecord(
            id="tshirt-copy",
            name="Classic T-Shirt (Copy)",
            sku="T-Shirt",
            pricing=BasePricing(price=2000),
        ),
        [SIZE, COLOR],
    )
    store.add_product(ProductRecord(id="plain-a", name="Plain A"), [SIZE, COLOR])
    store.add_product(ProductRecord(id="plain-b", name="Plain B"), [SIZE, COLOR])
    return store
