"""Demo catalog with deterministic seeding.

Builds a small apparel and electronics catalog over an embedded taxonomy
subset. Every product is derived from a hash of (seed, category, index),
so the same config always yields the same catalog.
"""

import hashlib
import random
import uuid
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.memory import InMemoryCatalog, InMemoryVariantStore
from storefront.catalog.models import (
    AttributeModel,
    AttributeValueModel,
    CategoryAttributeModel,
    CategoryModel,
    ProductAttributeModel,
    ProductModel,
)
from storefront.catalog.taxonomy import Category, CategoryTree, slugify
from storefront.domain.attributes import Attribute, AttributeValue
from storefront.domain.filters import CatalogItem
from storefront.domain.variants import BasePricing, ProductRecord

logger = structlog.get_logger()


# ============================================================================
# Constants
# ============================================================================

EMBEDDED_TAXONOMY = """
166 - Apparel & Accessories
1604 - Apparel & Accessories > Clothing
5322 - Apparel & Accessories > Clothing > Shirts & Tops
204 - Apparel & Accessories > Clothing > Pants
2271 - Apparel & Accessories > Clothing > Dresses
5598 - Apparel & Accessories > Clothing > Outerwear
187 - Apparel & Accessories > Shoes
6551 - Apparel & Accessories > Handbags & Wallets
222 - Electronics
2082 - Electronics > Mobile Phones
328 - Electronics > Laptops
3622 - Electronics > Headphones
""".strip()

# Synthetic brand names (fictional companies)
BRANDS = [
    "Acme",
    "Contoso",
    "Northwind",
    "Fabrikam",
    "Tailwind",
    "Globex",
]

SIZES = ["XS", "S", "M", "L", "XL"]

SHOE_SIZES = ["39", "40", "41", "42", "43", "44"]

COLORS = [
    ("Black", "#000000"),
    ("White", "#FFFFFF"),
    ("Red", "#D32F2F"),
    ("Blue", "#1976D2"),
    ("Green", "#388E3C"),
    ("Navy", "#1A237E"),
    ("Gray", "#9E9E9E"),
]

MATERIALS = ["Cotton", "Linen", "Wool", "Denim", "Leather", "Polyester"]

STORAGE = ["64 GB", "128 GB", "256 GB", "512 GB"]

# Price ranges by category name (in cents)
PRICE_RANGES: dict[str, tuple[int, int]] = {
    "Shirts & Tops": (1499, 5999),
    "Pants": (2999, 8999),
    "Dresses": (3999, 14999),
    "Outerwear": (5999, 29999),
    "Shoes": (4999, 19999),
    "Handbags & Wallets": (2999, 24999),
    "Mobile Phones": (19999, 129999),
    "Laptops": (49999, 299999),
    "Headphones": (2999, 39999),
    "default": (999, 9999),
}

PRODUCT_NOUNS: dict[str, list[str]] = {
    "Shirts & Tops": ["T-Shirt", "Polo", "Oxford Shirt"],
    "Pants": ["Jeans", "Chinos", "Joggers"],
    "Dresses": ["Wrap Dress", "Maxi Dress"],
    "Outerwear": ["Parka", "Trench Coat", "Bomber Jacket"],
    "Shoes": ["Sneakers", "Runners", "Loafers"],
    "Handbags & Wallets": ["Tote", "Wallet", "Crossbody Bag"],
    "Mobile Phones": ["Phone", "Smartphone"],
    "Laptops": ["Laptop", "Notebook"],
    "Headphones": ["Headphones", "Earbuds"],
    "default": ["Essential"],
}

# Adjectives for product names
ADJECTIVES = ["Classic", "Essential", "Urban", "Prime", "Flex", "Nova", "Core"]


def _values(slug: str, names: list[str], hexes: dict[str, str] | None = None) -> tuple[AttributeValue, ...]:
    return tuple(
        AttributeValue(
            id=f"{slug}-{slugify(name)}",
            value=name,
            color_hex=(hexes or {}).get(name),
            sort_order=index,
        )
        for index, name in enumerate(names)
    )


SIZE = Attribute(id="attr-size", name="Size", slug="size", values=_values("size", SIZES))
SHOE_SIZE = Attribute(
    id="attr-shoe-size",
    name="Shoe Size",
    slug="shoe-size",
    values=_values("shoe-size", SHOE_SIZES),
)
COLOR = Attribute(
    id="attr-color",
    name="Color",
    slug="color",
    values=_values("color", [name for name, _ in COLORS], dict(COLORS)),
)
MATERIAL = Attribute(
    id="attr-material",
    name="Material",
    slug="material",
    values=_values("material", MATERIALS),
)
STORAGE_CAPACITY = Attribute(
    id="attr-storage",
    name="Storage",
    slug="storage",
    values=_values("storage", STORAGE),
)

# Filterable attributes by category name, inherited by subcategories
CATEGORY_ATTRIBUTES: dict[str, list[Attribute]] = {
    "Clothing": [SIZE, COLOR, MATERIAL],
    "Shoes": [SHOE_SIZE, COLOR, MATERIAL],
    "Handbags & Wallets": [COLOR, MATERIAL],
    "Mobile Phones": [COLOR, STORAGE_CAPACITY],
    "Laptops": [STORAGE_CAPACITY, COLOR],
    "Headphones": [COLOR],
}

# Attributes that describe the product itself rather than its variants
STATIC_ATTRIBUTES = {MATERIAL.slug}


# ============================================================================
# Seed Configuration
# ============================================================================


@dataclass
class SeedConfig:
    """Configuration for demo catalog generation.

    Attributes:
        seed: Random seed for reproducibility.
        products_per_category: Products per leaf category.
        sale_ratio: Share of products with a sale price.
        out_of_stock_ratio: Share of products without stock.
    """

    seed: int = 42
    products_per_category: int = 6
    sale_ratio: float = 0.3
    out_of_stock_ratio: float = 0.1

    @classmethod
    def small(cls) -> "SeedConfig":
        """Create config for a small catalog (~50 products)."""
        return cls(products_per_category=6)

    @classmethod
    def full(cls) -> "SeedConfig":
        """Create config for a full catalog (~200 products)."""
        return cls(products_per_category=20)


@dataclass
class SeedProduct:
    """A generated product with its facet and variant data.

    Attributes:
        record: Product record (ID, name, SKU, pricing).
        brand: Brand name.
        category_id: Leaf category.
        variant_attributes: Attributes the product's variants are built from.
        attribute_values: Attribute slug -> values the product offers.
    """

    record: ProductRecord
    brand: str
    category_id: str
    variant_attributes: list[Attribute] = field(default_factory=list)
    attribute_values: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def to_item(self) -> CatalogItem:
        """Convert to a catalog item."""
        pricing = self.record.pricing
        return CatalogItem(
            id=self.record.id,
            category_id=self.category_id,
            brand=self.brand,
            price=pricing.price,
            sale_price=pricing.sale_price,
            stock=pricing.stock,
            attributes=dict(self.attribute_values),
        )


@dataclass
class DemoCatalog:
    """Generated catalog, independent of storage."""

    tree: CategoryTree
    category_attributes: dict[str, list[Attribute]]
    products: list[SeedProduct]


# ============================================================================
# Catalog Seeder
# ============================================================================


class CatalogSeeder:
    """Generates the demo catalog.

    Example usage:
        demo = CatalogSeeder(SeedConfig.small()).build()
        seed_memory(get_memory_catalog(), get_memory_variant_store(), demo)
    """

    def __init__(self, config: SeedConfig | None = None) -> None:
        """Initialize seeder.

        Args:
            config: Generation config (defaults to SeedConfig.small()).
        """
        self.config = config or SeedConfig.small()

    def build(self) -> DemoCatalog:
        """Generate categories, attributes and products."""
        tree = CategoryTree.parse(EMBEDDED_TAXONOMY.splitlines())

        category_attributes: dict[str, list[Attribute]] = {}
        for category in tree.get_all():
            attributes = self._attributes_for(category)
            if attributes:
                category_attributes[category.id] = attributes

        products = [
            self._generate_product(category, index, self._attributes_for(category))
            for category in tree.get_leaf_categories()
            for index in range(self.config.products_per_category)
        ]
        return DemoCatalog(tree=tree, category_attributes=category_attributes, products=products)

    def _deterministic_seed(self, *args: str | int) -> int:
        """Create deterministic seed from arguments."""
        data = "|".join(str(a) for a in args)
        hash_bytes = hashlib.md5(data.encode()).digest()
        return int.from_bytes(hash_bytes[:4], "big")

    def _attributes_for(self, category: Category) -> list[Attribute]:
        """Get attributes of the nearest category on the path that has any."""
        for part in reversed(category.path_parts):
            if part in CATEGORY_ATTRIBUTES:
                return CATEGORY_ATTRIBUTES[part]
        return []

    @staticmethod
    def _lookup(table: dict[str, Any], category: Category) -> Any:
        for part in reversed(category.path_parts):
            if part in table:
                return table[part]
        return table["default"]

    def _generate_sku(self, category: Category, index: int) -> str:
        """Generate product SKU (e.g., "PAN-0204-003")."""
        prefix = "".join(c for c in category.name if c.isalpha())[:3].upper() or "PRD"
        return f"{prefix}-{category.id.zfill(4)}-{index:03d}"

    def _generate_product(
        self,
        category: Category,
        index: int,
        attributes: list[Attribute],
    ) -> SeedProduct:
        """Generate a single product."""
        seed = self._deterministic_seed(self.config.seed, category.id, index)
        rng = random.Random(seed)

        brand = rng.choice(BRANDS)
        noun = rng.choice(self._lookup(PRODUCT_NOUNS, category))
        name = f"{brand} {rng.choice(ADJECTIVES)} {noun}"
        sku = self._generate_sku(category, index)

        min_price, max_price = self._lookup(PRICE_RANGES, category)
        price = (rng.randint(min_price, max_price) // 100) * 100 + 99
        sale_price = None
        if rng.random() < self.config.sale_ratio:
            sale_price = (price * rng.choice([70, 80, 90]) // 100 // 100) * 100 + 99
            if sale_price >= price:
                sale_price = None
        stock = 0 if rng.random() < self.config.out_of_stock_ratio else rng.randint(5, 200)

        offered: dict[str, tuple[str, ...]] = {}
        for attribute in attributes:
            names = attribute.value_names
            count = 1 if attribute.slug in STATIC_ATTRIBUTES else rng.randint(1, min(4, len(names)))
            chosen = set(rng.sample(names, count))
            offered[attribute.slug] = tuple(n for n in names if n in chosen)

        product_id = str(uuid.UUID(hashlib.md5(f"{self.config.seed}:{sku}".encode()).hexdigest()))

        return SeedProduct(
            record=ProductRecord(
                id=product_id,
                name=name,
                sku=sku,
                pricing=BasePricing(price=price, sale_price=sale_price, stock=stock),
            ),
            brand=brand,
            category_id=category.id,
            variant_attributes=[a for a in attributes if a.slug not in STATIC_ATTRIBUTES],
            attribute_values=offered,
        )


# ============================================================================
# Loaders
# ============================================================================


def seed_memory(
    catalog: InMemoryCatalog,
    store: InMemoryVariantStore,
    demo: DemoCatalog,
) -> dict[str, int]:
    """Load a demo catalog into the in-memory stores.

    Args:
        catalog: Catalog to fill (its tree is replaced).
        store: Variant store to fill.
        demo: Generated catalog.

    Returns:
        Counts of seeded categories and products.
    """
    catalog.tree = demo.tree
    for category_id, attributes in demo.category_attributes.items():
        catalog.set_attributes(category_id, attributes)
    for product in demo.products:
        catalog.add_item(product.to_item())
        store.add_product(product.record, product.variant_attributes)

    counts = {"categories": len(demo.tree.get_all()), "products": len(demo.products)}
    logger.info("Seeded in-memory catalog", **counts)
    return counts


async def seed_database(session: AsyncSession, demo: DemoCatalog) -> dict[str, int]:
    """Insert a demo catalog into the database.

    Expects empty tables. Flushes but does not commit.

    Args:
        session: Async SQLAlchemy session.
        demo: Generated catalog.

    Returns:
        Counts of seeded categories, attributes and products.
    """
    categories = sorted(demo.tree.get_all(), key=lambda c: c.level)
    session.add_all(
        CategoryModel(
            id=c.id,
            name=c.name,
            slug=c.slug,
            full_path=c.full_path,
            parent_id=c.parent_id,
        )
        for c in categories
    )
    await session.flush()

    attributes: dict[str, Attribute] = {}
    for category_attributes in demo.category_attributes.values():
        for attribute in category_attributes:
            attributes.setdefault(attribute.id, attribute)

    session.add_all(
        AttributeModel(
            id=a.id,
            name=a.name,
            slug=a.slug,
            priority_class=int(a.priority_class) if a.priority_class else None,
            value_kind=a.value_kind.value if a.value_kind else None,
            values=[
                AttributeValueModel(
                    id=v.id,
                    value=v.value,
                    color_hex=v.color_hex,
                    sort_order=v.sort_order,
                )
                for v in a.values
            ],
        )
        for a in attributes.values()
    )
    await session.flush()

    session.add_all(
        CategoryAttributeModel(category_id=category_id, attribute_id=a.id, position=position)
        for category_id, category_attributes in demo.category_attributes.items()
        for position, a in enumerate(category_attributes)
    )

    for product in demo.products:
        pricing = product.record.pricing
        session.add(
            ProductModel(
                id=product.record.id,
                name=product.record.name,
                sku=product.record.sku,
                brand=product.brand,
                category_id=product.category_id,
                price=pricing.price,
                sale_price=pricing.sale_price,
                cost_price=pricing.cost_price,
                stock=pricing.stock,
                attribute_values={k: list(v) for k, v in product.attribute_values.items()},
            )
        )
    await session.flush()

    session.add_all(
        ProductAttributeModel(product_id=p.record.id, attribute_id=a.id, position=position)
        for p in demo.products
        for position, a in enumerate(p.variant_attributes)
    )
    await session.flush()

    counts = {
        "categories": len(categories),
        "attributes": len(attributes),
        "products": len(demo.products),
    }
    logger.info("Seeded database catalog", **counts)
    return counts
