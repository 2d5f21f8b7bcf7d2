"""In-memory catalog and variant storage.

Used by tests and by the API when ``catalog_backend`` is "memory".
"""

from collections.abc import Iterable
from uuid import uuid4

import structlog

from storefront.catalog.taxonomy import Category, CategoryScope, CategoryTree
from storefront.domain.attributes import Attribute
from storefront.domain.exceptions import ProductNotFoundError, SkuCollisionError
from storefront.domain.filters import CatalogItem, ItemCriteria
from storefront.domain.variants import ProductRecord, Variant, VariantDraft

logger = structlog.get_logger()


# ============================================================================
# Catalog Query
# ============================================================================


class InMemoryCatalog:
    """In-memory catalog items grouped by category."""

    def __init__(self, tree: CategoryTree | None = None) -> None:
        self.tree = tree or CategoryTree()
        self._items: dict[str, CatalogItem] = {}
        self._attributes: dict[str, list[Attribute]] = {}

    def add_category(self, category: Category) -> Category:
        """Add a category to the tree."""
        return self.tree.add(category)

    def set_attributes(self, category_id: str, attributes: Iterable[Attribute]) -> None:
        """Set filterable attributes of a category."""
        self._attributes[category_id] = list(attributes)

    def add_item(self, item: CatalogItem) -> None:
        """Add or replace a catalog item."""
        self._items[item.id] = item

    def add_items(self, items: Iterable[CatalogItem]) -> None:
        """Add or replace catalog items."""
        for item in items:
            self.add_item(item)

    async def resolve_scope(self, category_slug: str) -> CategoryScope | None:
        """Resolve a category slug into a scope."""
        return self.tree.resolve_scope(category_slug)

    async def get_attributes(self, scope: CategoryScope) -> list[Attribute]:
        """Get attributes of every category in scope, first declaration wins."""
        seen: set[str] = set()
        result: list[Attribute] = []
        for category_id, attributes in self._attributes.items():
            if not scope.contains(category_id):
                continue
            for attribute in attributes:
                if attribute.slug not in seen:
                    seen.add(attribute.slug)
                    result.append(attribute)
        return result

    async def find_items(
        self,
        scope: CategoryScope,
        criteria: ItemCriteria,
    ) -> list[CatalogItem]:
        """Get items in scope matching criteria, ordered by ID."""
        return sorted(
            (
                item
                for item in self._items.values()
                if scope.contains(item.category_id) and criteria.matches(item)
            ),
            key=lambda item: item.id,
        )


# ============================================================================
# Variant Store
# ============================================================================


class InMemoryVariantStore:
    """In-memory products, their variant attributes and variants.

    SKUs are unique across all products.
    """

    def __init__(self) -> None:
        self._products: dict[str, ProductRecord] = {}
        self._attributes: dict[str, list[Attribute]] = {}
        self._variants: dict[str, list[Variant]] = {}
        self._skus: dict[str, str] = {}

    def add_product(
        self,
        product: ProductRecord,
        attributes: Iterable[Attribute] = (),
    ) -> ProductRecord:
        """Add a product with its variant attributes."""
        self._products[product.id] = product
        self._attributes[product.id] = list(attributes)
        self._variants.setdefault(product.id, [])
        return product

    async def get_product(self, product_id: str) -> ProductRecord | None:
        """Get product by ID."""
        return self._products.get(product_id)

    async def get_attributes(self, product_id: str) -> list[Attribute]:
        """Get the product's variant attributes."""
        return list(self._attributes.get(product_id, []))

    async def list_variants(self, product_id: str) -> list[Variant]:
        """Get the product's variants in creation order."""
        return list(self._variants.get(product_id, []))

    async def create_variant(self, product_id: str, draft: VariantDraft) -> Variant:
        """Persist a variant.

        Creating a variant whose option set already exists returns the
        existing variant unchanged.

        Raises:
            ProductNotFoundError: If the product doesn't exist.
            SkuCollisionError: If the SKU is already used.
        """
        if product_id not in self._products:
            raise ProductNotFoundError(product_id)

        variants = self._variants[product_id]
        for variant in variants:
            if variant.key == draft.key:
                logger.debug(
                    "Variant already exists",
                    product_id=product_id,
                    variant_id=variant.id,
                )
                return variant

        if draft.sku in self._skus:
            raise SkuCollisionError(draft.sku, product_id)

        variant = Variant(
            id=str(uuid4()),
            product_id=product_id,
            name=draft.name,
            sku=draft.sku,
            price=draft.pricing.price,
            sale_price=draft.pricing.sale_price,
            cost_price=draft.pricing.cost_price,
            stock=draft.pricing.stock,
            is_default=draft.is_default,
            options=draft.options,
        )
        variants.append(variant)
        self._skus[draft.sku] = variant.id
        return variant


# Global store instances
_catalog: InMemoryCatalog | None = None
_variant_store: InMemoryVariantStore | None = None


def get_memory_catalog() -> InMemoryCatalog:
    """Get in-memory catalog singleton."""
    global _catalog
    if _catalog is None:
        _catalog = InMemoryCatalog()
    return _catalog


def get_memory_variant_store() -> InMemoryVariantStore:
    """Get in-memory variant store singleton."""
    global _variant_store
    if _variant_store is None:
        _variant_store = InMemoryVariantStore()
    return _variant_store


def reset_memory_stores() -> None:
    """Reset in-memory stores (for testing)."""
    global _catalog, _variant_store
    _catalog = InMemoryCatalog()
    _variant_store = InMemoryVariantStore()
