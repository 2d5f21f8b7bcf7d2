"""Collaborator interfaces consumed by the catalog core.

The facet aggregator reads through CatalogQuery; the variant generator reads
and writes through VariantStore. Both have an in-memory implementation
(storefront.catalog.memory) and a SQLAlchemy one (storefront.catalog.repository).
"""

from typing import Protocol

from storefront.catalog.taxonomy import CategoryScope
from storefront.domain.attributes import Attribute
from storefront.domain.filters import CatalogItem, ItemCriteria
from storefront.domain.variants import ProductRecord, Variant, VariantDraft


class CatalogQuery(Protocol):
    """Read access to the catalog for facet computation."""

    async def resolve_scope(self, category_slug: str) -> CategoryScope | None:
        """Resolve a category slug into a scope, None if unknown."""
        ...

    async def get_attributes(self, scope: CategoryScope) -> list[Attribute]:
        """Get filterable attributes of the scope."""
        ...

    async def find_items(
        self,
        scope: CategoryScope,
        criteria: ItemCriteria,
    ) -> list[CatalogItem]:
        """Get active items in scope matching criteria."""
        ...


class VariantStore(Protocol):
    """Read/write access to a product's options and variants."""

    async def get_product(self, product_id: str) -> ProductRecord | None:
        """Get a product, None if unknown."""
        ...

    async def get_attributes(self, product_id: str) -> list[Attribute]:
        """Get the product's variant attributes."""
        ...

    async def list_variants(self, product_id: str) -> list[Variant]:
        """Get the product's current variants."""
        ...

    async def create_variant(self, product_id: str, draft: VariantDraft) -> Variant:
        """Persist a variant.

        Raises:
            SkuCollisionError: If the SKU is already used by another variant.
        """
        ...
