"""Catalog service.

High-level facade combining facet aggregation and variant generation over
one storage backend (in-memory or SQLAlchemy).
"""

from collections.abc import Iterable, Mapping

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.facets import FacetAggregator, FacetExclusion, FacetResult
from storefront.catalog.generator import CommitHook, VariantGenerator
from storefront.catalog.memory import get_memory_catalog, get_memory_variant_store
from storefront.catalog.models import CategoryModel
from storefront.catalog.ports import CatalogQuery, VariantStore
from storefront.catalog.repository import CatalogRepository, VariantRepository
from storefront.catalog.seed import CatalogSeeder, SeedConfig, seed_database, seed_memory
from storefront.domain.attributes import Attribute
from storefront.domain.exceptions import ProductNotFoundError
from storefront.domain.filters import FilterSet
from storefront.domain.variants import (
    BasePricing,
    GenerationResult,
    OptionKey,
    Variant,
    VariantCombination,
)
from storefront.infrastructure.config import settings

logger = structlog.get_logger()


class CatalogService:
    """Service for catalog facet and variant operations.

    Example usage:
        service = CatalogService.in_memory()
        facets = await service.compute_facets("clothing", FilterSet(sizes={"M"}))

        async with async_session_factory() as session:
            service = CatalogService.for_session(session)
            result = await service.generate_variants(
                product_id,
                {"size": ["S", "M"], "color": ["Red"]},
            )
    """

    def __init__(
        self,
        catalog: CatalogQuery,
        variants: VariantStore,
        exclusion: FacetExclusion | str | None = None,
        commit: CommitHook | None = None,
    ) -> None:
        """Initialize service.

        Args:
            catalog: Catalog read access.
            variants: Variant persistence.
            exclusion: Facet self-exclusion mode (defaults to settings).
            commit: Commit hook run after variants are created.
        """
        self.catalog = catalog
        self.variants = variants
        self.aggregator = FacetAggregator(
            catalog,
            FacetExclusion(exclusion or settings.facet_exclusion),
        )
        self.generator = VariantGenerator(
            variants,
            sku_separator=settings.sku_separator,
            sku_fallback_root=settings.sku_fallback_root,
            commit=commit,
        )

    @classmethod
    def in_memory(cls) -> "CatalogService":
        """Create a service over the in-memory stores."""
        return cls(get_memory_catalog(), get_memory_variant_store())

    @classmethod
    def for_session(cls, session: AsyncSession) -> "CatalogService":
        """Create a service over a database session.

        Generated variants are committed before the product's generation
        lock is released.
        """
        return cls(
            CatalogRepository(session),
            VariantRepository(session),
            commit=session.commit,
        )

    # ========================================================================
    # Facets
    # ========================================================================

    async def compute_facets(
        self,
        category_slug: str,
        filters: FilterSet | None = None,
    ) -> list[FacetResult]:
        """Compute facets for a category under applied filters."""
        return await self.aggregator.compute_facets(category_slug, filters)

    async def count_matching(self, category_slug: str, filters: FilterSet | None = None) -> int:
        """Count products matching applied filters."""
        return await self.aggregator.count_matching(category_slug, filters)

    # ========================================================================
    # Variants
    # ========================================================================

    async def get_product_attributes(self, product_id: str) -> list[Attribute]:
        """Get a product's variant attributes.

        Raises:
            ProductNotFoundError: If the product doesn't exist.
        """
        if await self.variants.get_product(product_id) is None:
            raise ProductNotFoundError(product_id)
        return await self.variants.get_attributes(product_id)

    async def list_variants(self, product_id: str) -> list[Variant]:
        """Get a product's variants.

        Raises:
            ProductNotFoundError: If the product doesn't exist.
        """
        if await self.variants.get_product(product_id) is None:
            raise ProductNotFoundError(product_id)
        return await self.variants.list_variants(product_id)

    async def preview_variants(
        self,
        product_id: str,
        selections: Mapping[str, Iterable[str]],
    ) -> list[VariantCombination]:
        """Preview combinations without persisting anything."""
        return await self.generator.preview(product_id, selections)

    async def generate_variants(
        self,
        product_id: str,
        selections: Mapping[str, Iterable[str]],
        pricing: BasePricing | None = None,
        overrides: Mapping[OptionKey, BasePricing] | None = None,
    ) -> GenerationResult:
        """Create a product's missing variants."""
        return await self.generator.generate_variants(
            product_id,
            selections,
            pricing=pricing,
            overrides=overrides,
        )


# ============================================================================
# Seeding
# ============================================================================


def seed_memory_catalog(config: SeedConfig | None = None) -> dict[str, int]:
    """Seed the in-memory stores with the demo catalog."""
    demo = CatalogSeeder(config).build()
    return seed_memory(get_memory_catalog(), get_memory_variant_store(), demo)


async def seed_database_catalog(
    session: AsyncSession,
    config: SeedConfig | None = None,
) -> dict[str, int]:
    """Seed the database with the demo catalog unless categories exist.

    Returns:
        Seeded counts, empty when the database already had a catalog.
    """
    existing = await session.scalar(select(func.count()).select_from(CategoryModel))
    if existing:
        logger.info("Catalog already seeded", categories=existing)
        return {}
    return await seed_database(session, CatalogSeeder(config).build())
