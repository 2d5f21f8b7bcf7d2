"""Variant generation.

Expands a product's selected attribute values into variants and persists
the ones the product does not have yet.

Generation is idempotent: combinations whose option set already exists on
the product are skipped, so re-running a request creates nothing new. SKU
collisions are reported per combination and never abort the batch.
Concurrent generations for the same product are serialized, and an
optional commit hook runs before the product's lock is released so the
next generation reads committed variants.
"""

import asyncio
import weakref
from collections.abc import Awaitable, Callable, Iterable, Mapping

import structlog

from storefront.catalog.combinations import (
    DEFAULT_SKU_ROOT,
    DEFAULT_SKU_SEPARATOR,
    preview_combinations,
)
from storefront.catalog.ports import VariantStore
from storefront.domain.attributes import Attribute, find_by_slug
from storefront.domain.exceptions import (
    EmptySelectionError,
    ProductNotFoundError,
    SkuCollisionError,
    UnknownOptionError,
)
from storefront.domain.variants import (
    BasePricing,
    GenerationResult,
    OptionKey,
    ProductRecord,
    SkipReason,
    SkippedCombination,
    Variant,
    VariantCombination,
    VariantDraft,
)

logger = structlog.get_logger()

CommitHook = Callable[[], Awaitable[None]]

# Per-product locks shared by all generators. Entries vanish once unused.
_product_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


class VariantGenerator:
    """Previews and generates product variants.

    Example usage:
        generator = VariantGenerator(store)

        # Preview without writing
        combinations = await generator.preview(
            product_id,
            {"size": ["S", "M"], "color": ["Red"]},
        )

        # Create missing variants
        result = await generator.generate_variants(
            product_id,
            {"size": ["S", "M"], "color": ["Red"]},
        )
        result.summary()  # {"created": 2, "skipped": 0, "failed": 0}
    """

    def __init__(
        self,
        store: VariantStore,
        sku_separator: str = DEFAULT_SKU_SEPARATOR,
        sku_fallback_root: str = DEFAULT_SKU_ROOT,
        commit: CommitHook | None = None,
    ) -> None:
        """Initialize generator.

        Args:
            store: Variant persistence.
            sku_separator: SKU segment separator.
            sku_fallback_root: SKU root prefix for products without a SKU.
            commit: Makes created variants durable (e.g., session.commit).
                Awaited while the product's lock is still held.
        """
        self.store = store
        self.sku_separator = sku_separator
        self.sku_fallback_root = sku_fallback_root
        self.commit = commit

    @staticmethod
    def _lock_for(product_id: str) -> asyncio.Lock:
        lock = _product_locks.get(product_id)
        if lock is None:
            lock = asyncio.Lock()
            _product_locks[product_id] = lock
        return lock

    async def _load_product(self, product_id: str) -> ProductRecord:
        product = await self.store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def _resolve_selections(
        self,
        product_id: str,
        selections: Mapping[str, Iterable[str]],
    ) -> dict[Attribute, list[str]]:
        """Map attribute slugs to the product's attributes.

        Raises:
            EmptySelectionError: If no attribute is selected.
            UnknownOptionError: If the product has no attribute with a slug.
        """
        if not selections:
            raise EmptySelectionError([])

        attributes = await self.store.get_attributes(product_id)
        resolved: dict[Attribute, list[str]] = {}
        for slug, tokens in selections.items():
            attribute = find_by_slug(attributes, slug)
            if attribute is None:
                raise UnknownOptionError(slug)
            resolved[attribute] = list(tokens)
        return resolved

    async def _combinations(
        self,
        product: ProductRecord,
        selections: Mapping[str, Iterable[str]],
    ) -> list[VariantCombination]:
        resolved = await self._resolve_selections(product.id, selections)
        return preview_combinations(
            resolved,
            product_sku=product.sku,
            product_id=product.id,
            separator=self.sku_separator,
            fallback_root=self.sku_fallback_root,
        )

    async def preview(
        self,
        product_id: str,
        selections: Mapping[str, Iterable[str]],
    ) -> list[VariantCombination]:
        """Preview combinations for a product without persisting anything.

        Args:
            product_id: Product ID.
            selections: Attribute slug -> selected value ids (or values).

        Returns:
            Combinations in canonical order.

        Raises:
            ProductNotFoundError: If the product doesn't exist.
            EmptySelectionError: If the selection is empty.
            UnknownOptionError: If a slug or value is not the product's.
        """
        product = await self._load_product(product_id)
        return await self._combinations(product, selections)

    async def generate_variants(
        self,
        product_id: str,
        selections: Mapping[str, Iterable[str]],
        pricing: BasePricing | None = None,
        overrides: Mapping[OptionKey, BasePricing] | None = None,
    ) -> GenerationResult:
        """Create the variants a product is missing.

        Existing variants are never modified or removed. The first created
        variant becomes the default only when the product had none before.

        Args:
            product_id: Product ID.
            selections: Attribute slug -> selected value ids (or values).
            pricing: Pricing for new variants (defaults to the product's).
            overrides: Per-combination pricing keyed by option key.

        Returns:
            Created, skipped and failed combinations.

        Raises:
            ProductNotFoundError: If the product doesn't exist.
            EmptySelectionError: If the selection is empty.
            UnknownOptionError: If a slug or value is not the product's.
        """
        product = await self._load_product(product_id)
        combinations = await self._combinations(product, selections)
        base = pricing or product.pricing
        overrides = overrides or {}

        result = GenerationResult()
        async with self._lock_for(product_id):
            existing = await self.store.list_variants(product_id)
            by_key = {variant.key: variant for variant in existing}
            used_skus = {variant.sku for variant in existing if variant.sku}
            needs_default = not existing

            for combination in combinations:
                current = by_key.get(combination.key)
                if current is not None:
                    result.skipped.append(self._existing(combination, current))
                    continue

                if combination.sku in used_skus:
                    result.failed.append(self._collision(combination, product_id))
                    continue

                draft = VariantDraft(
                    name=combination.name,
                    sku=combination.sku,
                    pricing=overrides.get(combination.key, base),
                    options=combination.options,
                    is_default=needs_default,
                )
                try:
                    variant = await self.store.create_variant(product_id, draft)
                except SkuCollisionError:
                    # Another writer may have created this combination meanwhile
                    current = await self._find_existing(product_id, combination)
                    if current is None:
                        result.failed.append(self._collision(combination, product_id))
                    else:
                        by_key[current.key] = current
                        result.skipped.append(self._existing(combination, current))
                    continue

                needs_default = False
                used_skus.add(variant.sku)
                by_key[variant.key] = variant
                result.created.append(variant)

            if self.commit is not None and result.created:
                await self.commit()

        logger.info(
            "Variants generated",
            product_id=product_id,
            combinations=len(combinations),
            **result.summary(),
        )
        return result

    async def _find_existing(
        self,
        product_id: str,
        combination: VariantCombination,
    ) -> Variant | None:
        for variant in await self.store.list_variants(product_id):
            if variant.key == combination.key:
                return variant
        return None

    @staticmethod
    def _existing(combination: VariantCombination, current: Variant) -> SkippedCombination:
        return SkippedCombination(
            combination=combination,
            reason=SkipReason.EXISTING,
            existing_variant_id=current.id,
        )

    @staticmethod
    def _collision(combination: VariantCombination, product_id: str) -> SkippedCombination:
        error = SkuCollisionError(combination.sku, product_id)
        logger.warning("Variant SKU collision", **error.details)
        return SkippedCombination(
            combination=combination,
            reason=SkipReason.SKU_COLLISION,
            detail=error.message,
        )
