"""Tests for in-memory catalog storage."""

import pytest

from storefront.catalog.memory import (
    InMemoryCatalog,
    InMemoryVariantStore,
    get_memory_catalog,
    get_memory_variant_store,
    reset_memory_stores,
)
from storefront.domain import (
    BasePricing,
    ItemCriteria,
    OptionPair,
    ProductNotFoundError,
    SkuCollisionError,
    VariantDraft,
)

from .conftest import COLOR, SIZE


def make_draft(sku: str, *pairs: tuple[str, str]) -> VariantDraft:
    """Create a variant draft."""
    return VariantDraft(
        name=" / ".join(v for _, v in pairs),
        sku=sku,
        pricing=BasePricing(price=1000),
        options=tuple(OptionPair(attribute_slug=s, value=v) for s, v in pairs),
    )


class TestInMemoryCatalog:
    """Tests for InMemoryCatalog."""

    @pytest.mark.asyncio
    async def test_find_items_in_scope(self, catalog: InMemoryCatalog) -> None:
        """Items are filtered by scope and criteria, ordered by ID."""
        scope = await catalog.resolve_scope("clothing")
        items = await catalog.find_items(scope, ItemCriteria(brands=frozenset({"Globex"})))
        assert [i.id for i in items] == ["p2", "p4"]

    @pytest.mark.asyncio
    async def test_attributes_of_scope(self, catalog: InMemoryCatalog) -> None:
        """Attributes of categories inside the scope are returned once."""
        catalog.set_attributes("shirts", [COLOR, SIZE])

        scope = await catalog.resolve_scope("clothing")
        attributes = await catalog.get_attributes(scope)
        assert [a.slug for a in attributes] == ["size", "color", "material"]

        electronics = await catalog.resolve_scope("electronics")
        assert await catalog.get_attributes(electronics) == []


class TestInMemoryVariantStore:
    """Tests for InMemoryVariantStore."""

    @pytest.mark.asyncio
    async def test_create_and_list(self, store: InMemoryVariantStore) -> None:
        """Created variants are listed in creation order."""
        first = await store.create_variant("tshirt", make_draft("TSHIRT-S", ("size", "S")))
        second = await store.create_variant("tshirt", make_draft("TSHIRT-M", ("size", "M")))

        assert [v.id for v in await store.list_variants("tshirt")] == [first.id, second.id]
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_same_options_return_existing(self, store: InMemoryVariantStore) -> None:
        """Creating an existing option set returns the stored variant."""
        first = await store.create_variant(
            "tshirt", make_draft("TSHIRT-S-RED", ("size", "S"), ("color", "Red"))
        )
        again = await store.create_variant(
            "tshirt", make_draft("OTHER", ("color", "Red"), ("size", "S"))
        )

        assert again is first
        assert len(await store.list_variants("tshirt")) == 1

    @pytest.mark.asyncio
    async def test_sku_unique_across_products(self, store: InMemoryVariantStore) -> None:
        """A SKU used by any product cannot be reused."""
        await store.create_variant("plain-a", make_draft("VAR-S", ("size", "S")))
        with pytest.raises(SkuCollisionError):
            await store.create_variant("plain-b", make_draft("VAR-S", ("size", "S")))

    @pytest.mark.asyncio
    async def test_unknown_product(self, store: InMemoryVariantStore) -> None:
        """Creating for an unknown product fails."""
        with pytest.raises(ProductNotFoundError):
            await store.create_variant("missing", make_draft("X", ("size", "S")))

    @pytest.mark.asyncio
    async def test_product_and_attributes(self, store: InMemoryVariantStore) -> None:
        """Products and their variant attributes are readable."""
        product = await store.get_product("tshirt")
        assert product.sku == "TSHIRT"
        assert [a.slug for a in await store.get_attributes("tshirt")] == ["size", "color"]
        assert await store.get_product("missing") is None
        assert await store.get_attributes("missing") == []


class TestMemorySingletons:
    """Tests for in-memory store singletons."""

    def test_reset_replaces_instances(self) -> None:
        """Reset hands out fresh stores."""
        catalog = get_memory_catalog()
        store = get_memory_variant_store()
        assert get_memory_catalog() is catalog

        reset_memory_stores()

        assert get_memory_catalog() is not catalog
        assert get_memory_variant_store() is not store
