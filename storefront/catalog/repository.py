"""SQLAlchemy catalog repositories.

CatalogRepository implements CatalogQuery for facet aggregation;
VariantRepository implements VariantStore for variant generation.
"""

from sqlalchemy import and_, case, func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.catalog.models import (
    AttributeModel,
    CategoryAttributeModel,
    CategoryModel,
    ProductAttributeModel,
    ProductModel,
    VariantModel,
)
from storefront.catalog.taxonomy import Category, CategoryScope, CategoryTree
from storefront.domain.attributes import Attribute
from storefront.domain.exceptions import ProductNotFoundError, SkuCollisionError
from storefront.domain.filters import CatalogItem, ItemCriteria
from storefront.domain.variants import ProductRecord, Variant, VariantDraft


class CatalogRepository:
    """Read access to categories, attributes and products.

    Brand, price and flag constraints are applied in SQL; attribute
    constraints are checked on the loaded items.

    Example usage:
        async with async_session_factory() as session:
            repo = CatalogRepository(session)
            scope = await repo.resolve_scope("clothing")
            items = await repo.find_items(scope, ItemCriteria(brands=frozenset({"Acme"})))
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def load_tree(self) -> CategoryTree:
        """Load the category tree."""
        result = await self.session.execute(select(CategoryModel))
        return CategoryTree(
            Category(
                id=row.id,
                name=row.name,
                slug=row.slug,
                full_path=row.full_path,
                parent_id=row.parent_id,
            )
            for row in result.scalars()
        )

    async def resolve_scope(self, category_slug: str) -> CategoryScope | None:
        """Resolve a category slug into a scope."""
        tree = await self.load_tree()
        return tree.resolve_scope(category_slug)

    async def get_attributes(self, scope: CategoryScope) -> list[Attribute]:
        """Get attributes of every category in scope, first declaration wins."""
        query = (
            select(AttributeModel)
            .join(CategoryAttributeModel, CategoryAttributeModel.attribute_id == AttributeModel.id)
            .where(CategoryAttributeModel.category_id.in_(sorted(scope.category_ids)))
            .order_by(CategoryAttributeModel.position, AttributeModel.slug)
        )
        result = await self.session.execute(query)

        seen: set[str] = set()
        attributes: list[Attribute] = []
        for row in result.scalars().unique():
            if row.slug in seen:
                continue
            seen.add(row.slug)
            attributes.append(row.to_domain())
        return attributes

    async def find_items(
        self,
        scope: CategoryScope,
        criteria: ItemCriteria,
    ) -> list[CatalogItem]:
        """Get active items in scope matching criteria, ordered by ID."""
        effective_price = case(
            (ProductModel.sale_price.is_not(None), ProductModel.sale_price),
            else_=ProductModel.price,
        )

        conditions = [
            ProductModel.is_active.is_(True),
            ProductModel.category_id.in_(sorted(scope.category_ids)),
        ]

        if criteria.brands:
            conditions.append(ProductModel.brand.in_(sorted(criteria.brands)))

        if criteria.price_range is not None:
            minimum, maximum = criteria.price_range
            conditions.append(effective_price.between(minimum, maximum))

        if criteria.in_stock:
            conditions.append(ProductModel.stock > 0)

        if criteria.on_sale:
            conditions.append(
                and_(
                    ProductModel.sale_price.is_not(None),
                    ProductModel.sale_price < ProductModel.price,
                )
            )

        query = (
            select(ProductModel)
            .where(and_(*conditions))
            .options(selectinload(ProductModel.variants))
            .order_by(ProductModel.id)
        )
        result = await self.session.execute(query)

        items = (product.to_item() for product in result.scalars())
        return [item for item in items if criteria.matches(item)]


class VariantRepository:
    """Read/write access to products' variant attributes and variants.

    Example usage:
        async with async_session_factory() as session:
            repo = VariantRepository(session)
            variants = await repo.list_variants(product_id)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def get_product(self, product_id: str) -> ProductRecord | None:
        """Get product by ID."""
        product = await self.session.get(ProductModel, product_id)
        return product.to_record() if product else None

    async def get_attributes(self, product_id: str) -> list[Attribute]:
        """Get the product's variant attributes in declared order."""
        query = (
            select(AttributeModel)
            .join(ProductAttributeModel, ProductAttributeModel.attribute_id == AttributeModel.id)
            .where(ProductAttributeModel.product_id == product_id)
            .order_by(ProductAttributeModel.position)
        )
        result = await self.session.execute(query)
        return [row.to_domain() for row in result.scalars().unique()]

    async def _variant_rows(self, product_id: str) -> list[VariantModel]:
        query = (
            select(VariantModel)
            .where(VariantModel.product_id == product_id)
            .order_by(VariantModel.position)
        )
        result = await self.session.execute(query)
        return list(result.scalars())

    async def list_variants(self, product_id: str) -> list[Variant]:
        """Get the product's variants in creation order."""
        return [row.to_domain() for row in await self._variant_rows(product_id)]

    async def create_variant(self, product_id: str, draft: VariantDraft) -> Variant:
        """Persist a variant.

        Creating a variant whose option set already exists returns the
        existing variant unchanged.

        Raises:
            ProductNotFoundError: If the product doesn't exist.
            SkuCollisionError: If the SKU is already used.
        """
        product = await self.session.get(ProductModel, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        rows = await self._variant_rows(product_id)
        for row in rows:
            existing = row.to_domain()
            if existing.key == draft.key:
                return existing

        if await self._sku_taken(draft.sku):
            raise SkuCollisionError(draft.sku, product_id)

        row = VariantModel(
            product_id=product_id,
            name=draft.name,
            sku=draft.sku,
            price=draft.pricing.price,
            sale_price=draft.pricing.sale_price,
            cost_price=draft.pricing.cost_price,
            stock=draft.pricing.stock,
            is_default=draft.is_default,
            options=[
                {
                    "attribute_slug": o.attribute_slug,
                    "attribute_name": o.attribute_name,
                    "value_id": o.value_id,
                    "value": o.value,
                    "color_hex": o.color_hex,
                }
                for o in draft.options
            ],
            position=len(rows),
        )

        # A concurrent writer can take the SKU after the check above; the
        # savepoint keeps the rest of the session usable when it does.
        try:
            async with self.session.begin_nested():
                self.session.add(row)
                await self.session.flush()
        except IntegrityError as e:
            raise SkuCollisionError(draft.sku, product_id) from e

        if "variants" not in inspect(product).unloaded:
            product.variants.append(row)
        return row.to_domain()

    async def _sku_taken(self, sku: str) -> bool:
        """Check if any variant already uses a SKU."""
        count = await self.session.scalar(
            select(func.count()).select_from(VariantModel).where(VariantModel.sku == sku)
        )
        return bool(count)
