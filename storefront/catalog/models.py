"""SQLAlchemy models for the catalog.

Defines categories, attributes with their values, products and variants.
Attributes are shared rows linked to categories (filterable attributes)
and to products (variant attributes) through ordered association tables.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.domain.attributes import Attribute, AttributeValue, PriorityClass, ValueKind
from storefront.domain.filters import CatalogItem
from storefront.domain.variants import BasePricing, OptionPair, ProductRecord, Variant
from storefront.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryModel(Base):
    """Catalog category.

    Attributes:
        id: Category ID (taxonomy ID).
        name: Leaf name.
        slug: URL-safe identifier.
        full_path: Full path (e.g., "Apparel > Clothing").
        parent_id: Parent category ID.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    full_path: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CategoryModel(id={self.id}, slug={self.slug})>"


class AttributeModel(Base):
    """Attribute with ordered values.

    priority_class and value_kind are nullable; when unset they are derived
    from the name on load.
    """

    __tablename__ = "attributes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    priority_class: Mapped[int | None] = mapped_column(Integer, nullable=True)
    value_kind: Mapped[str | None] = mapped_column(String(20), nullable=True)

    values: Mapped[list["AttributeValueModel"]] = relationship(
        "AttributeValueModel",
        back_populates="attribute",
        cascade="all, delete-orphan",
        order_by="AttributeValueModel.sort_order",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<AttributeModel(id={self.id}, slug={self.slug})>"

    def to_domain(self) -> Attribute:
        """Convert to domain attribute."""
        return Attribute(
            id=self.id,
            name=self.name,
            slug=self.slug,
            values=tuple(v.to_domain() for v in self.values),
            priority_class=(
                PriorityClass(self.priority_class) if self.priority_class is not None else None
            ),
            value_kind=ValueKind(self.value_kind) if self.value_kind else None,
        )


class AttributeValueModel(Base):
    """One value of an attribute."""

    __tablename__ = "attribute_values"
    __table_args__ = (UniqueConstraint("attribute_id", "value"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    attribute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("attributes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(100), nullable=False)
    color_hex: Mapped[str | None] = mapped_column(String(7), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    attribute: Mapped["AttributeModel"] = relationship("AttributeModel", back_populates="values")

    def to_domain(self) -> AttributeValue:
        """Convert to domain attribute value."""
        return AttributeValue(
            id=self.id,
            value=self.value,
            color_hex=self.color_hex,
            sort_order=self.sort_order,
        )


class CategoryAttributeModel(Base):
    """Filterable attribute of a category."""

    __tablename__ = "category_attributes"

    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    )
    attribute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("attributes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ProductAttributeModel(Base):
    """Variant attribute of a product."""

    __tablename__ = "product_attributes"

    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    )
    attribute_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("attributes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ProductModel(Base):
    """Catalog product.

    Attributes:
        id: Product ID.
        name: Product name.
        sku: Product SKU (root for variant SKUs).
        brand: Brand name.
        category_id: Assigned category.
        price: Base price in cents.
        sale_price: Sale price in cents.
        cost_price: Cost price in cents.
        stock: Available quantity.
        attribute_values: Attribute slug -> values not carried by variants
            (e.g., {"material": ["Cotton"]}).
        is_active: Whether the product is listed.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)
    brand: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # in cents
    sale_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cost_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attribute_values: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    variants: Mapped[list["VariantModel"]] = relationship(
        "VariantModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="VariantModel.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, sku={self.sku}, name={self.name[:30]}...)>"

    def to_record(self) -> ProductRecord:
        """Convert to the record used by variant generation."""
        return ProductRecord(
            id=self.id,
            name=self.name,
            sku=self.sku,
            pricing=BasePricing(
                price=self.price,
                sale_price=self.sale_price,
                cost_price=self.cost_price,
                stock=self.stock,
            ),
        )

    def to_item(self) -> CatalogItem:
        """Convert to the item used by facet aggregation.

        Attribute values combine the product's own values with every
        variant option.
        """
        values: dict[str, list[str]] = {
            slug: list(items) for slug, items in (self.attribute_values or {}).items()
        }
        for variant in self.variants:
            for option in variant.options or []:
                bucket = values.setdefault(option["attribute_slug"], [])
                if option["value"] not in bucket:
                    bucket.append(option["value"])

        return CatalogItem(
            id=self.id,
            category_id=self.category_id,
            brand=self.brand,
            price=self.price,
            sale_price=self.sale_price,
            stock=self.stock,
            attributes={slug: tuple(items) for slug, items in values.items()},
        )


class VariantModel(Base):
    """Product variant.

    Options are stored as JSON: a list of {attribute_slug, attribute_name,
    value_id, value, color_hex} in canonical order.
    """

    __tablename__ = "variants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(150), nullable=True, unique=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sale_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cost_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    options: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    product: Mapped["ProductModel"] = relationship("ProductModel", back_populates="variants")

    def __repr__(self) -> str:
        """String representation."""
        return f"<VariantModel(id={self.id}, sku={self.sku})>"

    def to_domain(self) -> Variant:
        """Convert to domain variant."""
        return Variant(
            id=self.id,
            product_id=self.product_id,
            name=self.name,
            sku=self.sku,
            price=self.price,
            sale_price=self.sale_price,
            cost_price=self.cost_price,
            stock=self.stock,
            is_default=self.is_default,
            options=tuple(
                OptionPair(
                    attribute_slug=o["attribute_slug"],
                    value=o["value"],
                    attribute_name=o.get("attribute_name", ""),
                    value_id=o.get("value_id"),
                    color_hex=o.get("color_hex"),
                )
                for o in self.options or []
            ),
        )
