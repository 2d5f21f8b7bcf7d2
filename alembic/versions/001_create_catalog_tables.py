"""Create catalog tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create categories, attributes, products and variants tables."""
    # Category tree
    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('full_path', sa.String(500), nullable=False, server_default=''),
        sa.Column('parent_id', sa.String(36),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=True),
    )
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)
    op.create_index('ix_categories_parent_id', 'categories', ['parent_id'])

    # Attributes and their ordered values
    op.create_table(
        'attributes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('priority_class', sa.Integer(), nullable=True),
        sa.Column('value_kind', sa.String(20), nullable=True),
    )
    op.create_index('ix_attributes_slug', 'attributes', ['slug'])

    op.create_table(
        'attribute_values',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('attribute_id', sa.String(36),
                  sa.ForeignKey('attributes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.String(100), nullable=False),
        sa.Column('color_hex', sa.String(7), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('attribute_id', 'value'),
    )
    op.create_index('ix_attribute_values_attribute_id', 'attribute_values', ['attribute_id'])

    # Filterable attributes per category
    op.create_table(
        'category_attributes',
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('attribute_id', sa.String(36),
                  sa.ForeignKey('attributes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    # Products
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('sku', sa.String(100), nullable=True, unique=True),
        sa.Column('brand', sa.String(100), nullable=True),
        sa.Column('category_id', sa.String(36), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sale_price', sa.Integer(), nullable=True),
        sa.Column('cost_price', sa.Integer(), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('attribute_values', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_products_brand', 'products', ['brand'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])
    op.create_index('ix_products_is_active', 'products', ['is_active'])

    # Variant attributes per product
    op.create_table(
        'product_attributes',
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('attribute_id', sa.String(36),
                  sa.ForeignKey('attributes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    # Variants, options stored as JSON in canonical order
    op.create_table(
        'variants',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('sku', sa.String(150), nullable=True, unique=True),
        sa.Column('price', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sale_price', sa.Integer(), nullable=True),
        sa.Column('cost_price', sa.Integer(), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.func.current_timestamp()),
    )
    op.create_index('ix_variants_product_id', 'variants', ['product_id'])


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_table('variants')
    op.drop_table('product_attributes')
    op.drop_table('products')
    op.drop_table('category_attributes')
    op.drop_table('attribute_values')
    op.drop_table('attributes')
    op.drop_table('categories')
