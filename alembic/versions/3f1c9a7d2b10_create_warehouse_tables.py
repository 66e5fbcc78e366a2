"""create_warehouse_tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

fulfillment_status_enum = sa.Enum(
    'unfulfilled', 'partial', 'fulfilled', name='fulfillment_status_enum'
)
stock_movement_type_enum = sa.Enum(
    'transfer', 'adjustment', 'count', 'fulfillment', name='stock_movement_type_enum'
)


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema - Create products, locations, orders and stock audit tables."""

    op.create_table(
        'products',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('shopify_id', sa.String(length=50), nullable=True),
        sa.Column('shopify_variant_id', sa.String(length=50), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=False),
        sa.Column('barcode', sa.String(length=100), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('variant_title', sa.String(length=255), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('vendor', sa.String(length=255), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('current_stock', sa.Integer(), server_default='0', nullable=False),
        sa.Column('min_stock', sa.Integer(), server_default='5', nullable=True),
        sa.Column('storage_location', sa.String(length=50), nullable=True),
        sa.Column('last_inventory_update', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('current_stock >= 0', name='product_positive_stock'),
        sa.CheckConstraint('min_stock >= 0', name='product_positive_min_stock'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sku'),
    )
    op.create_index('ix_products_shopify_variant_id', 'products', ['shopify_variant_id'], unique=True)
    op.create_index('ix_products_barcode', 'products', ['barcode'])
    op.create_index('ix_products_storage_location', 'products', ['storage_location'])

    op.create_table(
        'storage_locations',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('zone', sa.String(length=20), nullable=True),
        sa.Column('aisle', sa.String(length=20), nullable=True),
        sa.Column('shelf', sa.String(length=20), nullable=True),
        sa.Column('level', sa.String(length=20), nullable=True),
        sa.Column('capacity', sa.Integer(), server_default='100', nullable=True),
        sa.Column('current_usage', sa.Integer(), server_default='0', nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    op.create_table(
        'orders',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('shopify_id', sa.String(length=50), nullable=False),
        sa.Column('order_number', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('shipping_city', sa.String(length=255), nullable=True),
        sa.Column('total_price', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('currency', sa.String(length=3), server_default='EUR', nullable=True),
        sa.Column('fulfillment_status', fulfillment_status_enum, server_default='unfulfilled', nullable=True),
        sa.Column('financial_status', sa.String(length=50), nullable=True),
        sa.Column('is_cancelled', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('tags', sa.Text(), nullable=True),
        sa.Column('shopify_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('shopify_updated_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_shopify_id', 'orders', ['shopify_id'], unique=True)
    op.create_index('ix_orders_order_number', 'orders', ['order_number'])
    op.create_index('ix_orders_fulfillment_status', 'orders', ['fulfillment_status'])

    op.create_table(
        'order_items',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', UUID(as_uuid=True), nullable=True),
        sa.Column('shopify_line_item_id', sa.String(length=50), nullable=True),
        sa.Column('shopify_product_id', sa.String(length=50), nullable=True),
        sa.Column('shopify_variant_id', sa.String(length=50), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('variant_title', sa.String(length=255), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), server_default='0', nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='order_item_positive_quantity'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_shopify_line_item_id', 'order_items', ['shopify_line_item_id'])

    op.create_table(
        'stock_movements',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', UUID(as_uuid=True), nullable=False),
        sa.Column('movement_type', stock_movement_type_enum, nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('from_location', sa.String(length=50), nullable=True),
        sa.Column('to_location', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('performed_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_stock_movements_product_id', 'stock_movements', ['product_id'])

    op.create_table(
        'inventory_adjustments',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', UUID(as_uuid=True), nullable=False),
        sa.Column('old_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), nullable=False),
        sa.Column('difference', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('adjusted_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_inventory_adjustments_product_id', 'inventory_adjustments', ['product_id'])


def downgrade() -> None:
    """Downgrade schema - Drop warehouse tables."""
    op.drop_index('ix_inventory_adjustments_product_id', table_name='inventory_adjustments')
    op.drop_table('inventory_adjustments')
    op.drop_index('ix_stock_movements_product_id', table_name='stock_movements')
    op.drop_table('stock_movements')
    op.drop_index('ix_order_items_shopify_line_item_id', table_name='order_items')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_fulfillment_status', table_name='orders')
    op.drop_index('ix_orders_order_number', table_name='orders')
    op.drop_index('ix_orders_shopify_id', table_name='orders')
    op.drop_table('orders')
    op.drop_table('storage_locations')
    op.drop_index('ix_products_storage_location', table_name='products')
    op.drop_index('ix_products_barcode', table_name='products')
    op.drop_index('ix_products_shopify_variant_id', table_name='products')
    op.drop_table('products')

    stock_movement_type_enum.drop(op.get_bind(), checkfirst=True)
    fulfillment_status_enum.drop(op.get_bind(), checkfirst=True)
