"""Initial marketplace schema: catalog, parties, orders, fulfillment, inventory

Revision ID: a1c4e2f90b7d
Revises:
Create Date: 2026-10-18 09:12:44.108231

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1c4e2f90b7d'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('category',
    sa.Column('category_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('category_name', sa.String(length=20), nullable=True),
    sa.PrimaryKeyConstraint('category_id')
    )
    op.create_table('customer',
    sa.Column('customer_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('first_name', sa.String(length=30), nullable=True),
    sa.Column('last_name', sa.String(length=20), nullable=True),
    sa.Column('state', sa.String(length=20), nullable=True),
    sa.Column('address', sa.String(length=5), server_default='xxxx', nullable=True),
    sa.PrimaryKeyConstraint('customer_id')
    )
    with op.batch_alter_table('customer', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_customer_state'), ['state'], unique=False)

    op.create_table('seller',
    sa.Column('seller_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('seller_name', sa.String(length=25), nullable=True),
    sa.Column('origin', sa.String(length=20), nullable=True),
    sa.PrimaryKeyConstraint('seller_id')
    )
    op.create_table('product',
    sa.Column('product_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('product_name', sa.String(length=50), nullable=False),
    sa.Column('price_cents', sa.Integer(), nullable=False),
    sa.Column('cogs_cents', sa.Integer(), nullable=True),
    sa.Column('category_id', sa.Integer(), nullable=True),
    sa.CheckConstraint('price_cents >= 0', name='ck_product_price_nonnegative'),
    sa.ForeignKeyConstraint(['category_id'], ['category.category_id'], ),
    sa.PrimaryKeyConstraint('product_id')
    )
    with op.batch_alter_table('product', schema=None) as batch_op:
        batch_op.create_index('ix_product_category', ['category_id'], unique=False)

    op.create_table('orders',
    sa.Column('order_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('order_date', sa.Date(), nullable=False),
    sa.Column('customer_id', sa.Integer(), nullable=False),
    sa.Column('seller_id', sa.Integer(), nullable=False),
    sa.Column('order_status', sa.String(length=15), nullable=False),
    sa.ForeignKeyConstraint(['customer_id'], ['customer.customer_id'], ),
    sa.ForeignKeyConstraint(['seller_id'], ['seller.seller_id'], ),
    sa.PrimaryKeyConstraint('order_id')
    )
    with op.batch_alter_table('orders', schema=None) as batch_op:
        batch_op.create_index('ix_orders_customer_date', ['customer_id', 'order_date'], unique=False)
        batch_op.create_index('ix_orders_seller', ['seller_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_order_status'), ['order_status'], unique=False)

    op.create_table('order_items',
    sa.Column('order_item_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('order_id', sa.Integer(), nullable=False),
    sa.Column('product_id', sa.Integer(), nullable=False),
    sa.Column('quantity', sa.Integer(), nullable=False),
    sa.Column('price_per_unit_cents', sa.Integer(), nullable=False),
    sa.Column('total_sale_cents', sa.Integer(), nullable=False),
    sa.CheckConstraint('quantity > 0', name='ck_order_items_quantity_positive'),
    sa.ForeignKeyConstraint(['order_id'], ['orders.order_id'], ),
    sa.ForeignKeyConstraint(['product_id'], ['product.product_id'], ),
    sa.PrimaryKeyConstraint('order_item_id')
    )
    with op.batch_alter_table('order_items', schema=None) as batch_op:
        batch_op.create_index('ix_order_items_order', ['order_id'], unique=False)
        batch_op.create_index('ix_order_items_product', ['product_id'], unique=False)

    op.create_table('payment',
    sa.Column('payment_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('order_id', sa.Integer(), nullable=False),
    sa.Column('payment_date', sa.Date(), nullable=True),
    sa.Column('payment_status', sa.String(length=25), nullable=True),
    sa.ForeignKeyConstraint(['order_id'], ['orders.order_id'], ),
    sa.PrimaryKeyConstraint('payment_id')
    )
    with op.batch_alter_table('payment', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_payment_order_id'), ['order_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_payment_payment_status'), ['payment_status'], unique=False)

    op.create_table('shipping',
    sa.Column('shipping_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('order_id', sa.Integer(), nullable=False),
    sa.Column('shipping_date', sa.Date(), nullable=True),
    sa.Column('return_date', sa.Date(), nullable=True),
    sa.Column('shipping_providers', sa.String(length=15), nullable=True),
    sa.Column('delivery_status', sa.String(length=15), nullable=True),
    sa.ForeignKeyConstraint(['order_id'], ['orders.order_id'], ),
    sa.PrimaryKeyConstraint('shipping_id')
    )
    with op.batch_alter_table('shipping', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_shipping_order_id'), ['order_id'], unique=False)

    op.create_table('inventory',
    sa.Column('inventory_id', sa.Integer(), autoincrement=False, nullable=False),
    sa.Column('product_id', sa.Integer(), nullable=False),
    sa.Column('stock', sa.Integer(), nullable=False),
    sa.Column('warehouse_id', sa.Integer(), nullable=True),
    sa.Column('last_stock_date', sa.Date(), nullable=True),
    sa.Column('version_id', sa.Integer(), nullable=False),
    sa.CheckConstraint('stock >= 0', name='ck_inventory_stock_nonnegative'),
    sa.ForeignKeyConstraint(['product_id'], ['product.product_id'], ),
    sa.PrimaryKeyConstraint('inventory_id')
    )
    with op.batch_alter_table('inventory', schema=None) as batch_op:
        batch_op.create_index('ix_inventory_product_warehouse', ['product_id', 'warehouse_id'], unique=False)


def downgrade():
    with op.batch_alter_table('inventory', schema=None) as batch_op:
        batch_op.drop_index('ix_inventory_product_warehouse')
    op.drop_table('inventory')

    with op.batch_alter_table('shipping', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_shipping_order_id'))
    op.drop_table('shipping')

    with op.batch_alter_table('payment', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_payment_payment_status'))
        batch_op.drop_index(batch_op.f('ix_payment_order_id'))
    op.drop_table('payment')

    with op.batch_alter_table('order_items', schema=None) as batch_op:
        batch_op.drop_index('ix_order_items_product')
        batch_op.drop_index('ix_order_items_order')
    op.drop_table('order_items')

    with op.batch_alter_table('orders', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_orders_order_status'))
        batch_op.drop_index('ix_orders_seller')
        batch_op.drop_index('ix_orders_customer_date')
    op.drop_table('orders')

    with op.batch_alter_table('product', schema=None) as batch_op:
        batch_op.drop_index('ix_product_category')
    op.drop_table('product')

    op.drop_table('seller')

    with op.batch_alter_table('customer', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_customer_state'))
    op.drop_table('customer')

    op.drop_table('category')
