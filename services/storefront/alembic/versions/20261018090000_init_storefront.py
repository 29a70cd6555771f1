
from alembic import op
import sqlalchemy as sa

revision = "20261018090000"
down_revision = None

UTC_NOW = sa.text("(now() at time zone 'utc')")

def upgrade():
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('image_url', sa.String(length=1024), nullable=False, server_default=''),
    )
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sku_number', sa.String(length=64), nullable=False, unique=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('recommendation_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=240), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('sale_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('product_art_url', sa.String(length=1024), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('product_details', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('inventory', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lead_time', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_index('ix_products_recommendation_id', 'products', ['recommendation_id'])
    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cart_id', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('date_created', sa.DateTime(), nullable=False, server_default=UTC_NOW),
        sa.UniqueConstraint('cart_id', 'product_id', name='uq_cart_items_cart_product'),
    )
    op.create_index('ix_cart_items_cart_id', 'cart_items', ['cart_id'])
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_date', sa.DateTime(), nullable=False, server_default=UTC_NOW),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=120), nullable=False),
        sa.Column('state', sa.String(length=120), nullable=False),
        sa.Column('postal_code', sa.String(length=32), nullable=False),
        sa.Column('country', sa.String(length=64), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('processed', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_orders_username', 'orders', ['username'])
    op.create_table(
        'order_details',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
    )
    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=160), nullable=False),
    )
    op.create_table(
        'rainchecks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=160), nullable=False),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('sale_price', sa.Numeric(10, 2), nullable=False),
    )
    op.create_table(
        'promos',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=64), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

def downgrade():
    op.drop_table('promos')
    op.drop_table('rainchecks')
    op.drop_table('stores')
    op.drop_table('order_details')
    op.drop_index('ix_orders_username', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_cart_items_cart_id', table_name='cart_items')
    op.drop_table('cart_items')
    op.drop_index('ix_products_recommendation_id', table_name='products')
    op.drop_table('products')
    op.drop_table('categories')
