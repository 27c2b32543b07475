"""initial_storefront_schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONDocument = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')

subscription_plan_enum = sa.Enum('free', 'creator', 'pro', name='subscription_plan_enum')
subscription_status_enum = sa.Enum(
    'active', 'inactive', 'cancelled', name='subscription_status_enum'
)
payout_status_enum = sa.Enum('pending', 'paid', 'rejected', name='payout_status_enum')
product_category_enum = sa.Enum(
    'tshirt', 'ebook', 'course', 'template', 'digital', 'physical', 'service',
    name='product_category_enum',
)
product_type_enum = sa.Enum('physical', 'digital', 'service', name='product_type_enum')
order_status_enum = sa.Enum(
    'pending', 'processing', 'shipped', 'delivered', 'cancelled', 'refunded',
    name='order_status_enum',
)
payment_method_enum = sa.Enum('payfast', 'stripe', 'manual', name='payment_method_enum')
payment_status_enum = sa.Enum(
    'pending', 'completed', 'failed', 'refunded', name='payment_status_enum'
)

ALL_ENUMS = (
    subscription_plan_enum,
    subscription_status_enum,
    payout_status_enum,
    product_category_enum,
    product_type_enum,
    order_status_enum,
    payment_method_enum,
    payment_status_enum,
)


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema - Create users, stores, products, orders and affiliate tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('profile', JSONDocument, nullable=True),
        sa.Column('settings', JSONDocument, nullable=True),
        sa.Column('subscription_plan', subscription_plan_enum, server_default='free', nullable=True),
        sa.Column('subscription_status', subscription_status_enum, server_default='active', nullable=True),
        sa.Column('subscription_start', sa.DateTime(timezone=True), nullable=True),
        sa.Column('subscription_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_affiliate', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('referral_code', sa.String(length=40), nullable=True),
        sa.Column('referred_by_id', sa.Uuid(), nullable=True),
        sa.Column('affiliate_total_earnings', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('affiliate_pending_payouts', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('is_email_verified', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['referred_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('referral_code'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_referred_by_id', 'users', ['referred_by_id'])

    op.create_table(
        'affiliate_referrals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('referrer_id', sa.Uuid(), nullable=False),
        sa.Column('referred_user_id', sa.Uuid(), nullable=False),
        sa.Column('date_referred', sa.DateTime(timezone=True), nullable=True),
        sa.Column('commission_earned', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.ForeignKeyConstraint(['referrer_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['referred_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('referrer_id', 'referred_user_id', name='unique_referral'),
    )
    op.create_index('ix_affiliate_referrals_referrer_id', 'affiliate_referrals', ['referrer_id'])

    op.create_table(
        'affiliate_payouts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('payment_details', JSONDocument, nullable=True),
        sa.Column('status', payout_status_enum, server_default='pending', nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_affiliate_payouts_user_id', 'affiliate_payouts', ['user_id'])

    op.create_table(
        'stores',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('logo', sa.String(length=512), nullable=True),
        sa.Column('banner', sa.String(length=512), nullable=True),
        sa.Column('theme', JSONDocument, nullable=True),
        sa.Column('settings', JSONDocument, nullable=True),
        sa.Column('contact', JSONDocument, nullable=True),
        sa.Column('social', JSONDocument, nullable=True),
        sa.Column('seo', JSONDocument, nullable=True),
        sa.Column('custom_domain', JSONDocument, nullable=True),
        sa.Column('pages', JSONDocument, nullable=True),
        sa.Column('analytics_visitors', sa.Integer(), server_default='0', nullable=True),
        sa.Column('analytics_page_views', sa.Integer(), server_default='0', nullable=True),
        sa.Column('analytics_orders', sa.Integer(), server_default='0', nullable=True),
        sa.Column('analytics_revenue', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_stores_owner_id', 'stores', ['owner_id'])
    op.create_index('ix_stores_slug', 'stores', ['slug'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('store_id', sa.Uuid(), nullable=False),
        sa.Column('creator_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=False),
        sa.Column('category', product_category_enum, nullable=False),
        sa.Column('type', product_type_enum, nullable=False),
        sa.Column('price_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('price_currency', sa.String(length=3), server_default='ZAR', nullable=True),
        sa.Column('compare_at_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('images', JSONDocument, nullable=True),
        sa.Column('inventory', JSONDocument, nullable=True),
        sa.Column('variants', JSONDocument, nullable=True),
        sa.Column('tshirt_details', JSONDocument, nullable=True),
        sa.Column('digital_details', JSONDocument, nullable=True),
        sa.Column('seo', JSONDocument, nullable=True),
        sa.Column('tags', JSONDocument, nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=True),
        sa.Column('is_featured', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('ai_generated', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('views', sa.Integer(), server_default='0', nullable=True),
        sa.Column('sales', sa.Integer(), server_default='0', nullable=True),
        sa.Column('revenue', sa.Numeric(12, 2), server_default='0', nullable=True),
        *_timestamps(),
        sa.CheckConstraint('price_amount >= 0', name='product_price_non_negative'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_store_id', 'products', ['store_id'])
    op.create_index('ix_products_creator_id', 'products', ['creator_id'])
    op.create_index('ix_products_store_id_is_active', 'products', ['store_id', 'is_active'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('status', order_status_enum, server_default='pending', nullable=True),
        sa.Column('store_id', sa.Uuid(), nullable=False),
        sa.Column('customer_user_id', sa.Uuid(), nullable=True),
        sa.Column('customer_email', sa.String(length=255), nullable=False),
        sa.Column('customer_first_name', sa.String(length=100), nullable=False),
        sa.Column('customer_last_name', sa.String(length=100), nullable=False),
        sa.Column('customer_phone', sa.String(length=50), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=True),
        sa.Column('shipping_cost', sa.Numeric(12, 2), nullable=True),
        sa.Column('tax', sa.Numeric(12, 2), nullable=True),
        sa.Column('discount', sa.Numeric(12, 2), nullable=True),
        sa.Column('total', sa.Numeric(12, 2), nullable=True),
        sa.Column('currency', sa.String(length=3), server_default='ZAR', nullable=True),
        sa.Column('shipping', JSONDocument, nullable=True),
        sa.Column('billing', JSONDocument, nullable=True),
        sa.Column('payment_method', payment_method_enum, nullable=False),
        sa.Column('payment_status', payment_status_enum, server_default='pending', nullable=True),
        sa.Column('transaction_id', sa.String(length=255), nullable=True),
        sa.Column('payfast_payment_id', sa.String(length=255), nullable=True),
        sa.Column('stripe_payment_intent_id', sa.String(length=255), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refunded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refund_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('affiliate_referrer_id', sa.Uuid(), nullable=True),
        sa.Column('commission_rate', sa.Numeric(5, 4), nullable=True),
        sa.Column('commission_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('commission_paid', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('commission_paid_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['customer_user_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['affiliate_referrer_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_store_id', 'orders', ['store_id'])
    op.create_index('ix_orders_customer_user_id', 'orders', ['customer_user_id'])
    op.create_index('ix_orders_affiliate_referrer_id', 'orders', ['affiliate_referrer_id'])
    op.create_index('ix_orders_store_id_created_at', 'orders', ['store_id', 'created_at'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('variant', JSONDocument, nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=True),
        sa.CheckConstraint('quantity >= 1', name='order_item_quantity_positive'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_product_id', 'order_items', ['product_id'])


def downgrade() -> None:
    """Downgrade schema - Drop all storefront tables."""
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('products')
    op.drop_table('stores')
    op.drop_table('affiliate_payouts')
    op.drop_table('affiliate_referrals')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in ALL_ENUMS:
        enum_type.drop(bind, checkfirst=True)
