"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _uuid(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(), server_default=sa.text('now()'), nullable=False)


def upgrade() -> None:
    """Upgrade database schema."""
    # Create users table
    op.create_table('users',
        _id(),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('contact_number', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('admin_id', sa.String(length=20), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('permissions', sa.JSON(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.CheckConstraint("role IN ('user', 'admin')", name='ck_user_role_valid'),
        sa.CheckConstraint('length(username) > 0', name='ck_user_username_not_empty'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('admin_id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create tours table
    op.create_table('tours',
        _id(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('image', sa.String(length=512), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.CheckConstraint('price >= 0', name='ck_tour_price_non_negative'),
        sa.CheckConstraint('duration > 0', name='ck_tour_duration_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tours_name'), 'tours', ['name'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        _id(),
        _uuid('user_id'),
        _uuid('tour_id'),
        sa.Column('travel_date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        _timestamp('created_at'),
        sa.CheckConstraint("status IN ('PENDING', 'CONFIRMED', 'CANCELLED')", name='ck_booking_status_valid'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_tour_id'), 'bookings', ['tour_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)

    # Create camping_equipment table
    op.create_table('camping_equipment',
        _id(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('image', sa.String(length=512), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=True),
        _timestamp('created_at'),
        sa.CheckConstraint('price >= 0', name='ck_equipment_price_non_negative'),
        sa.CheckConstraint('quantity >= 0', name='ck_equipment_quantity_non_negative'),
        sa.CheckConstraint(
            "category IN ('Tents', 'Sleeping Bags', 'Cooking', 'Lighting', 'Hiking', 'Other')",
            name='ck_equipment_category_valid'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_camping_equipment_name'), 'camping_equipment', ['name'], unique=False)
    op.create_index(op.f('ix_camping_equipment_category'), 'camping_equipment', ['category'], unique=False)

    # Create carts and cart_items tables
    op.create_table('carts',
        _id(),
        _uuid('user_id'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_carts_user_id'), 'carts', ['user_id'], unique=True)

    op.create_table('cart_items',
        _id(),
        _uuid('cart_id'),
        _uuid('equipment_id'),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('is_rental', sa.Boolean(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        _timestamp('created_at'),
        sa.CheckConstraint('quantity >= 1', name='ck_cart_item_quantity_positive'),
        sa.CheckConstraint('price >= 0', name='ck_cart_item_price_non_negative'),
        sa.ForeignKeyConstraint(['cart_id'], ['carts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['equipment_id'], ['camping_equipment.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cart_items_cart_id'), 'cart_items', ['cart_id'], unique=False)
    op.create_index(op.f('ix_cart_items_equipment_id'), 'cart_items', ['equipment_id'], unique=False)

    # Create payments and payment_items tables
    op.create_table('payments',
        _id(),
        _uuid('user_id'),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('card_number', sa.String(length=19), nullable=False),
        sa.Column('card_holder', sa.String(length=255), nullable=False),
        sa.Column('expiry_date', sa.String(length=5), nullable=False),
        sa.Column('event_ref', sa.String(length=255), nullable=True),
        sa.Column('number_of_tickets', sa.Integer(), nullable=False),
        sa.Column('special_requirements', sa.Text(), nullable=True),
        _uuid('tour_id', nullable=True),
        sa.Column('customer_info', sa.JSON(), nullable=True),
        sa.Column('tour_details', sa.JSON(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.CheckConstraint('amount > 0', name='ck_payment_amount_positive'),
        sa.CheckConstraint('number_of_tickets >= 1', name='ck_payment_tickets_positive'),
        sa.CheckConstraint("type IN ('event', 'cart', 'general', 'tour')", name='ck_payment_type_valid'),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_payment_status_valid'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payments_user_id'), 'payments', ['user_id'], unique=False)
    op.create_index(op.f('ix_payments_status'), 'payments', ['status'], unique=False)
    op.create_index(op.f('ix_payments_tour_id'), 'payments', ['tour_id'], unique=False)
    op.create_index(op.f('ix_payments_created_at'), 'payments', ['created_at'], unique=False)

    op.create_table('payment_items',
        _id(),
        _uuid('payment_id'),
        _uuid('equipment_id'),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.CheckConstraint('quantity >= 1', name='ck_payment_item_quantity_positive'),
        sa.ForeignKeyConstraint(['payment_id'], ['payments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payment_items_payment_id'), 'payment_items', ['payment_id'], unique=False)

    # Create inventory_audit_logs table
    op.create_table('inventory_audit_logs',
        _id(),
        _uuid('equipment_id'),
        sa.Column('equipment_name', sa.String(length=255), nullable=False),
        sa.Column('action_type', sa.String(length=20), nullable=False),
        sa.Column('quantity_before', sa.Integer(), nullable=False),
        sa.Column('quantity_after', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('reference', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('performed_by', sa.String(length=255), nullable=False),
        _timestamp('created_at'),
        sa.CheckConstraint('quantity_before >= 0', name='ck_inventory_audit_before_non_negative'),
        sa.CheckConstraint('quantity_after >= 0', name='ck_inventory_audit_after_non_negative'),
        sa.CheckConstraint('length(reason) > 0', name='ck_inventory_audit_reason_not_empty'),
        sa.CheckConstraint(
            "action_type IN ('create', 'update', 'delete', 'stock-in', 'stock-out')",
            name='ck_inventory_audit_action_valid'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_inventory_audit_logs_equipment_id'), 'inventory_audit_logs', ['equipment_id'], unique=False)
    op.create_index(op.f('ix_inventory_audit_logs_created_at'), 'inventory_audit_logs', ['created_at'], unique=False)

    # Create notifications table
    op.create_table('notifications',
        _id(),
        _uuid('user_id'),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        _uuid('equipment_id', nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('threshold', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)
    op.create_index(op.f('ix_notifications_equipment_id'), 'notifications', ['equipment_id'], unique=False)
    op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'], unique=False)

    # Create idempotency_records table
    op.create_table('idempotency_records',
        _id(),
        sa.Column('scope', sa.String(length=100), nullable=False),
        sa.Column('idempotency_key', sa.String(length=255), nullable=False),
        sa.Column('request_hash', sa.String(length=64), nullable=False),
        sa.Column('status_code', sa.Integer(), nullable=False),
        sa.Column('response_body', sa.JSON(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        _timestamp('created_at'),
        sa.CheckConstraint('length(idempotency_key) > 0', name='ck_idempotency_key_not_empty'),
        sa.CheckConstraint('status_code BETWEEN 100 AND 599', name='ck_idempotency_status_code'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('scope', 'idempotency_key', name='uq_idempotency_scope_key')
    )
    op.create_index(op.f('ix_idempotency_records_expires_at'), 'idempotency_records', ['expires_at'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('idempotency_records')
    op.drop_table('notifications')
    op.drop_table('inventory_audit_logs')
    op.drop_table('payment_items')
    op.drop_table('payments')
    op.drop_table('cart_items')
    op.drop_table('carts')
    op.drop_table('camping_equipment')
    op.drop_table('bookings')
    op.drop_table('tours')
    op.drop_table('users')
