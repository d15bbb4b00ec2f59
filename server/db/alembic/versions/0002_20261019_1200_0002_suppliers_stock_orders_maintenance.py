"""Suppliers, stock orders and maintenance

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 12:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: str | None = '0001'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

AUDIT_ACTIONS_BEFORE = "('create', 'update', 'delete', 'stock-in', 'stock-out')"
AUDIT_ACTIONS_AFTER = "('create', 'update', 'delete', 'stock-in', 'stock-out', 'maintenance', 'damage')"


def _id() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _uuid(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(), server_default=sa.text('now()'), nullable=False)


def upgrade() -> None:
    """Upgrade database schema."""
    # Create suppliers table
    op.create_table('suppliers',
        _id(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('contact_person', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.CheckConstraint('length(name) > 0', name='ck_supplier_name_not_empty'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_suppliers_name'), 'suppliers', ['name'], unique=False)
    op.create_index(op.f('ix_suppliers_email'), 'suppliers', ['email'], unique=True)

    # Create reorder_configs table
    op.create_table('reorder_configs',
        _id(),
        _uuid('equipment_id'),
        _uuid('preferred_supplier_id', nullable=True),
        sa.Column('threshold', sa.Integer(), nullable=False),
        sa.Column('reorder_quantity', sa.Integer(), nullable=False),
        sa.Column('auto_reorder_enabled', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        _timestamp('updated_at'),
        sa.CheckConstraint('threshold >= 1', name='ck_reorder_config_threshold_positive'),
        sa.CheckConstraint('reorder_quantity >= 1', name='ck_reorder_config_quantity_positive'),
        sa.ForeignKeyConstraint(['equipment_id'], ['camping_equipment.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['preferred_supplier_id'], ['suppliers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reorder_configs_equipment_id'), 'reorder_configs', ['equipment_id'], unique=True)
    op.create_index(
        op.f('ix_reorder_configs_preferred_supplier_id'), 'reorder_configs', ['preferred_supplier_id'], unique=False
    )

    # Create stock_orders and stock_order_items tables
    op.create_table('stock_orders',
        _id(),
        _uuid('supplier_id'),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('is_auto_order', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('expected_delivery_date', sa.DateTime(), nullable=True),
        sa.Column('delivery_date', sa.DateTime(), nullable=True),
        sa.Column('tracking_number', sa.String(length=255), nullable=True),
        sa.Column('carrier', sa.String(length=255), nullable=True),
        sa.Column('tracking_url', sa.String(length=512), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=False),
        _timestamp('order_date'),
        _timestamp('updated_at'),
        sa.CheckConstraint('total_amount >= 0', name='ck_stock_order_total_non_negative'),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name='ck_stock_order_status_valid'
        ),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_stock_orders_supplier_id'), 'stock_orders', ['supplier_id'], unique=False)
    op.create_index(op.f('ix_stock_orders_status'), 'stock_orders', ['status'], unique=False)
    op.create_index(op.f('ix_stock_orders_order_date'), 'stock_orders', ['order_date'], unique=False)

    op.create_table('stock_order_items',
        _id(),
        _uuid('order_id'),
        _uuid('equipment_id'),
        sa.Column('equipment_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.CheckConstraint('quantity >= 1', name='ck_stock_order_item_quantity_positive'),
        sa.CheckConstraint('unit_price >= 0', name='ck_stock_order_item_price_non_negative'),
        sa.ForeignKeyConstraint(['order_id'], ['stock_orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_stock_order_items_order_id'), 'stock_order_items', ['order_id'], unique=False)
    op.create_index(op.f('ix_stock_order_items_equipment_id'), 'stock_order_items', ['equipment_id'], unique=False)

    # Create maintenance_records table
    op.create_table('maintenance_records',
        _id(),
        _uuid('equipment_id'),
        _uuid('vendor_id', nullable=True),
        sa.Column('maintenance_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('scheduled_date', sa.DateTime(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('completion_date', sa.DateTime(), nullable=True),
        sa.Column('estimated_cost', sa.Float(), nullable=True),
        sa.Column('actual_cost', sa.Float(), nullable=True),
        sa.Column('performed_by', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=False),
        sa.Column('updated_by', sa.String(length=255), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.CheckConstraint(
            "status IN ('scheduled', 'in-progress', 'completed', 'cancelled')",
            name='ck_maintenance_status_valid'
        ),
        sa.CheckConstraint('estimated_cost IS NULL OR estimated_cost >= 0', name='ck_maintenance_estimate_non_negative'),
        sa.CheckConstraint('actual_cost IS NULL OR actual_cost >= 0', name='ck_maintenance_cost_non_negative'),
        sa.ForeignKeyConstraint(['equipment_id'], ['camping_equipment.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vendor_id'], ['suppliers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_maintenance_records_equipment_id'), 'maintenance_records', ['equipment_id'], unique=False)
    op.create_index(op.f('ix_maintenance_records_status'), 'maintenance_records', ['status'], unique=False)
    op.create_index(
        op.f('ix_maintenance_records_scheduled_date'), 'maintenance_records', ['scheduled_date'], unique=False
    )

    # Create damage_reports table
    op.create_table('damage_reports',
        _id(),
        _uuid('equipment_id'),
        _uuid('maintenance_record_id', nullable=True),
        sa.Column('damage_type', sa.String(length=20), nullable=False),
        sa.Column('severity', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('estimated_repair_cost', sa.Float(), nullable=True),
        sa.Column('actual_repair_cost', sa.Float(), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('reported_by', sa.String(length=255), nullable=False),
        _timestamp('report_date'),
        _timestamp('updated_at'),
        sa.CheckConstraint(
            "severity IN ('minor', 'moderate', 'major', 'critical')",
            name='ck_damage_severity_valid'
        ),
        sa.ForeignKeyConstraint(['equipment_id'], ['camping_equipment.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['maintenance_record_id'], ['maintenance_records.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_damage_reports_equipment_id'), 'damage_reports', ['equipment_id'], unique=False)
    op.create_index(op.f('ix_damage_reports_severity'), 'damage_reports', ['severity'], unique=False)
    op.create_index(op.f('ix_damage_reports_status'), 'damage_reports', ['status'], unique=False)
    op.create_index(op.f('ix_damage_reports_report_date'), 'damage_reports', ['report_date'], unique=False)

    # Allow service entries in the inventory audit trail
    op.drop_constraint('ck_inventory_audit_action_valid', 'inventory_audit_logs', type_='check')
    op.create_check_constraint(
        'ck_inventory_audit_action_valid',
        'inventory_audit_logs',
        f'action_type IN {AUDIT_ACTIONS_AFTER}'
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.execute("DELETE FROM inventory_audit_logs WHERE action_type IN ('maintenance', 'damage')")
    op.drop_constraint('ck_inventory_audit_action_valid', 'inventory_audit_logs', type_='check')
    op.create_check_constraint(
        'ck_inventory_audit_action_valid',
        'inventory_audit_logs',
        f'action_type IN {AUDIT_ACTIONS_BEFORE}'
    )

    op.drop_table('damage_reports')
    op.drop_table('maintenance_records')
    op.drop_table('stock_order_items')
    op.drop_table('stock_orders')
    op.drop_table('reorder_configs')
    op.drop_table('suppliers')
