"""Initial schema: users, sessions, inventory, sales, port-outs, reminders, activities

Revision ID: 20261001_initial
Revises:
Create Date: 2026-10-01

This migration creates:
1. users and session_tokens (bearer-token auth with idle timeout)
2. numbers (inventory) and purchases (vendor acquisitions)
3. sales and port_outs (records moved out of inventory)
4. dealer_purchases
5. reminders and activities
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261001_initial'
down_revision = None
branch_labels = None
depends_on = None


NOW = sa.text('(CURRENT_TIMESTAMP)')


def upgrade():
    # ==========================================================================
    # 1. USERS AND SESSIONS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=128), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='employee'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('seen_activities_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('last_activity_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index(batch_op.f('ix_session_tokens_expires_at'), ['expires_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_is_revoked'), ['is_revoked'], unique=False)
        batch_op.create_index('ix_session_tokens_user_active', ['user_id', 'is_revoked'], unique=False)

    # ==========================================================================
    # 2. INVENTORY
    # ==========================================================================
    op.create_table('numbers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=False),
        sa.Column('mobile', sa.String(length=16), nullable=False),
        sa.Column('sum', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Non-RTS'),
        sa.Column('number_type', sa.String(length=16), nullable=False, server_default='Prepaid'),
        sa.Column('purchase_from', sa.String(length=255), nullable=False, server_default='N/A'),
        sa.Column('purchase_price', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('purchase_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sale_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('rts_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_location', sa.String(length=255), nullable=False, server_default='N/A'),
        sa.Column('location_type', sa.String(length=16), nullable=False, server_default='Store'),
        sa.Column('assigned_to', sa.String(length=128), nullable=False, server_default='Unassigned'),
        sa.Column('name', sa.String(length=128), nullable=False, server_default='Unassigned'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('activation_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('upload_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('upc_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('check_in_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('safe_custody_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('safe_custody_notified', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('numbers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_numbers_sr_no'), ['sr_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_numbers_mobile'), ['mobile'], unique=True)
        batch_op.create_index('ix_numbers_status_rts_date', ['status', 'rts_date'], unique=False)
        batch_op.create_index('ix_numbers_assigned_to', ['assigned_to'], unique=False)

    op.create_table('purchases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=False),
        sa.Column('mobile', sa.String(length=16), nullable=False),
        sa.Column('purchased_from', sa.String(length=255), nullable=False),
        sa.Column('purchase_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('purchase_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('purchases', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_purchases_sr_no'), ['sr_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_purchases_mobile'), ['mobile'], unique=False)

    # ==========================================================================
    # 3. SALES AND PORT-OUTS
    # ==========================================================================
    op.create_table('sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=False),
        sa.Column('mobile', sa.String(length=16), nullable=False),
        sa.Column('sum', sa.Integer(), nullable=False),
        sa.Column('sold_to', sa.String(length=255), nullable=False),
        sa.Column('sale_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('sale_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('upc_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('port_out_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('upload_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('original_number_data', sa.JSON(), nullable=True),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sales', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sales_sr_no'), ['sr_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_sales_mobile'), ['mobile'], unique=True)

    op.create_table('port_outs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=False),
        sa.Column('mobile', sa.String(length=16), nullable=False),
        sa.Column('sum', sa.Integer(), nullable=False),
        sa.Column('sold_to', sa.String(length=255), nullable=False),
        sa.Column('sale_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('sale_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('upc_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('upload_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('port_out_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('original_number_data', sa.JSON(), nullable=True),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('port_outs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_port_outs_sr_no'), ['sr_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_port_outs_mobile'), ['mobile'], unique=True)

    # ==========================================================================
    # 4. DEALER PURCHASES
    # ==========================================================================
    op.create_table('dealer_purchases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=False),
        sa.Column('mobile', sa.String(length=16), nullable=False),
        sa.Column('sum', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('port_out_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('upc_status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('dealer_purchases', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_dealer_purchases_sr_no'), ['sr_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_dealer_purchases_mobile'), ['mobile'], unique=True)

    # ==========================================================================
    # 5. REMINDERS AND ACTIVITIES
    # ==========================================================================
    op.create_table('reminders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=False),
        sa.Column('task_name', sa.String(length=255), nullable=False),
        sa.Column('assigned_to', sa.String(length=128), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='Upload Pending'),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('reminders', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_reminders_sr_no'), ['sr_no'], unique=False)
        batch_op.create_index(batch_op.f('ix_reminders_assigned_to'), ['assigned_to'], unique=False)

    op.create_table('activities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=False),
        sa.Column('employee_name', sa.String(length=128), nullable=False),
        sa.Column('action', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('activities', schema=None) as batch_op:
        batch_op.create_index('ix_activities_timestamp', ['timestamp'], unique=False)
        batch_op.create_index('ix_activities_employee', ['employee_name'], unique=False)


def downgrade():
    for table in (
        'activities',
        'reminders',
        'dealer_purchases',
        'port_outs',
        'sales',
        'purchases',
        'numbers',
        'session_tokens',
        'users',
    ):
        op.drop_table(table)
