"""initial take-offs schema: users, clients, projects, files, invoices, recycle bin

Revision ID: 3f7a9c1e2b40
Revises:
Create Date: 2026-10-18 09:12:44.310521

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f7a9c1e2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create every table."""
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=120), nullable=True),
        sa.Column('last_name', sa.String(length=120), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False, server_default='User'),
        sa.Column('company', sa.String(length=255), nullable=True),
        sa.Column('avatar', sa.String(length=500), nullable=True),
        sa.Column('is_blocked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('phone_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('table_preferences', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'], unique=False)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('clients',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('legal_name', sa.String(length=255), nullable=True),
        sa.Column('registration_number', sa.String(length=100), nullable=True),
        sa.Column('billing_address', sa.JSON(), nullable=True),
        sa.Column('physical_address', sa.JSON(), nullable=True),
        sa.Column('main_contact', sa.JSON(), nullable=True),
        sa.Column('account_manager', sa.JSON(), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('industry', sa.String(length=120), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('seat_limit', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('user_linking_code', sa.String(length=20), nullable=True),
        sa.Column('admin_linking_code', sa.String(length=20), nullable=True),
        sa.Column('qb_realm_id', sa.String(length=100), nullable=True),
        sa.Column('qb_access_token', sa.Text(), nullable=True),
        sa.Column('qb_refresh_token', sa.Text(), nullable=True),
        sa.Column('qb_connected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_id', 'clients', ['id'], unique=False)
    op.create_index('ix_clients_name', 'clients', ['name'], unique=False)
    op.create_index('ix_clients_user_linking_code', 'clients', ['user_linking_code'], unique=False)
    op.create_index('ix_clients_admin_linking_code', 'clients', ['admin_linking_code'], unique=False)

    op.create_table('projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('project_number', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='New Lead'),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('posting_date', sa.Date(), nullable=True),
        sa.Column('sub_total', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('gst', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('alias', sa.String(length=120), nullable=True),
        sa.Column('alias_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('row_version', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_projects_id', 'projects', ['id'], unique=False)
    op.create_index('ix_projects_project_number', 'projects', ['project_number'], unique=True)
    op.create_index('ix_projects_alias', 'projects', ['alias'], unique=True)

    op.create_table('client_users',
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('client_id', 'user_id'),
    )
    op.create_index('ix_client_users_user_id', 'client_users', ['user_id'], unique=False)
    op.create_table('project_users',
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('project_id', 'user_id'),
    )
    op.create_index('ix_project_users_user_id', 'project_users', ['user_id'], unique=False)
    op.create_table('project_clients',
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('project_id', 'client_id'),
    )
    op.create_index('ix_project_clients_client_id', 'project_clients', ['client_id'], unique=False)

    op.create_table('project_files',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('folder', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('filename', sa.String(length=500), nullable=False),
        sa.Column('storage_key', sa.String(length=1000), nullable=False),
        sa.Column('mime_type', sa.String(length=255), nullable=True),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('sha256', sa.String(length=64), nullable=True),
        sa.Column('uploaded_by', sa.Uuid(), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_files_id', 'project_files', ['id'], unique=False)
    op.create_index('ix_project_files_project_id', 'project_files', ['project_id'], unique=False)

    op.create_table('invoices',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('invoice_number', sa.String(length=100), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('terms', sa.String(length=100), nullable=True),
        sa.Column('memo', sa.Text(), nullable=True),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('balance_due', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='Draft'),
        sa.Column('source', sa.String(length=50), nullable=False, server_default='quickbooks'),
        sa.Column('qb_id', sa.String(length=100), nullable=True),
        sa.Column('line_items', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_invoices_id', 'invoices', ['id'], unique=False)
    op.create_index('ix_invoices_client_id', 'invoices', ['client_id'], unique=False)
    op.create_index('ix_invoices_invoice_number', 'invoices', ['invoice_number'], unique=True)

    op.create_table('payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('payment_number', sa.String(length=120), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('unapplied_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('payment_method', sa.String(length=100), nullable=True),
        sa.Column('memo', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='Deposited'),
        sa.Column('source', sa.String(length=50), nullable=False, server_default='quickbooks'),
        sa.Column('qb_id', sa.String(length=100), nullable=True),
        sa.Column('invoice_applications', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payments_id', 'payments', ['id'], unique=False)
    op.create_index('ix_payments_client_id', 'payments', ['client_id'], unique=False)
    op.create_index('ix_payments_payment_number', 'payments', ['payment_number'], unique=False)

    # file_id, client_id and project_id outlive the rows they point at
    op.create_table('recycle_bin_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('file_id', sa.Uuid(), nullable=True),
        sa.Column('original_path', sa.String(length=1000), nullable=False),
        sa.Column('file_name', sa.String(length=500), nullable=False),
        sa.Column('file_type', sa.String(length=10), nullable=False, server_default='file'),
        sa.Column('file_extension', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('file_size', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('mime_type', sa.String(length=255), nullable=False, server_default='application/octet-stream'),
        sa.Column('client_id', sa.Uuid(), nullable=True),
        sa.Column('project_id', sa.Uuid(), nullable=True),
        sa.Column('deleted_by', sa.Uuid(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deletion_reason', sa.Text(), nullable=True),
        sa.Column('deletion_method', sa.String(length=50), nullable=False, server_default='manual'),
        sa.Column('recycle_bin_path', sa.String(length=1000), nullable=False),
        sa.Column('recycle_bin_folder', sa.String(length=500), nullable=False),
        sa.Column('can_restore', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('restored_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('restored_by', sa.Uuid(), nullable=True),
        sa.Column('permanently_deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('cleanup_reason', sa.String(length=50), nullable=True),
        sa.Column('audit_log', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recycle_bin_items_id', 'recycle_bin_items', ['id'], unique=False)
    op.create_index('ix_recycle_bin_items_file_id', 'recycle_bin_items', ['file_id'], unique=False)
    op.create_index('ix_recycle_bin_items_client_id', 'recycle_bin_items', ['client_id'], unique=False)
    op.create_index('ix_recycle_bin_items_project_id', 'recycle_bin_items', ['project_id'], unique=False)
    op.create_index('ix_recycle_bin_items_expires_at', 'recycle_bin_items', ['expires_at'], unique=False)


def downgrade() -> None:
    """Drop every table."""
    op.drop_table('recycle_bin_items')
    op.drop_table('payments')
    op.drop_table('invoices')
    op.drop_table('project_files')
    op.drop_table('project_clients')
    op.drop_table('project_users')
    op.drop_table('client_users')
    op.drop_table('projects')
    op.drop_table('clients')
    op.drop_table('users')
