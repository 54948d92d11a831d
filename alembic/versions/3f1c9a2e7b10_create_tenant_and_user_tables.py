"""create_tenant_and_user_tables

Revision ID: 3f1c9a2e7b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2e7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_by', sa.Uuid(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.Uuid(), nullable=True),
    ]


def upgrade() -> None:
    """Create tenant and user tables with audit and soft-delete columns."""
    op.create_table(
        'tenant',
        *_audit_columns(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('identifier', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('subscription_expires_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_tenant_identifier', 'tenant', ['identifier'], unique=True)
    op.create_index('ix_tenant_name', 'tenant', ['name'])
    op.create_index('ix_tenant_is_deleted', 'tenant', ['is_deleted'])

    op.create_table(
        'user',
        *_audit_columns(),
        sa.Column('email', sa.String(length=256), nullable=False),
        sa.Column('normalized_email', sa.String(length=256), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column(
            'tenant_id',
            sa.Uuid(),
            sa.ForeignKey('tenant.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column('password_reset_token', sa.String(), nullable=True),
        sa.Column('password_reset_token_expiry', sa.DateTime(timezone=True), nullable=True),
        sa.Column('access_failed_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lockout_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('lockout_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('security_stamp', sa.String(), nullable=False),
    )
    op.create_index('ix_user_normalized_email', 'user', ['normalized_email'], unique=True)
    op.create_index('ix_user_tenant_id', 'user', ['tenant_id'])
    op.create_index('ix_user_password_reset_token', 'user', ['password_reset_token'])
    op.create_index('ix_user_is_deleted', 'user', ['is_deleted'])


def downgrade() -> None:
    """Drop user and tenant tables."""
    op.drop_table('user')
    op.drop_table('tenant')
