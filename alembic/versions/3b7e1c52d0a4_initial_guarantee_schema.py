"""initial_guarantee_schema

Revision ID: 3b7e1c52d0a4
Revises:
Create Date: 2026-10-16 09:12:44.180311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7e1c52d0a4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """
    Create the landlord -> property -> tenant -> policy -> claim schema.

    Unique constraints on policy_number, claim_number and policies.tenant_id
    back the numbering retry loop and the one-policy-per-tenant rule.
    claims.policy_id is RESTRICT so a policy with claims is never removed
    by the database on its own.
    """
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auth_user_id', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_auth_user_id', 'users', ['auth_user_id'], unique=True)

    op.create_table(
        'landlords',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('property_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_landlords_user_id', 'landlords', ['user_id'])

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('landlord_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False, server_default='Unknown'),
        sa.Column('rent_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0.00'),
        sa.Column('property_type', sa.String(length=9), nullable=False),
        sa.Column('status', sa.String(length=11), nullable=False, server_default='available'),
        sa.Column('max_tenants', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('current_tenants', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['landlord_id'], ['landlords.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_properties_user_id', 'properties', ['user_id'])
    op.create_index('ix_properties_landlord_id', 'properties', ['landlord_id'])

    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('rent_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('payment_status', sa.String(length=7), nullable=False, server_default='pending'),
        sa.Column('lease_start', sa.Date(), nullable=False),
        sa.Column('lease_end', sa.Date(), nullable=False),
        sa.Column('last_payment_date', sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.CheckConstraint('lease_end >= lease_start', name='ck_tenants_lease_order'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tenants_user_id', 'tenants', ['user_id'])
    op.create_index('ix_tenants_property_id', 'tenants', ['property_id'])

    op.create_table(
        'policies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('landlord_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('policy_number', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=9), nullable=False, server_default='active'),
        sa.Column('coverage_months', sa.Integer(), nullable=False),
        sa.Column('risk_score', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('decision', sa.String(length=18), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('premium_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['landlord_id'], ['landlords.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('policy_number', name='uq_policies_policy_number'),
        sa.UniqueConstraint('tenant_id', name='uq_policies_tenant_id'),
        sa.CheckConstraint('coverage_months >= 1', name='ck_policies_coverage_months'),
        sa.CheckConstraint('risk_score >= 0 AND risk_score <= 100', name='ck_policies_risk_score'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_policies_user_id', 'policies', ['user_id'])
    op.create_index('ix_policies_landlord_id', 'policies', ['landlord_id'])
    op.create_index('ix_policies_property_id', 'policies', ['property_id'])

    op.create_table(
        'claims',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('policy_id', sa.Integer(), nullable=False),
        sa.Column('claim_number', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=12), nullable=False, server_default='pending'),
        sa.Column('amount_requested', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('months_of_unpaid_rent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('evidence_links', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['policy_id'], ['policies.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('claim_number', name='uq_claims_claim_number'),
        sa.CheckConstraint('amount_requested > 0', name='ck_claims_amount_requested'),
        sa.CheckConstraint('months_of_unpaid_rent >= 0', name='ck_claims_unpaid_months'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_claims_user_id', 'claims', ['user_id'])
    op.create_index('ix_claims_policy_id', 'claims', ['policy_id'])


def downgrade() -> None:
    """Drop every table, children first."""
    op.drop_index('ix_claims_policy_id', table_name='claims')
    op.drop_index('ix_claims_user_id', table_name='claims')
    op.drop_table('claims')

    op.drop_index('ix_policies_property_id', table_name='policies')
    op.drop_index('ix_policies_landlord_id', table_name='policies')
    op.drop_index('ix_policies_user_id', table_name='policies')
    op.drop_table('policies')

    op.drop_index('ix_tenants_property_id', table_name='tenants')
    op.drop_index('ix_tenants_user_id', table_name='tenants')
    op.drop_table('tenants')

    op.drop_index('ix_properties_landlord_id', table_name='properties')
    op.drop_index('ix_properties_user_id', table_name='properties')
    op.drop_table('properties')

    op.drop_index('ix_landlords_user_id', table_name='landlords')
    op.drop_table('landlords')

    op.drop_index('ix_users_auth_user_id', table_name='users')
    op.drop_table('users')
