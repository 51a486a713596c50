"""Baseline migration - accounts, locations and onboarding tables

Revision ID: 0001_baseline
Revises: 
Create Date: 2026-10-18

Creates the tenant tables (accounts, users, locations) and the onboarding
tables (questionnaire, phones, wizard sessions, approvals, extension series).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create tenant and onboarding tables."""

    # ==========================================================================
    # Tenants
    # ==========================================================================
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('product_type', sa.String(30), nullable=False),
        sa.Column('external_account_id', sa.String(100), nullable=True),
        sa.Column('created_by', sa.String(64), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(30), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column(
            'account_id', sa.String(64),
            sa.ForeignKey('accounts.id', ondelete='SET NULL'), nullable=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        'locations',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column(
            'account_id', sa.String(64),
            sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'customer_id', sa.String(64),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address_line1', sa.String(255), nullable=False),
        sa.Column('address_line2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('state', sa.String(50), nullable=False),
        sa.Column('zipcode', sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_locations_account', 'locations', ['account_id'])

    # ==========================================================================
    # Onboarding
    # ==========================================================================
    op.create_table(
        'location_onboardings',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column(
            'location_id', sa.String(64),
            sa.ForeignKey('locations.id', ondelete='CASCADE'), nullable=False, unique=True,
        ),
        sa.Column('status', sa.String(30), nullable=False),
        # Basic details
        sa.Column('poc_name', sa.String(255), nullable=True),
        sa.Column('poc_contact', sa.String(255), nullable=True),
        sa.Column('poc_email', sa.String(255), nullable=True),
        sa.Column('poc_phone', sa.String(30), nullable=True),
        sa.Column('preferred_contact_medium', sa.String(30), nullable=True),
        sa.Column('practice_management_software', sa.String(255), nullable=True),
        # Phone system and fax
        sa.Column('phone_system_type', sa.String(30), nullable=True),
        sa.Column('phone_system_details', sa.Text(), nullable=True),
        sa.Column('phone_system_voip_type', sa.String(100), nullable=True),
        sa.Column('call_forwarding_supported', sa.Boolean(), nullable=True),
        sa.Column('uses_fax', sa.Boolean(), nullable=True),
        sa.Column('fax_number', sa.String(30), nullable=True),
        sa.Column('wants_fax_in_voicestack', sa.Boolean(), nullable=True),
        # Devices
        sa.Column('device_ownership', sa.String(20), nullable=True),
        sa.Column('has_yealink_or_polycom', sa.Boolean(), nullable=True),
        sa.Column('buy_phones_through_voicestack', sa.Boolean(), nullable=True),
        sa.Column('device_catalog_selections', sa.JSON(), nullable=True),
        sa.Column('total_devices', sa.Integer(), nullable=True),
        sa.Column('assignment_strategy', sa.String(30), nullable=True),
        # Working hours and call flow
        sa.Column('working_hours', sa.JSON(), nullable=True),
        sa.Column('greeting_message', sa.Text(), nullable=True),
        sa.Column('has_ivr', sa.Boolean(), nullable=True),
        sa.Column('ivr_script', sa.Text(), nullable=True),
        sa.Column('ivr_retry_attempts', sa.Integer(), nullable=True),
        sa.Column('ivr_wait_time', sa.Integer(), nullable=True),
        sa.Column('ivr_invalid_selection_script', sa.Text(), nullable=True),
        sa.Column('ivr_after_retries_target', sa.String(255), nullable=True),
        sa.Column('ivr_options', sa.JSON(), nullable=True),
        sa.Column('direct_ring_users', sa.JSON(), nullable=True),
        sa.Column('direct_ring_extensions', sa.JSON(), nullable=True),
        sa.Column('voicemail_script', sa.Text(), nullable=True),
        sa.Column('shared_voicemail_users', sa.JSON(), nullable=True),
        sa.Column('call_queue', sa.JSON(), nullable=True),
        # Lifecycle
        sa.Column('copied_from_location_id', sa.String(64), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'phones',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column(
            'location_id', sa.String(64),
            sa.ForeignKey('locations.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('brand', sa.String(30), nullable=False),
        sa.Column('model', sa.String(100), nullable=False),
        sa.Column('ownership', sa.String(20), nullable=False),
        sa.Column('assignment_type', sa.String(30), nullable=False),
        sa.Column(
            'assigned_user_id', sa.String(64),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('mac_address', sa.String(32), nullable=True),
        sa.Column('serial_number', sa.String(64), nullable=True),
        sa.Column('extension', sa.String(20), nullable=True),
        sa.Column('enable_user_detection', sa.Boolean(), nullable=False),
        sa.Column('device_types', sa.JSON(), nullable=False),
        sa.Column('is_unsupported', sa.Boolean(), nullable=False),
        sa.Column('has_warnings', sa.Boolean(), nullable=False),
        sa.Column('warning_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('location_id', 'extension', name='uq_phones_location_extension'),
    )
    op.create_index('idx_phones_location', 'phones', ['location_id'])

    op.create_table(
        'onboarding_sessions',
        sa.Column(
            'location_id', sa.String(64),
            sa.ForeignKey('locations.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column('current_step', sa.String(30), nullable=False),
        sa.Column('completed_steps', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('is_locked', sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'approval_requests',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column(
            'location_id', sa.String(64),
            sa.ForeignKey('locations.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('entity_id', sa.String(64), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('requested_by', sa.String(64), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('resolved_by', sa.String(64), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
    )
    op.create_index(
        'idx_approval_requests_location_status', 'approval_requests', ['location_id', 'status']
    )

    op.create_table(
        'extension_series',
        sa.Column(
            'location_id', sa.String(64),
            sa.ForeignKey('locations.id', ondelete='CASCADE'), primary_key=True,
        ),
        sa.Column('prefix', sa.String(10), nullable=True),
        sa.Column('start_range', sa.Integer(), nullable=False),
        sa.Column('end_range', sa.Integer(), nullable=False),
        sa.Column('reserved_extensions', sa.JSON(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('extension_series')
    op.drop_index('idx_approval_requests_location_status', table_name='approval_requests')
    op.drop_table('approval_requests')
    op.drop_table('onboarding_sessions')
    op.drop_index('idx_phones_location', table_name='phones')
    op.drop_table('phones')
    op.drop_table('location_onboardings')
    op.drop_index('idx_locations_account', table_name='locations')
    op.drop_table('locations')
    op.drop_table('users')
    op.drop_table('accounts')
