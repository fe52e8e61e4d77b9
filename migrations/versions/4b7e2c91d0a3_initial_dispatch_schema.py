"""Initial dispatch schema

Revision ID: 4b7e2c91d0a3
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2c91d0a3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_token', sa.String(length=64), nullable=True),
        sa.Column('engineer_token', sa.String(length=64), nullable=True),
        sa.Column('short_code', sa.String(length=16), nullable=True),
        sa.Column('status', sa.String(length=40), nullable=False),
        sa.Column('service_type', sa.String(length=100), nullable=False),
        sa.Column('service_level', sa.String(length=30), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('site_address', sa.Text(), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('country', sa.String(length=2), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('site_latitude', sa.Float(), nullable=True),
        sa.Column('site_longitude', sa.Float(), nullable=True),
        sa.Column('customer_id', sa.String(length=64), nullable=True),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('routed_supplier_id', sa.Integer(), nullable=True),
        sa.Column('assigned_supplier_id', sa.Integer(), nullable=True),
        sa.Column('engineer_name', sa.String(length=255), nullable=True),
        sa.Column('engineer_email', sa.String(length=255), nullable=True),
        sa.Column('engineer_phone', sa.String(length=32), nullable=True),
        sa.Column('booking_type', sa.String(length=20), server_default='hourly', nullable=False),
        sa.Column('estimated_days', sa.Integer(), nullable=True),
        sa.Column('estimated_duration_minutes', sa.Integer(), nullable=False),
        sa.Column('requested_start_date', sa.String(length=10), nullable=False),
        sa.Column('requested_start_time', sa.String(length=8), nullable=False),
        sa.Column('proposed_start_date', sa.String(length=10), nullable=True),
        sa.Column('proposed_start_time', sa.String(length=8), nullable=True),
        sa.Column('confirmed_start_date', sa.String(length=10), nullable=True),
        sa.Column('confirmed_start_time', sa.String(length=8), nullable=True),
        sa.Column('is_out_of_hours', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('currency', sa.String(length=3), server_default='USD', nullable=False),
        sa.Column('hourly_rate_cents', sa.Integer(), nullable=True),
        sa.Column('calculated_price_cents', sa.Integer(), nullable=True),
        sa.Column('supplier_payout_cents', sa.Integer(), nullable=True),
        sa.Column('platform_revenue_cents', sa.Integer(), nullable=True),
        sa.Column('remote_site_fee_customer_cents', sa.Integer(), server_default='0', nullable=False),
        sa.Column('remote_site_fee_supplier_cents', sa.Integer(), server_default='0', nullable=False),
        sa.Column('remote_site_fee_platform_cents', sa.Integer(), server_default='0', nullable=False),
        sa.Column('remote_site_fee_km', sa.Float(), nullable=True),
        sa.Column('nearest_major_city', sa.String(length=100), nullable=True),
        sa.Column('price_locked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('engineer_accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('en_route_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('arrived_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('cancelled_by', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_jobs_job_token'), 'jobs', ['job_token'], unique=True)
    op.create_index(op.f('ix_jobs_engineer_token'), 'jobs', ['engineer_token'], unique=True)
    op.create_index(op.f('ix_jobs_short_code'), 'jobs', ['short_code'], unique=True)
    op.create_index(op.f('ix_jobs_status'), 'jobs', ['status'], unique=False)
    op.create_index(op.f('ix_jobs_customer_id'), 'jobs', ['customer_id'], unique=False)
    op.create_index(op.f('ix_jobs_customer_email'), 'jobs', ['customer_email'], unique=False)
    op.create_index(op.f('ix_jobs_routed_supplier_id'), 'jobs', ['routed_supplier_id'], unique=False)
    op.create_index(op.f('ix_jobs_assigned_supplier_id'), 'jobs', ['assigned_supplier_id'], unique=False)
    op.create_index('idx_jobs_status_supplier', 'jobs', ['status', 'routed_supplier_id'], unique=False)
    op.create_index('idx_jobs_assigned_supplier_status', 'jobs', ['assigned_supplier_id', 'status'], unique=False)

    op.create_table(
        'job_status_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=40), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_job_status_history_job_id'), 'job_status_history', ['job_id'], unique=False)
    op.create_index('idx_status_history_job_time', 'job_status_history', ['job_id', 'recorded_at'], unique=False)

    op.create_table(
        'job_locations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('accuracy_m', sa.Float(), nullable=True),
        sa.Column('tracking_type', sa.String(length=20), server_default='milestone', nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_job_locations_job_id'), 'job_locations', ['job_id'], unique=False)
    op.create_index('idx_job_locations_job_time', 'job_locations', ['job_id', 'recorded_at'], unique=False)

    op.create_table(
        'site_visit_reports',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('engineer_name', sa.String(length=255), nullable=False),
        sa.Column('onsite_contact_name', sa.String(length=255), nullable=True),
        sa.Column('work_completed', sa.Text(), nullable=True),
        sa.Column('findings', sa.Text(), nullable=True),
        sa.Column('recommendations', sa.Text(), nullable=True),
        sa.Column('issue_resolved', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('signature_data', sa.Text(), nullable=False),
        sa.Column('visit_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id'),
    )

    op.create_table(
        'supplier_rates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('supplier_id', sa.Integer(), nullable=False),
        sa.Column('service_type', sa.String(length=100), nullable=False),
        sa.Column('service_level', sa.String(length=30), nullable=False),
        sa.Column('country_code', sa.String(length=2), nullable=False),
        sa.Column('city_name', sa.String(length=100), nullable=True),
        sa.Column('hourly_rate_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), server_default='USD', nullable=False),
        sa.Column('offers_out_of_hours', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('is_serviceable', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('base_latitude', sa.Float(), nullable=True),
        sa.Column('base_longitude', sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_supplier_rates_supplier_id'), 'supplier_rates', ['supplier_id'], unique=False)
    op.create_index(op.f('ix_supplier_rates_is_serviceable'), 'supplier_rates', ['is_serviceable'], unique=False)
    op.create_index(
        'idx_supplier_rates_lookup',
        'supplier_rates',
        ['service_type', 'service_level', 'country_code', 'city_name'],
        unique=False,
    )
    op.create_index(
        'idx_supplier_rates_unique',
        'supplier_rates',
        ['supplier_id', 'service_type', 'service_level', 'country_code', 'city_name'],
        unique=True,
    )

    op.create_table(
        'outbox_events',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('aggregate_id', sa.String(length=64), nullable=False),
        sa.Column('event_data', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='pending', nullable=False),
        sa.Column('retry_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('max_retries', sa.Integer(), server_default='3', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_outbox_events_event_type'), 'outbox_events', ['event_type'], unique=False)
    op.create_index(op.f('ix_outbox_events_aggregate_id'), 'outbox_events', ['aggregate_id'], unique=False)
    op.create_index('idx_outbox_status_created', 'outbox_events', ['status', 'created_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('outbox_events')
    op.drop_table('supplier_rates')
    op.drop_table('site_visit_reports')
    op.drop_table('job_locations')
    op.drop_table('job_status_history')
    op.drop_table('jobs')
