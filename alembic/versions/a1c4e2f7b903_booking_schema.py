"""booking schema

Revision ID: a1c4e2f7b903
Revises:
Create Date: 2026-10-19 10:12:41.204117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f7b903'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Tenants and owners
    op.create_table(
        'businesses',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('public_slug', sa.String(100), nullable=False, unique=True),
        sa.Column('telegram_chat_id', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_businesses_public_slug', 'businesses', ['public_slug'])

    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_users_business_id', 'users', ['business_id'])

    # 2. Catalog and availability
    op.create_table(
        'services',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('duration_minutes', sa.Integer, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('display_order', sa.Integer, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )
    op.create_index('ix_services_business_id', 'services', ['business_id'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    op.create_table(
        'availability_rules',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer, nullable=False),
        sa.Column('is_available', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('time_windows', sa.JSON, nullable=False),
        sa.Column('slot_interval_minutes', sa.Integer, nullable=False, server_default='30'),
        sa.UniqueConstraint('business_id', 'day_of_week', name='uq_availability_rule_day')
    )

    op.create_table(
        'availability_dates',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('time_windows', sa.JSON, nullable=False),
        sa.Column('slot_interval_minutes', sa.Integer, nullable=False, server_default='30'),
        sa.UniqueConstraint('business_id', 'date', name='uq_availability_date')
    )
    op.create_index('ix_availability_dates_date', 'availability_dates', ['date'])

    op.create_table(
        'calendar_exceptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('reason', sa.String, nullable=True),
        sa.Column('time_windows', sa.JSON, nullable=True)
    )
    op.create_index('ix_calendar_exceptions_date', 'calendar_exceptions', ['date'])

    # 3. Appointments
    op.create_table(
        'appointments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id'), nullable=False),
        sa.Column('service_id', sa.String(36), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('service_name', sa.String(200), nullable=False),
        sa.Column('duration_minutes', sa.Integer, nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('client_name', sa.String(50), nullable=False),
        sa.Column('client_phone', sa.String(15), nullable=False),
        sa.Column('status', sa.String(30), nullable=False, server_default='confirmed'),
        sa.Column('notifications_sent', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_by', sa.String(20), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True)
    )
    op.create_index('ix_appointments_business_date_status', 'appointments', ['business_id', 'date', 'status'])
    op.create_index('ix_appointments_business_phone_status', 'appointments', ['business_id', 'client_phone', 'status'])

    # 4. Booking queue
    op.create_table(
        'booking_queues',
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('current_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('last_position', sa.Integer, nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )

    op.create_table(
        'queue_clients',
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('session_id', sa.String(100), primary_key=True),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('ticket', sa.Integer, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='waiting'),
        sa.Column('client_ip', sa.String(45), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_activity', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_queue_clients_business_position', 'queue_clients', ['business_id', 'position'])
    op.create_index('ix_queue_clients_last_activity', 'queue_clients', ['last_activity'])

    # 5. No-show register
    op.create_table(
        'problem_clients',
        sa.Column('business_id', sa.String(36), sa.ForeignKey('businesses.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('client_phone', sa.String(15), primary_key=True),
        sa.Column('client_name', sa.String(50), nullable=False),
        sa.Column('no_show_count', sa.Integer, nullable=False, server_default='0'),
        sa.Column('appointment_ids', sa.JSON, nullable=False),
        sa.Column('is_blocked', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('last_no_show_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('added_at', sa.DateTime(timezone=True), server_default=sa.text('now()'))
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('problem_clients')
    op.drop_index('ix_queue_clients_last_activity', table_name='queue_clients')
    op.drop_index('ix_queue_clients_business_position', table_name='queue_clients')
    op.drop_table('queue_clients')
    op.drop_table('booking_queues')
    op.drop_index('ix_appointments_business_phone_status', table_name='appointments')
    op.drop_index('ix_appointments_business_date_status', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('ix_calendar_exceptions_date', table_name='calendar_exceptions')
    op.drop_table('calendar_exceptions')
    op.drop_index('ix_availability_dates_date', table_name='availability_dates')
    op.drop_table('availability_dates')
    op.drop_table('availability_rules')
    op.drop_index('ix_services_is_active', table_name='services')
    op.drop_index('ix_services_business_id', table_name='services')
    op.drop_table('services')
    op.drop_index('ix_users_business_id', table_name='users')
    op.drop_table('users')
    op.drop_index('ix_businesses_public_slug', table_name='businesses')
    op.drop_table('businesses')
